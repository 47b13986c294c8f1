"""Pydantic models for API request and response schemas."""

from typing import List, Literal, Optional
from urllib.parse import urlparse
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .guideline import VisualGuideRules

Locale = Literal["en-US", "en-GB", "pt-BR", "pt-PT"]


class VisionAnalyseRequest(BaseModel):
    """Request to analyse brand images into a visual guideline."""

    image_urls: List[str] = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Brand image URLs (HTTPS only)",
    )
    locale: Locale = Field(..., description="Output language of the guideline")
    brand_context: Optional[str] = Field(
        None,
        max_length=4000,
        description="Optional free-text brand description passed to the model",
    )
    session_id: UUID = Field(..., description="Session the guideline belongs to")

    @field_validator("image_urls")
    @classmethod
    def validate_image_urls(cls, v):
        """Validate that all image URLs are absolute HTTPS URLs."""
        for url in v:
            parsed = urlparse(url)
            if parsed.scheme != "https" or not parsed.netloc:
                raise ValueError(f"Image URL must be an absolute HTTPS URL: {url}")
        return v


class GenerationPromptsResponse(BaseModel):
    base_prompt: str
    negative_prompt: str


class VisionAnalyseResponse(BaseModel):
    """Canonical guideline, its markdown rendering and generation prompts."""

    visual_guide: VisualGuideRules
    guide_md: str
    prompts: GenerationPromptsResponse


class GenerateTestImagesRequest(BaseModel):
    """Request to generate test images from guideline prompts."""

    base_prompt: str = Field(..., min_length=1, max_length=8000)
    negative_prompt: Optional[str] = Field(None, max_length=2000)
    count: int = Field(1, ge=1, le=4, description="Number of images to generate")
    session_id: UUID


class GeneratedImage(BaseModel):
    url: str
    storage_path: str


class GenerateTestImagesResponse(BaseModel):
    images: List[GeneratedImage]
