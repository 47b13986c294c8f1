"""Visual brand guideline models.

``VisualGuideRules`` is the canonical, fully populated guideline. It is only
ever built by ``services.normalizer.normalize``; everything upstream of the
normalizer works with ``PartialGuideline``, which mirrors the same keys but
promises nothing about presence or shape.
"""

from typing import Any, List, Optional, TypedDict

from pydantic import BaseModel, Field


class StyleDirection(BaseModel):
    """Overall photographic style."""

    lighting: str = Field(..., min_length=1, description="Lighting style")
    colour: str = Field(..., min_length=1, description="How colour is used")
    composition: str = Field(..., min_length=1, description="Composition patterns")
    format: str = Field(..., min_length=1, description="Preferred formats and aspect ratios")


class Palette(BaseModel):
    """Brand colour palette as hex strings."""

    primary: List[str] = Field(..., min_length=1)
    secondary: List[str] = Field(..., min_length=1)
    neutrals: List[str] = Field(..., min_length=1)


class ImageCategory(BaseModel):
    """One type of image the brand uses."""

    category_name: str = Field(..., min_length=1)
    subject_matter: Optional[str] = None
    context: Optional[str] = None
    examples: List[str] = Field(..., min_length=1)


class ProducerNotes(BaseModel):
    """Guidance for photographers and image-generation prompting."""

    camera: str = Field(..., min_length=1)
    lighting: str = Field(..., min_length=1)
    angle: str = Field(..., min_length=1)
    scene: str = Field(..., min_length=1)


class VisualGuideRules(BaseModel):
    """Canonical visual brand guideline; every list non-empty, every scalar set."""

    general_principles: List[str] = Field(..., min_length=1)
    style_direction: StyleDirection
    palette: Palette
    people_and_emotions: List[str] = Field(..., min_length=1)
    types_of_images: List[ImageCategory] = Field(..., min_length=1)
    neuro_triggers: List[str] = Field(..., min_length=1)
    variation_rules: List[str] = Field(..., min_length=1)
    prompting_guidance: List[str] = Field(..., min_length=1)
    producer_notes: ProducerNotes


class PartialGuideline(TypedDict, total=False):
    """Parser output: any subset of the guideline keys, values unchecked."""

    general_principles: Any
    style_direction: Any
    palette: Any
    people_and_emotions: Any
    types_of_images: Any
    neuro_triggers: Any
    variation_rules: Any
    prompting_guidance: Any
    producer_notes: Any
    # Headings from older prompt formats; kept so their bullets do not leak
    # into the preceding section, ignored by the normalizer.
    textures: Any
    negative_prompts: Any


GUIDELINE_FIELDS = (
    "general_principles",
    "style_direction",
    "palette",
    "people_and_emotions",
    "types_of_images",
    "neuro_triggers",
    "variation_rules",
    "prompting_guidance",
    "producer_notes",
)
