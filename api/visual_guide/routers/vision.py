from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ..core.structured_logging import LoggerFactory
from ..models.schemas import (
    GenerateTestImagesRequest,
    GenerateTestImagesResponse,
    GenerationPromptsResponse,
    VisionAnalyseRequest,
    VisionAnalyseResponse,
)
from ..services.image_generation import ImageGenerationClient
from ..services.vision_analysis import GuidelineStore, analyze_images, build_guide_record
from ..services.vision_client import VisionClient

logger = LoggerFactory.get_logger(__name__)

router = APIRouter(prefix="/vision", tags=["vision"])


def get_vision_client(request: Request) -> VisionClient:
    client = getattr(request.app.state, "vision_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail={"error": "Vision client not initialized"})
    return client


def get_image_client(request: Request) -> ImageGenerationClient:
    client = getattr(request.app.state, "image_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail={"error": "Image generation client not initialized"})
    return client


def get_guide_store(request: Request) -> Optional[GuidelineStore]:
    return getattr(request.app.state, "guide_store", None)


@router.post("/analyse", response_model=VisionAnalyseResponse)
async def analyse(
    body: VisionAnalyseRequest = Body(...),
    client: VisionClient = Depends(get_vision_client),
    store: Optional[GuidelineStore] = Depends(get_guide_store),
):
    """
    Analyse brand images into a visual guideline.

    Flow:
    1. Fetch every image concurrently and send one combined vision request
    2. Parse the answer (JSON first, heuristic text fallback)
    3. Normalize into the canonical guideline
    4. Render markdown and synthesize generation prompts
    5. Replace the session's stored guideline when a store is configured
    """
    session_id = str(body.session_id)
    logger.with_context(session_id=session_id)

    result = await analyze_images(client, body.image_urls, body.locale, body.brand_context)

    if store is not None:
        record = build_guide_record(session_id, result.visual_guide, result.source_image_count)
        await store.upsert_visual_guide(record)
        logger.info("Visual guide saved", image_count=result.source_image_count)

    return VisionAnalyseResponse(
        visual_guide=result.visual_guide,
        guide_md=result.guide_md,
        prompts=GenerationPromptsResponse(**result.prompts.to_dict()),
    )


@router.post("/test-image", response_model=GenerateTestImagesResponse)
async def create_test_images(
    body: GenerateTestImagesRequest = Body(...),
    client: ImageGenerationClient = Depends(get_image_client),
):
    """Generate test images from a guideline's base and negative prompts."""
    images = await client.generate_test_images(body.base_prompt, body.negative_prompt, body.count)
    return GenerateTestImagesResponse(images=images)
