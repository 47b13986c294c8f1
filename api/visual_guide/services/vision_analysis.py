"""Brand image analysis pipeline.

invoke -> parse -> validate -> normalize -> {render markdown, synthesize prompts}
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.structured_logging import LoggerFactory, log_business_event
from ..models.exceptions import GuidelineValidationError
from ..models.guideline import VisualGuideRules
from .markdown_renderer import render_markdown
from .normalizer import has_principal_content, normalize
from .prompt_synthesizer import GenerationPrompts, synthesize_prompts
from .response_parser import parse_response
from .vision_client import VisionClient

logger = LoggerFactory.get_logger(__name__)


@dataclass
class AnalysisResult:
    """Everything one analysis produces."""
    visual_guide: VisualGuideRules
    guide_md: str
    prompts: GenerationPrompts
    source_image_count: int


class GuidelineStore(Protocol):
    """External document store keyed by session; upsert replaces the guideline."""

    async def upsert_visual_guide(self, record: Dict[str, Any]) -> None:
        ...


async def analyze_images(
    client: VisionClient,
    image_urls: Sequence[str],
    locale: str,
    brand_context: Optional[str] = None,
    max_retries: Optional[int] = None,
) -> AnalysisResult:
    """Run the full analysis for one set of brand images.

    Raises ``AnalysisFailed`` (or a subclass) on any failure; once the parsed
    output has recognizable content, normalization always succeeds.
    """
    raw = await client.invoke(image_urls, locale, brand_context, max_retries=max_retries)

    partial = parse_response(raw)
    if not has_principal_content(partial):
        logger.warning("Vision output had no recognizable guideline content", raw_length=len(raw))
        raise GuidelineValidationError(
            "Vision analysis returned no recognizable guideline content", raw_length=len(raw)
        )

    guide = normalize(partial)
    result = AnalysisResult(
        visual_guide=guide,
        guide_md=render_markdown(guide, locale),
        prompts=synthesize_prompts(guide),
        source_image_count=len(image_urls),
    )
    log_business_event(logger, "visual_guide_generated", locale=locale, image_count=len(image_urls))
    return result


def build_guide_record(
    session_id: str,
    guide: VisualGuideRules,
    source_image_count: int,
    analyzed_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Shape a guideline for the external document store."""
    analyzed_at = analyzed_at or datetime.now(timezone.utc)
    return {
        "session_id": session_id,
        "rules_json": guide.model_dump(),
        "derived_palettes_json": {
            "source_image_count": source_image_count,
            "analyzed_at": analyzed_at.isoformat(),
        },
    }
