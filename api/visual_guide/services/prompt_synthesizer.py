from dataclasses import asdict, dataclass
from typing import Dict, List

from ..models.guideline import VisualGuideRules

NEGATIVE_PROMPT = (
    "blurry, low quality, low resolution, distorted proportions, oversaturated colours, "
    "cluttered composition, watermark, text artifacts, inconsistent branding"
)


@dataclass(frozen=True)
class GenerationPrompts:
    """Positive and exclusionary prompts for an image-generation request."""
    base_prompt: str
    negative_prompt: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def synthesize_prompts(guide: VisualGuideRules) -> GenerationPrompts:
    """Build generation prompts from a canonical guideline.

    The base prompt leads with the first image category, then style
    direction, palette, producer notes and every prompting-guidance item.
    """
    category = guide.types_of_images[0]
    style = guide.style_direction
    notes = guide.producer_notes

    subject = [part for part in (category.subject_matter, category.context) if part]
    parts: List[str] = [
        ", ".join(subject + [f"{category.category_name} imagery"]),
        f"Lighting: {style.lighting}",
        f"Colour: {style.colour}",
        f"Composition: {style.composition}",
        f"Format: {style.format}",
        f"Primary colours: {', '.join(guide.palette.primary)}",
        f"Secondary colours: {', '.join(guide.palette.secondary)}",
        f"Camera: {notes.camera}",
        f"Lighting setup: {notes.lighting}",
        f"Angle: {notes.angle}",
        f"Scene: {notes.scene}",
        *guide.prompting_guidance,
    ]

    base_prompt = ". ".join(part.strip().rstrip(".") for part in parts if part.strip())
    return GenerationPrompts(base_prompt=base_prompt + ".", negative_prompt=NEGATIVE_PROMPT)
