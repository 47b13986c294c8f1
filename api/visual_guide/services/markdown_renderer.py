"""Render a canonical guideline as a markdown document.

Output depends only on the guideline and the locale's heading labels, so the
same input always renders to the same bytes. Data values are never
translated or rewritten.
"""

from typing import List

from ..models.guideline import VisualGuideRules
from .locales import get_labels


def _bullets(items: List[str]) -> List[str]:
    return [f"- {item}" for item in items]


def _subsection(heading: str, body: str) -> List[str]:
    return [f"### {heading}", body, ""]


def render_markdown(guide: VisualGuideRules, locale: str) -> str:
    """Render ``guide`` with headings for ``locale`` (``en-US`` when unsupported)."""
    labels = get_labels(locale)
    style = guide.style_direction
    notes = guide.producer_notes

    lines: List[str] = [f"# {labels.title}", ""]

    lines += [f"## {labels.general_principles}", *_bullets(guide.general_principles), ""]

    lines += [f"## {labels.style_direction}", ""]
    lines += _subsection(labels.lighting, style.lighting)
    lines += _subsection(labels.colour, style.colour)
    lines += _subsection(labels.composition, style.composition)
    lines += _subsection(labels.format, style.format)

    lines += [
        f"## {labels.palette}",
        f"- **{labels.primary}:** {', '.join(guide.palette.primary)}",
        f"- **{labels.secondary}:** {', '.join(guide.palette.secondary)}",
        f"- **{labels.neutrals}:** {', '.join(guide.palette.neutrals)}",
        "",
    ]

    lines += [f"## {labels.people_and_emotions}", *_bullets(guide.people_and_emotions), ""]

    lines += [f"## {labels.types_of_images}", ""]
    for category in guide.types_of_images:
        lines.append(f"### {category.category_name}")
        if category.subject_matter:
            lines.append(f"**{labels.subject_matter}:** {category.subject_matter}")
        if category.context:
            lines.append(f"**{labels.context}:** {category.context}")
        lines += [*_bullets(category.examples), ""]

    lines += [f"## {labels.neuro_triggers}", *_bullets(guide.neuro_triggers), ""]
    lines += [f"## {labels.variation_rules}", *_bullets(guide.variation_rules), ""]
    lines += [f"## {labels.prompting_guidance}", *_bullets(guide.prompting_guidance), ""]

    lines += [f"## {labels.producer_notes}", ""]
    lines += _subsection(labels.camera, notes.camera)
    lines += _subsection(labels.producer_lighting, notes.lighting)
    lines += _subsection(labels.angle, notes.angle)
    lines += _subsection(labels.scene, notes.scene)

    return "\n".join(lines).rstrip("\n") + "\n"
