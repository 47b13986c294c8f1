"""Turn raw vision model output into a partial guideline.

The model is asked for a fenced JSON block but does not always comply, so
parsing happens in two tiers: strict JSON (fenced or bare) first, then a
line-oriented heuristic over headings and bullets. Neither tier validates
the result; that is the normalizer's job. ``parse_response`` never raises.
"""

import json
import re
from dataclasses import fields
from typing import Any, Dict, List, Optional, Tuple

from ..core.structured_logging import LoggerFactory
from ..models.guideline import PartialGuideline
from .locales import all_labels

logger = LoggerFactory.get_logger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_BULLETS = ("-", "•")

Path = Tuple[str, ...]

# Record-level headings only switch context; their own lines are not stored.
_GROUP_SECTIONS = {"style_direction", "producer_notes"}

_KEYWORDS: Dict[str, Optional[Path]] = {
    "general principles": ("general_principles",),
    "principles": ("general_principles",),
    "do's": ("general_principles",),
    "dos": ("general_principles",),
    "don'ts": ("variation_rules",),
    "donts": ("variation_rules",),
    "style direction": ("style_direction",),
    "visual style": ("style_direction",),
    "lighting": ("style_direction", "lighting"),
    "colour": ("style_direction", "colour"),
    "color": ("style_direction", "colour"),
    "composition": ("style_direction", "composition"),
    "format": ("style_direction", "format"),
    "palette": ("palette", "primary"),
    "colour palette": ("palette", "primary"),
    "color palette": ("palette", "primary"),
    "primary": ("palette", "primary"),
    "secondary": ("palette", "secondary"),
    "neutrals": ("palette", "neutrals"),
    "people and emotions": ("people_and_emotions",),
    "mood": ("people_and_emotions",),
    "types of images": ("types_of_images",),
    "subjects": ("types_of_images",),
    "neuro triggers": ("neuro_triggers",),
    "neuro-triggers": ("neuro_triggers",),
    "variation rules": ("variation_rules",),
    "prompting guidance": ("prompting_guidance",),
    "base prompts": ("prompting_guidance",),
    "producer notes": ("producer_notes",),
    "camera": ("producer_notes", "camera"),
    "angle": ("producer_notes", "angle"),
    "scene": ("producer_notes", "scene"),
    "textures": ("textures",),
    "negative prompts": ("negative_prompts",),
}

# Rendered document headings, in every supported locale, map back onto the
# same fields so a previously rendered guideline can be re-read.
_LABEL_PATHS: Dict[str, Optional[Path]] = {
    "title": None,
    "general_principles": ("general_principles",),
    "style_direction": ("style_direction",),
    "lighting": ("style_direction", "lighting"),
    "colour": ("style_direction", "colour"),
    "composition": ("style_direction", "composition"),
    "format": ("style_direction", "format"),
    "palette": ("palette", "primary"),
    "primary": ("palette", "primary"),
    "secondary": ("palette", "secondary"),
    "neutrals": ("palette", "neutrals"),
    "people_and_emotions": ("people_and_emotions",),
    "types_of_images": ("types_of_images",),
    "neuro_triggers": ("neuro_triggers",),
    "variation_rules": ("variation_rules",),
    "prompting_guidance": ("prompting_guidance",),
    "producer_notes": ("producer_notes",),
    "camera": ("producer_notes", "camera"),
    "producer_lighting": ("producer_notes", "lighting"),
    "angle": ("producer_notes", "angle"),
    "scene": ("producer_notes", "scene"),
}


def _normalize_title(title: str) -> str:
    title = title.replace("’", "'").strip().strip("*_").strip().lower()
    return " ".join(title.split())


def _build_headings() -> Dict[str, Optional[Path]]:
    headings = dict(_KEYWORDS)
    for labels in all_labels().values():
        for field in fields(labels):
            if field.name not in _LABEL_PATHS:
                continue
            headings.setdefault(_normalize_title(getattr(labels, field.name)), _LABEL_PATHS[field.name])
    return headings


_HEADINGS = _build_headings()


def _build_category_labels() -> Dict[str, str]:
    labels = {"subject matter": "subject_matter", "context": "context"}
    for locale_labels in all_labels().values():
        labels.setdefault(_normalize_title(locale_labels.subject_matter), "subject_matter")
        labels.setdefault(_normalize_title(locale_labels.context), "context")
    return labels


# "**Subject Matter:** ..." style lines inside an image category
_CATEGORY_LABELS = _build_category_labels()


def extract_json_candidate(raw: str) -> str:
    """Return the body of the first ```json fence, or ``raw`` unchanged."""
    match = _FENCED_JSON.search(raw)
    if match:
        return match.group(1)
    return raw


def parse_response(raw: Any) -> PartialGuideline:
    """Parse model output into a partial guideline; ``{}`` when nothing is found."""
    if not raw or not isinstance(raw, str):
        return {}

    candidate = extract_json_candidate(raw)
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError):
        data = None

    if isinstance(data, dict):
        return data

    logger.info("Model output is not a JSON object, using heuristic text parser", raw_length=len(raw))
    return parse_text_response(raw)


def _match_heading(line: str, group: Optional[str]):
    """Return ``(section, group, inline_value)`` when ``line`` is a heading."""
    text = line.lstrip("#").strip().strip("*_").strip()
    title, _, rest = text.partition(":")
    key = _normalize_title(title)
    if key not in _HEADINGS:
        return None

    inline = rest.strip().strip("*_").strip()
    path = _HEADINGS[key]
    if path is None:
        return None, None, ""
    if len(path) == 1 and path[0] in _GROUP_SECTIONS:
        return None, path[0], ""
    # A bare "Lighting" heading inside producer notes means the lighting setup
    if path == ("style_direction", "lighting") and group == "producer_notes":
        path = ("producer_notes", "lighting")
    return path, (path[0] if len(path) > 1 else None), inline


def _parent(result: Dict[str, Any], path: Path) -> Dict[str, Any]:
    node = result
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    return node


def _append_item(result: Dict[str, Any], path: Path, item: str) -> None:
    parent = _parent(result, path)
    current = parent.get(path[-1])
    if current is None:
        parent[path[-1]] = [item]
    elif isinstance(current, list):
        current.append(item)
    # A scalar already set for this section wins; the bullet is dropped


def _assign_scalar(result: Dict[str, Any], path: Path, value: str) -> None:
    parent = _parent(result, path)
    if isinstance(parent.get(path[-1]), list):
        return
    parent[path[-1]] = value


def _match_category_label(line: str) -> Optional[Tuple[str, str]]:
    """``("subject_matter", value)`` for a ``**Subject Matter:** value`` line."""
    text = line.strip().strip("*_").strip()
    title, sep, rest = text.partition(":")
    if not sep:
        return None
    key = _CATEGORY_LABELS.get(_normalize_title(title))
    if key is None:
        return None
    return key, rest.strip().strip("*_").strip()


def _split_values(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_text_response(content: str) -> PartialGuideline:
    """Heuristically extract sections and bullet lists from free text.

    A heading line moves the current section; ``-``/``•`` lines append to the
    current section's list unless a scalar is already stored there; any other
    line overwrites the section's scalar value unless a list has already been
    started there.

    Documents produced by ``render_markdown`` are read back field by field:
    ``- **Primary Colors:** a, b`` bullets fill their palette group, and
    ``### name`` headings under the image types section open a category whose
    label lines and bullets fill its subject matter, context and examples.
    """
    result: Dict[str, Any] = {}
    section: Optional[Path] = None
    group: Optional[str] = None
    category: Optional[Dict[str, Any]] = None

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("```"):
            continue

        heading = _match_heading(trimmed, group)
        if heading is not None:
            section, group, inline = heading
            category = None
            if section is not None and inline:
                _assign_scalar(result, section, inline)
            continue

        if section is None:
            continue

        if section == ("types_of_images",):
            if trimmed.startswith("#"):
                name = trimmed.lstrip("#").strip()
                if name:
                    category = {"category_name": name, "examples": []}
                    if not isinstance(result.get("types_of_images"), list):
                        result["types_of_images"] = []
                    result["types_of_images"].append(category)
                continue
            if category is not None:
                if trimmed.startswith(_BULLETS):
                    item = trimmed[1:].strip()
                    if item:
                        category["examples"].append(item)
                else:
                    label = _match_category_label(trimmed)
                    if label is not None and label[1]:
                        category[label[0]] = label[1]
                continue

        if trimmed.startswith(_BULLETS):
            item = trimmed[1:].strip()
            if not item:
                continue
            if item.startswith("**"):
                labelled = _match_heading(item, group)
                if labelled is not None and labelled[0] is not None and labelled[2]:
                    path, _, value = labelled
                    if path[0] == "palette":
                        _parent(result, path)[path[-1]] = _split_values(value)
                    else:
                        _assign_scalar(result, path, value)
                    continue
            _append_item(result, section, item)
        else:
            _assign_scalar(result, section, trimmed)

    return result
