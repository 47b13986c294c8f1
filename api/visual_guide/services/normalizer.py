"""Convert a partial guideline into the canonical ``VisualGuideRules``.

This is the only place a partial becomes total. Every field has exactly one
default in ``DEFAULT_GUIDELINE``; a field takes its default when it is
missing, ``None``, empty, or not of the expected shape. Present values are
copied through as-is, so normalizing an already canonical guideline is a
no-op.
"""

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional, Union

from ..models.guideline import GUIDELINE_FIELDS, PartialGuideline, VisualGuideRules

DEFAULT_CATEGORY_EXAMPLES = ["Brand imagery shown in a natural, real-world setting"]

DEFAULT_GUIDELINE: Dict[str, Any] = {
    "general_principles": [
        "Keep every image consistent with the brand's palette and tone",
        "Favour authentic, uncluttered imagery over staged stock photography",
    ],
    "style_direction": {
        "lighting": "Natural, soft lighting",
        "colour": "Use the brand palette consistently with restrained accents",
        "composition": "Balanced composition with a clear focal point",
        "format": "Landscape and square formats suitable for web and social media",
    },
    "palette": {
        "primary": ["#000000"],
        "secondary": ["#FFFFFF"],
        "neutrals": ["#F0F0F0"],
    },
    "people_and_emotions": ["Genuine, approachable people showing natural expressions"],
    "types_of_images": [
        {
            "category_name": "Lifestyle",
            "subject_matter": "Products and people in context",
            "context": "Everyday settings relevant to the brand",
            "examples": list(DEFAULT_CATEGORY_EXAMPLES),
        }
    ],
    "neuro_triggers": ["Familiar, relatable scenes that build trust"],
    "variation_rules": ["Vary framing and subject while keeping palette and lighting consistent"],
    "prompting_guidance": ["Describe subject, setting, lighting and colour palette explicitly"],
    "producer_notes": {
        "camera": "Full-frame camera with a 35mm or 50mm lens",
        "lighting": "Soft key light with gentle fill",
        "angle": "Eye-level",
        "scene": "Uncluttered, real-world environments",
    },
}

_LIST_FIELDS = (
    "general_principles",
    "people_and_emotions",
    "neuro_triggers",
    "variation_rules",
    "prompting_guidance",
)
_RECORD_SCALARS = {
    "style_direction": ("lighting", "colour", "composition", "format"),
    "producer_notes": ("camera", "lighting", "angle", "scene"),
}
_PALETTE_GROUPS = ("primary", "secondary", "neutrals")


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _string_list(value: Any) -> List[str]:
    """Keep the non-empty string items of ``value``; a lone string counts as one item."""
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [item for item in value if _text(item) is not None]


def _list_or_default(value: Any, default: List[Any]) -> List[Any]:
    items = _string_list(value)
    return items if items else deepcopy(default)


def _scalar(value: Any) -> Optional[str]:
    """A string as-is, or the items of a bulleted list joined into one line."""
    if isinstance(value, list):
        items = _string_list(value)
        return "; ".join(items) if items else None
    return _text(value)


def _record(value: Any, keys, defaults: Mapping[str, str]) -> Dict[str, str]:
    source = value if isinstance(value, Mapping) else {}
    return {key: _scalar(source.get(key)) or defaults[key] for key in keys}


def _palette(value: Any) -> Dict[str, List[str]]:
    source = value if isinstance(value, Mapping) else {}
    defaults = DEFAULT_GUIDELINE["palette"]
    return {group: _list_or_default(source.get(group), defaults[group]) for group in _PALETTE_GROUPS}


def _category(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, str):
        value = {"category_name": value}
    if not isinstance(value, Mapping):
        return None
    name = _text(value.get("category_name"))
    if name is None:
        return None
    return {
        "category_name": name,
        "subject_matter": _text(value.get("subject_matter")),
        "context": _text(value.get("context")),
        "examples": _list_or_default(value.get("examples"), DEFAULT_CATEGORY_EXAMPLES),
    }


def _types_of_images(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, (str, Mapping)):
        value = [value]
    if not isinstance(value, list):
        return deepcopy(DEFAULT_GUIDELINE["types_of_images"])
    categories = [c for c in (_category(item) for item in value) if c is not None]
    return categories or deepcopy(DEFAULT_GUIDELINE["types_of_images"])


def normalize(partial: Union[PartialGuideline, Mapping[str, Any], VisualGuideRules, None]) -> VisualGuideRules:
    """Fill every missing or unusable field with its default."""
    if isinstance(partial, VisualGuideRules):
        partial = partial.model_dump()
    if not isinstance(partial, Mapping):
        partial = {}

    data: Dict[str, Any] = {
        field: _list_or_default(partial.get(field), DEFAULT_GUIDELINE[field])
        for field in _LIST_FIELDS
    }
    for field, keys in _RECORD_SCALARS.items():
        data[field] = _record(partial.get(field), keys, DEFAULT_GUIDELINE[field])
    data["palette"] = _palette(partial.get("palette"))
    data["types_of_images"] = _types_of_images(partial.get("types_of_images"))

    return VisualGuideRules(**data)


def _has_content(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Mapping):
        return any(_has_content(v) for v in value.values())
    if isinstance(value, list):
        return any(_has_content(v) for v in value)
    return True


def has_principal_content(partial: Mapping[str, Any]) -> bool:
    """True when at least one guideline field carries a non-empty value."""
    if not isinstance(partial, Mapping):
        return False
    return any(_has_content(partial.get(field)) for field in GUIDELINE_FIELDS)
