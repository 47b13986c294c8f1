from typing import Optional

from .locales import language_name_for

VISUAL_ANALYSIS_SCHEMA = """{
  "general_principles": ["Overarching rules every brand image follows"],
  "style_direction": {
    "lighting": "Lighting style and quality",
    "colour": "How colour is used across images",
    "composition": "Recurring composition and framing patterns",
    "format": "Preferred formats and aspect ratios"
  },
  "palette": {
    "primary": ["#RRGGBB"],
    "secondary": ["#RRGGBB"],
    "neutrals": ["#RRGGBB"]
  },
  "people_and_emotions": ["How people appear and which emotions they convey"],
  "types_of_images": [
    {
      "category_name": "Name of the image category",
      "subject_matter": "What the images show",
      "context": "Where and when the scene takes place",
      "examples": ["Concrete example shots"]
    }
  ],
  "neuro_triggers": ["Neuro-marketing triggers the imagery relies on"],
  "variation_rules": ["How images may vary while staying on brand"],
  "prompting_guidance": ["Instructions for prompting an AI image generator"],
  "producer_notes": {
    "camera": "Camera body, lens and settings",
    "lighting": "Lighting setup on set",
    "angle": "Camera angle",
    "scene": "Scene and styling direction"
  }
}"""

VISUAL_ANALYSIS_INSTRUCTIONS = """Analyze these brand images and extract comprehensive visual brand guidelines.

Requirements:
- Write every text value in {language}.
- general_principles: the overarching rules that make these images recognizably on-brand.
- style_direction: describe lighting, colour, composition and format.
- palette: primary, secondary and neutral colours as hex codes (#RRGGBB) sampled from the images.
- people_and_emotions: how people are portrayed and the emotions they convey.
- types_of_images: group the images into categories with subject matter, context and example shots.
- neuro_triggers: the psychological triggers the imagery uses.
- variation_rules: how new images may vary while staying consistent.
- prompting_guidance: concrete instructions for generating matching images with an AI model.
- producer_notes: camera, lighting setup, angle and scene direction for a photographer.
- Every list must contain at least one item and every text field must be filled.

Return a single fenced ```json code block matching exactly this structure:
{schema}"""


def build_analysis_prompt(locale: str, brand_context: Optional[str] = None) -> str:
    """Build the analysis instruction sent alongside the brand images.

    The target language is named explicitly; unknown locales are asked for
    English (US).
    """
    prompt = VISUAL_ANALYSIS_INSTRUCTIONS.format(
        language=language_name_for(locale),
        schema=VISUAL_ANALYSIS_SCHEMA,
    )
    if brand_context and brand_context.strip():
        prompt = f"Brand context: {brand_context.strip()}\n\n{prompt}"
    return prompt
