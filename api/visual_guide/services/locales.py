"""Locale table shared by the prompt builder and the markdown renderer.

Unknown locale codes fall back to ``en-US`` everywhere.
"""

from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_LOCALE = "en-US"
SUPPORTED_LOCALES = ("en-US", "en-GB", "pt-BR", "pt-PT")


@dataclass(frozen=True)
class SectionLabels:
    """Headings used when rendering a guideline document."""
    language_name: str
    title: str
    general_principles: str
    style_direction: str
    lighting: str
    colour: str
    composition: str
    format: str
    palette: str
    primary: str
    secondary: str
    neutrals: str
    people_and_emotions: str
    types_of_images: str
    subject_matter: str
    context: str
    neuro_triggers: str
    variation_rules: str
    prompting_guidance: str
    producer_notes: str
    camera: str
    producer_lighting: str
    angle: str
    scene: str


_LABELS: Dict[str, SectionLabels] = {
    "en-US": SectionLabels(
        language_name="English (US)",
        title="Visual Brand Guidelines",
        general_principles="General Principles",
        style_direction="Style Direction",
        lighting="Lighting",
        colour="Color Approach",
        composition="Composition",
        format="Format",
        palette="Color Palette",
        primary="Primary Colors",
        secondary="Secondary Colors",
        neutrals="Neutral Colors",
        people_and_emotions="People and Emotions",
        types_of_images="Types of Images",
        subject_matter="Subject Matter",
        context="Context",
        neuro_triggers="Neuro-Marketing Triggers",
        variation_rules="Variation Rules",
        prompting_guidance="Prompting Guidance for AI Image Generation",
        producer_notes="Producer Notes",
        camera="Camera Setup",
        producer_lighting="Lighting Setup",
        angle="Camera Angle",
        scene="Scene Direction",
    ),
    "en-GB": SectionLabels(
        language_name="English (UK)",
        title="Visual Brand Guidelines",
        general_principles="General Principles",
        style_direction="Style Direction",
        lighting="Lighting",
        colour="Colour Approach",
        composition="Composition",
        format="Format",
        palette="Colour Palette",
        primary="Primary Colours",
        secondary="Secondary Colours",
        neutrals="Neutral Colours",
        people_and_emotions="People and Emotions",
        types_of_images="Types of Images",
        subject_matter="Subject Matter",
        context="Context",
        neuro_triggers="Neuro-Marketing Triggers",
        variation_rules="Variation Rules",
        prompting_guidance="Prompting Guidance for AI Image Generation",
        producer_notes="Producer Notes",
        camera="Camera Setup",
        producer_lighting="Lighting Setup",
        angle="Camera Angle",
        scene="Scene Direction",
    ),
    "pt-BR": SectionLabels(
        language_name="Portuguese (Brazil)",
        title="Diretrizes Visuais da Marca",
        general_principles="Princípios Gerais",
        style_direction="Direção de Estilo",
        lighting="Iluminação",
        colour="Abordagem de Cor",
        composition="Composição",
        format="Formato",
        palette="Paleta de Cores",
        primary="Cores Primárias",
        secondary="Cores Secundárias",
        neutrals="Cores Neutras",
        people_and_emotions="Pessoas e Emoções",
        types_of_images="Tipos de Imagens",
        subject_matter="Tema",
        context="Contexto",
        neuro_triggers="Gatilhos de Neuromarketing",
        variation_rules="Regras de Variação",
        prompting_guidance="Orientações de Prompt para Geração de Imagens com IA",
        producer_notes="Notas de Produção",
        camera="Configuração da Câmera",
        producer_lighting="Configuração de Iluminação",
        angle="Ângulo da Câmera",
        scene="Direção de Cena",
    ),
    "pt-PT": SectionLabels(
        language_name="Portuguese (Portugal)",
        title="Diretrizes Visuais da Marca",
        general_principles="Princípios Gerais",
        style_direction="Direção de Estilo",
        lighting="Iluminação",
        colour="Abordagem à Cor",
        composition="Composição",
        format="Formato",
        palette="Paleta de Cores",
        primary="Cores Primárias",
        secondary="Cores Secundárias",
        neutrals="Cores Neutras",
        people_and_emotions="Pessoas e Emoções",
        types_of_images="Tipos de Imagem",
        subject_matter="Tema",
        context="Contexto",
        neuro_triggers="Gatilhos de Neuromarketing",
        variation_rules="Regras de Variação",
        prompting_guidance="Orientações de Prompt para Geração de Imagens com IA",
        producer_notes="Notas de Produção",
        camera="Configuração da Câmara",
        producer_lighting="Configuração de Iluminação",
        angle="Ângulo da Câmara",
        scene="Direção de Cena",
    ),
}


def resolve_locale(locale: Optional[str]) -> str:
    """Return ``locale`` if supported, else the default locale."""
    if locale in _LABELS:
        return locale
    return DEFAULT_LOCALE


def get_labels(locale: Optional[str]) -> SectionLabels:
    return _LABELS[resolve_locale(locale)]


def language_name_for(locale: Optional[str]) -> str:
    """Human-readable language name requested from the model."""
    return get_labels(locale).language_name


def all_labels() -> Dict[str, SectionLabels]:
    return dict(_LABELS)
