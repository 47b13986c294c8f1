"""Unit tests for markdown rendering of guidelines."""

from visual_guide.services.locales import get_labels
from visual_guide.services.markdown_renderer import render_markdown
from visual_guide.services.normalizer import normalize


class TestRenderMarkdown:

    def test_output_is_deterministic(self, sample_guideline):
        guide = normalize(sample_guideline)

        assert render_markdown(guide, "en-GB") == render_markdown(guide, "en-GB")

    def test_title_is_first_line(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")

        assert md.startswith("# Visual Brand Guidelines\n")

    def test_portuguese_headings(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "pt-BR")

        assert md.startswith("# Diretrizes Visuais da Marca\n")
        assert "## Paleta de Cores" in md
        assert "## Princípios Gerais" in md

    def test_unsupported_locale_renders_as_en_us(self, sample_guideline):
        guide = normalize(sample_guideline)

        assert render_markdown(guide, "fr-FR") == render_markdown(guide, "en-US")

    def test_section_order(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")
        labels = get_labels("en-US")

        headings = [
            labels.general_principles,
            labels.style_direction,
            labels.palette,
            labels.people_and_emotions,
            labels.types_of_images,
            labels.neuro_triggers,
            labels.variation_rules,
            labels.prompting_guidance,
            labels.producer_notes,
        ]
        positions = [md.index(f"\n## {heading}\n") for heading in headings]
        assert positions == sorted(positions)

    def test_palette_lines(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")

        assert "- **Primary Colors:** #C8553D, #2D3047\n" in md
        assert "- **Secondary Colors:** #F4D35E\n" in md
        assert "- **Neutral Colors:** #F7F3E9, #8C8C8C\n" in md

    def test_style_subsections(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-GB")

        assert "### Lighting\nGolden-hour daylight\n" in md
        assert "### Colour Approach\nEarthy tones with a single terracotta accent\n" in md

    def test_bullets_keep_source_order(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")

        assert "- Warm, human moments\n- Natural textures over gloss\n" in md

    def test_category_rendering(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")

        assert (
            "### Workshop\n"
            "**Subject Matter:** Hands shaping ceramics\n"
            "**Context:** Sunlit studio\n"
            "- Close-up of clay on a wheel\n"
        ) in md
        # No subject or context lines for the second category
        assert "### Product\n- Mug on a linen tablecloth\n" in md

    def test_values_are_not_translated(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "pt-PT")

        assert "Golden-hour daylight" in md
        assert "#C8553D" in md

    def test_producer_notes_last(self, sample_guideline):
        md = render_markdown(normalize(sample_guideline), "en-US")

        assert md.endswith("### Scene Direction\nWooden workbench with tools in soft focus\n")
        assert not md.endswith("\n\n")
