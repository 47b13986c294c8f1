"""Unit tests for the analysis pipeline."""

from datetime import datetime, timezone

import httpx
import pytest

from conftest import PNG_BYTES, chat_response, fenced_json
from visual_guide.models.exceptions import AnalysisFailed, GuidelineValidationError
from visual_guide.services.normalizer import DEFAULT_GUIDELINE, normalize
from visual_guide.services.vision_analysis import analyze_images, build_guide_record


def backend_answering(content):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "cdn.example.com":
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
        return chat_response(content)
    return handler


class TestAnalyzeImages:

    @pytest.mark.asyncio
    async def test_partial_answer_is_completed(self, make_vision_client, image_urls):
        client = make_vision_client(backend_answering(fenced_json({"palette": {"primary": ["#AA0000"]}})))

        result = await analyze_images(client, image_urls, "pt-BR")

        guide = result.visual_guide
        assert guide.palette.primary == ["#AA0000"]
        assert guide.palette.secondary == DEFAULT_GUIDELINE["palette"]["secondary"]
        assert guide.general_principles == DEFAULT_GUIDELINE["general_principles"]
        assert guide.producer_notes.model_dump() == DEFAULT_GUIDELINE["producer_notes"]
        assert result.guide_md.startswith("# Diretrizes Visuais da Marca")
        assert "#AA0000" in result.prompts.base_prompt
        assert result.source_image_count == 3

    @pytest.mark.asyncio
    async def test_complete_answer(self, make_vision_client, image_urls, sample_guideline):
        client = make_vision_client(backend_answering(fenced_json(sample_guideline)))

        result = await analyze_images(client, image_urls, "en-GB", brand_context="Ceramics")

        assert result.visual_guide == normalize(sample_guideline)
        assert "## Colour Palette" in result.guide_md

    @pytest.mark.asyncio
    async def test_heuristic_answer(self, make_vision_client, image_urls):
        text = "## Color Palette\n- #123456\n- #654321\n## People and Emotions\n- Joyful crowds"
        client = make_vision_client(backend_answering(text))

        result = await analyze_images(client, image_urls, "en-US")

        assert result.visual_guide.palette.primary == ["#123456", "#654321"]
        assert result.visual_guide.people_and_emotions == ["Joyful crowds"]

    @pytest.mark.asyncio
    async def test_unrecognizable_answer(self, make_vision_client, image_urls):
        client = make_vision_client(backend_answering("I'm sorry, I can't describe these images."))

        with pytest.raises(GuidelineValidationError) as exc_info:
            await analyze_images(client, image_urls, "en-US")

        assert isinstance(exc_info.value, AnalysisFailed)
        assert exc_info.value.details["raw_length"] > 0

    @pytest.mark.asyncio
    async def test_max_retries_override(self, make_vision_client, image_urls, sleep_recorder):
        calls = []

        def handler(request):
            if request.url.host == "cdn.example.com":
                return httpx.Response(200, content=PNG_BYTES)
            calls.append(request)
            return httpx.Response(503)

        client = make_vision_client(handler)

        with pytest.raises(AnalysisFailed):
            await analyze_images(client, image_urls, "en-US", max_retries=1)

        assert len(calls) == 2
        assert sleep_recorder.delays == [1.0]


class TestBuildGuideRecord:

    def test_record_shape(self, sample_guideline):
        guide = normalize(sample_guideline)
        analyzed_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

        record = build_guide_record("0b7f6a52-4cf2-4a43-9d0c-2a9ad8e2f6c1", guide, 3, analyzed_at)

        assert record == {
            "session_id": "0b7f6a52-4cf2-4a43-9d0c-2a9ad8e2f6c1",
            "rules_json": guide.model_dump(),
            "derived_palettes_json": {
                "source_image_count": 3,
                "analyzed_at": "2026-03-01T12:00:00+00:00",
            },
        }

    def test_timestamp_defaults_to_now(self, sample_guideline):
        record = build_guide_record("s", normalize(sample_guideline), 1)

        assert record["derived_palettes_json"]["analyzed_at"].endswith("+00:00")
