"""Unit tests for test image generation."""

import json

import httpx
import pytest

from visual_guide.models.exceptions import ImageGenerationException, InvalidRequestError
from visual_guide.services.image_generation import (
    ImageGenerationClient,
    compose_generation_prompt,
)

IMAGES_BASE_URL = "https://images.test/v1"


def make_client(handler, **kwargs) -> ImageGenerationClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    options = {"base_url": IMAGES_BASE_URL, "api_key": "test-key", "model": "test/image-model", "size": "1024x1024"}
    options.update(kwargs)
    return ImageGenerationClient(http_client, **options)


class TestComposePrompt:

    def test_negative_prompt_is_appended(self):
        assert compose_generation_prompt(" Sunlit studio ", "blurry") == "Sunlit studio\n\nAvoid: blurry"

    def test_without_negative_prompt(self):
        assert compose_generation_prompt("Sunlit studio", None) == "Sunlit studio"
        assert compose_generation_prompt("Sunlit studio", "  ") == "Sunlit studio"


class TestGenerateTestImages:

    @pytest.mark.asyncio
    async def test_generates_requested_count(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [
                {"url": "https://images.test/a.png"},
                {"url": "https://images.test/b.png"},
            ]})

        images = await make_client(handler).generate_test_images("Sunlit studio", "blurry", count=2)

        assert [image["url"] for image in images] == ["https://images.test/a.png", "https://images.test/b.png"]
        assert all(image["storage_path"].startswith("generated/test-") for image in images)
        assert images[0]["storage_path"].endswith("-0.png")

        payload = json.loads(seen[0].content)
        assert str(seen[0].url) == "https://images.test/v1/images/generations"
        assert payload == {
            "model": "test/image-model",
            "prompt": "Sunlit studio\n\nAvoid: blurry",
            "n": 2,
            "size": "1024x1024",
        }

    @pytest.mark.asyncio
    async def test_base64_images_become_data_urls(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"b64_json": "QUJD"}]})

        images = await make_client(handler).generate_test_images("Sunlit studio")

        assert images[0]["url"] == "data:image/png;base64,QUJD"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 5])
    async def test_count_out_of_range(self, count):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(InvalidRequestError):
            await client.generate_test_images("Sunlit studio", count=count)

    @pytest.mark.asyncio
    async def test_empty_prompt(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(InvalidRequestError):
            await client.generate_test_images("   ")

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = make_client(lambda request: httpx.Response(429, json={"error": "slow down"}))

        with pytest.raises(ImageGenerationException) as exc_info:
            await client.generate_test_images("Sunlit studio")

        assert exc_info.value.details["status_code"] == 429
        assert exc_info.value.model == "test/image-model"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow")

        with pytest.raises(ImageGenerationException, match="timed out"):
            await make_client(handler).generate_test_images("Sunlit studio")

    @pytest.mark.asyncio
    async def test_no_images_returned(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(ImageGenerationException, match="No images generated"):
            await client.generate_test_images("Sunlit studio")
