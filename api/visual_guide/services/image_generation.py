"""Test image generation from synthesized guideline prompts."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import settings
from ..core.structured_logging import LoggerFactory, log_external_call
from ..models.exceptions import ImageGenerationException, InvalidRequestError
from .vision_client import _headers

logger = LoggerFactory.get_logger(__name__)

MAX_TEST_IMAGES = 4


def compose_generation_prompt(base_prompt: str, negative_prompt: Optional[str] = None) -> str:
    """Fold the negative prompt into the text for providers without a separate field."""
    if negative_prompt and negative_prompt.strip():
        return f"{base_prompt.strip()}\n\nAvoid: {negative_prompt.strip()}"
    return base_prompt.strip()


def _image_url(item: Dict[str, Any]) -> str:
    if item.get("url"):
        return item["url"]
    b64 = item.get("b64_json") or item.get("b64")
    if b64:
        return f"data:image/png;base64,{b64}"
    return ""


class ImageGenerationClient:
    """OpenAI-compatible images API adapter."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        size: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http = http_client
        self.base_url = (base_url or settings.vision_api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.vision_api_key
        self.model = model or settings.image_model
        self.size = size or settings.image_size
        self.timeout = timeout or settings.image_timeout

    async def generate_test_images(
        self,
        base_prompt: str,
        negative_prompt: Optional[str] = None,
        count: int = 1,
    ) -> List[Dict[str, str]]:
        """Generate ``count`` (1 to 4) images and return their URLs and storage paths."""
        if not 1 <= count <= MAX_TEST_IMAGES:
            raise InvalidRequestError(f"count must be between 1 and {MAX_TEST_IMAGES}, got {count}")
        if not base_prompt or not base_prompt.strip():
            raise InvalidRequestError("base_prompt must not be empty")

        prompt = compose_generation_prompt(base_prompt, negative_prompt)
        payload = {
            "model": self.model,
            "prompt": prompt,
            "n": count,
            "size": self.size,
        }

        log_external_call(logger, "images", "generations", model=self.model, image_count=count)
        try:
            resp = await self._http.post(
                f"{self.base_url}/images/generations",
                headers=_headers(self.api_key),
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ImageGenerationException(
                "Images API request timed out", model=self.model, prompt_length=len(prompt)
            ) from e
        except httpx.HTTPError as e:
            raise ImageGenerationException(
                f"Images API request failed: {e}", model=self.model, prompt_length=len(prompt)
            ) from e

        if not resp.is_success:
            raise ImageGenerationException(
                f"Images API HTTP error {resp.status_code}",
                model=self.model,
                prompt_length=len(prompt),
                details={"status_code": resp.status_code},
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise ImageGenerationException(
                "Invalid JSON response from Images API", model=self.model, prompt_length=len(prompt)
            ) from e

        items = [item for item in (body.get("data") or []) if isinstance(item, dict)] if isinstance(body, dict) else []
        urls = [u for u in (_image_url(item) for item in items) if u]
        if not urls:
            raise ImageGenerationException("No images generated", model=self.model, prompt_length=len(prompt))

        stamp = int(time.time() * 1000)
        logger.info("Test images generated", image_count=len(urls))
        return [
            {"url": url, "storage_path": f"generated/test-{stamp}-{index}.png"}
            for index, url in enumerate(urls)
        ]
