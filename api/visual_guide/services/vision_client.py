"""Vision model invocation: image fan-out, one combined request, retries.

A ``VisionClient`` wraps an ``httpx.AsyncClient`` created once at process
start and holds no per-call state, so concurrent analyses for different
sessions can share it.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import httpx

from ..core.config import settings
from ..core.retry import RetryConfig, RetryExhausted, RetryManager
from ..core.structured_logging import LoggerFactory, log_external_call
from ..models.exceptions import (
    PERMANENT,
    TRANSIENT,
    AnalysisFailed,
    ImageFetchError,
    InvocationError,
    MalformedResponseError,
    PermanentInvocationError,
    TransientInvocationError,
)
from .prompts import build_analysis_prompt

logger = LoggerFactory.get_logger(__name__)

RETRYABLE_STATUS_CODES = {408, 409, 425, 429}
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


def _headers(api_key: Optional[str]) -> Dict[str, str]:
    """Build standard OpenRouter-compatible headers."""
    return {
        "Authorization": f"Bearer {api_key or ''}",
        "Content-Type": "application/json",
        "HTTP-Referer": settings.service_base_url,
        "X-Title": settings.service_name,
    }


def _extract_message_text(response: Dict[str, Any]) -> str:
    """Extract text content from a chat-completions style response."""
    choices = response.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    msg = choices[0].get("message") or {}
    content = msg.get("content", "") if isinstance(msg, dict) else ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [p.get("text", "") for p in content if isinstance(p, dict) and "text" in p]
        return "\n".join([p for p in parts if isinstance(p, str) and p])
    return ""


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def encode_image(data: bytes, content_type: Optional[str]) -> str:
    """Encode raw image bytes as a base64 data URL."""
    mime = (content_type or "").split(";")[0].strip().lower()
    if not mime.startswith("image/"):
        mime = DEFAULT_IMAGE_CONTENT_TYPE
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _ssrf_guard(url: str, allow_hosts: Optional[str]) -> None:
    u = urlparse(url)
    if u.scheme != "https":
        raise ImageFetchError(url, "only HTTPS image URLs are allowed")
    if allow_hosts:
        hosts = {h.strip() for h in allow_hosts.split(",") if h.strip()}
        if u.hostname not in hosts:
            raise ImageFetchError(url, "host is not allowed")


class VisionClient:
    """Client for the external vision-capable chat-completions model."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_initial_delay: Optional[float] = None,
        retry_malformed: Optional[bool] = None,
        image_fetch_timeout: Optional[float] = None,
        image_fetch_max_bytes: Optional[int] = None,
        image_fetch_allow_hosts: Optional[str] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._http = http_client
        self.base_url = (base_url or settings.vision_api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.vision_api_key
        self.model = model or settings.vision_model
        self.temperature = settings.vision_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.vision_max_tokens
        self.timeout = timeout or settings.vision_timeout
        self.max_retries = settings.vision_max_retries if max_retries is None else max_retries
        self.retry_initial_delay = (
            settings.vision_retry_initial_delay if retry_initial_delay is None else retry_initial_delay
        )
        self.retry_malformed = settings.vision_retry_malformed if retry_malformed is None else retry_malformed
        self.image_fetch_timeout = image_fetch_timeout or settings.image_fetch_timeout
        self.image_fetch_max_bytes = image_fetch_max_bytes or settings.image_fetch_max_bytes
        self.image_fetch_allow_hosts = (
            settings.image_fetch_allow_hosts if image_fetch_allow_hosts is None else image_fetch_allow_hosts
        )
        self._sleep = sleep or asyncio.sleep

    async def fetch_image(self, url: str) -> str:
        """Download one image and return it as a data URL."""
        if url.startswith("data:image/"):
            return url

        _ssrf_guard(url, self.image_fetch_allow_hosts)
        logger.debug("Downloading image", image_url=url)
        try:
            async with self._http.stream("GET", url, timeout=self.image_fetch_timeout) as r:
                if not r.is_success:
                    raise ImageFetchError(url, f"HTTP {r.status_code}", status_code=r.status_code)
                total = 0
                chunks: List[bytes] = []
                async for chunk in r.aiter_bytes():
                    total += len(chunk)
                    if total > self.image_fetch_max_bytes:
                        raise ImageFetchError(url, "image too large")
                    chunks.append(chunk)
                content_type = r.headers.get("content-type")
        except httpx.HTTPError as e:
            raise ImageFetchError(url, str(e) or type(e).__name__, cause=e) from e

        data = b"".join(chunks)
        if not data:
            raise ImageFetchError(url, "empty response body")
        logger.debug("Image downloaded", image_url=url, size_bytes=len(data), content_type=content_type)
        return encode_image(data, content_type)

    async def fetch_images(self, urls: Sequence[str]) -> List[str]:
        """Download all images concurrently; the first failure aborts the batch."""
        tasks = [asyncio.ensure_future(self.fetch_image(url)) for url in urls]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    def build_payload(self, prompt: str, image_data_urls: Sequence[str]) -> Dict[str, Any]:
        """One user message: the instruction text followed by every image."""
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        content += [{"type": "image_url", "image_url": {"url": u}} for u in image_data_urls]
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def request_completion(self, payload: Dict[str, Any]) -> str:
        """Send one chat-completions request and return the message text.

        Raises an ``InvocationError`` whose ``kind`` tells the retry driver
        whether another attempt makes sense.
        """
        log_external_call(logger, "vision", "chat.completions", model=payload.get("model"))
        try:
            response = await self._http.post(
                f"{self.base_url}/chat/completions",
                headers=_headers(self.api_key),
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TransientInvocationError(f"Vision API request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            message = f"Vision API request failed: {response.status_code}"
            if is_retryable_status(response.status_code):
                raise TransientInvocationError(message, status_code=response.status_code)
            raise PermanentInvocationError(message, status_code=response.status_code)

        malformed_kind = TRANSIENT if self.retry_malformed else PERMANENT
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError("Vision API returned a non-JSON body", kind=malformed_kind) from e

        content = _extract_message_text(body) if isinstance(body, dict) else ""
        if not content.strip():
            raise MalformedResponseError("Invalid response from vision API: empty message content", kind=malformed_kind)
        return content

    async def invoke(
        self,
        images: Sequence[str],
        locale: str,
        brand_context: Optional[str] = None,
        attempt: int = 0,
        max_retries: Optional[int] = None,
    ) -> str:
        """Analyze ``images`` and return the model's raw text answer.

        Images are fetched once, up front; only the model request is retried.
        Raises ``ImageFetchError`` if any image fails to download and
        ``AnalysisFailed`` when the model call cannot succeed.
        """
        if not images:
            raise AnalysisFailed("At least one image is required for analysis")

        max_retries = self.max_retries if max_retries is None else max_retries
        logger.info("Starting vision analysis", image_count=len(images), locale=locale)

        image_data_urls = await self.fetch_images(images)
        payload = self.build_payload(build_analysis_prompt(locale, brand_context), image_data_urls)

        manager = RetryManager(
            RetryConfig(max_retries=max_retries, initial_delay=self.retry_initial_delay),
            sleep=self._sleep,
        )
        try:
            content = await manager.execute_with_retry(
                self.request_completion,
                payload,
                start_attempt=attempt,
                operation_name="vision_analysis",
            )
        except RetryExhausted as e:
            cause = e.last_exception
            raise AnalysisFailed(
                f"Vision analysis failed: {cause}", cause=cause, details={"attempts": e.attempts}
            ) from cause
        except InvocationError as e:
            raise AnalysisFailed(f"Vision analysis failed: {e}", cause=e) from e

        logger.info("Vision analysis complete", content_length=len(content))
        return content
