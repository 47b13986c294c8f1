"""Exception types for the visual guideline pipeline.

Callers only ever need to catch ``AnalysisFailed``: image fetch failures,
exhausted or permanent model-call failures and empty parse results all
surface as that type (or a subclass of it) with the underlying cause
attached. ``InvocationError`` and its subclasses are raised inside the
model invocation layer and drive the retry decision; they are wrapped before
leaving it.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException

TRANSIENT = "transient"
PERMANENT = "permanent"


class VisualGuideError(Exception):
    """Base exception for all visual guideline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvocationError(VisualGuideError):
    """A single vision model request failed.

    ``kind`` is either ``"transient"`` (worth retrying after a backoff) or
    ``"permanent"`` (retrying cannot help).
    """

    def __init__(self,
                 message: str,
                 kind: str = TRANSIENT,
                 status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        if kind not in (TRANSIENT, PERMANENT):
            raise ValueError(f"Unknown invocation error kind: {kind}")
        self.kind = kind
        self.status_code = status_code
        invocation_details = details or {}
        invocation_details["kind"] = kind
        if status_code is not None:
            invocation_details["status_code"] = status_code
        super().__init__(message, invocation_details)

    @property
    def transient(self) -> bool:
        return self.kind == TRANSIENT


class TransientInvocationError(InvocationError):
    """Network failure or retryable non-success status from the vision service."""


class PermanentInvocationError(InvocationError):
    """Non-success status that retrying cannot fix (bad request, auth)."""

    def __init__(self,
                 message: str,
                 status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, kind=PERMANENT, status_code=status_code, details=details)


class MalformedResponseError(InvocationError):
    """The vision service answered but without usable message content."""


class AnalysisFailed(VisualGuideError):
    """Raised when an image analysis cannot produce a guideline."""

    def __init__(self,
                 message: str,
                 cause: Optional[BaseException] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.cause = cause
        analysis_details = details or {}
        if cause is not None:
            analysis_details.setdefault("cause", str(cause))
        super().__init__(message, analysis_details)


class ImageFetchError(AnalysisFailed):
    """Raised when any one of the source images cannot be downloaded."""

    def __init__(self,
                 url: str,
                 reason: str,
                 status_code: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        self.url = url
        self.status_code = status_code
        details: Dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Failed to fetch image from {url}: {reason}", cause=cause, details=details)


class GuidelineValidationError(AnalysisFailed):
    """Raised when the model output carries no recognizable guideline content."""

    def __init__(self, message: str, raw_length: Optional[int] = None):
        details = {"raw_length": raw_length} if raw_length is not None else {}
        super().__init__(message, details=details)


class ImageGenerationException(VisualGuideError):
    """Raised when test image generation fails."""

    def __init__(self,
                 message: str,
                 model: Optional[str] = None,
                 prompt_length: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.model = model
        self.prompt_length = prompt_length
        generation_details = details or {}
        if model:
            generation_details["model"] = model
        if prompt_length:
            generation_details["prompt_length"] = prompt_length
        super().__init__(message, generation_details)


class InvalidRequestError(VisualGuideError):
    """Raised when a caller-supplied argument is out of range."""


# HTTP Exception converters for FastAPI
def to_http_exception(exc: VisualGuideError, status_code: int = 500, error: Optional[str] = None) -> HTTPException:
    """Convert custom exception to HTTPException for FastAPI."""
    detail = {
        "error": error or exc.__class__.__name__,
        "message": exc.message,
        **exc.details
    }
    return HTTPException(status_code=status_code, detail=detail)


def analysis_to_http_exception(exc: AnalysisFailed) -> HTTPException:
    """Analysis failures are upstream failures; the client may retry from scratch."""
    if isinstance(exc, GuidelineValidationError):
        return to_http_exception(exc, status_code=422, error="Vision analysis failed")
    return to_http_exception(exc, status_code=502, error="Vision analysis failed")


def invalid_request_to_http_exception(exc: InvalidRequestError) -> HTTPException:
    return to_http_exception(exc, status_code=400, error="Invalid request")


def image_generation_to_http_exception(exc: ImageGenerationException) -> HTTPException:
    return to_http_exception(exc, status_code=502, error="Image generation failed")


# Exception handler registry
EXCEPTION_HANDLERS = {
    AnalysisFailed: analysis_to_http_exception,
    ImageGenerationException: image_generation_to_http_exception,
    InvalidRequestError: invalid_request_to_http_exception,
}


def resolve_http_exception(exc: VisualGuideError) -> HTTPException:
    """Pick the most specific registered converter for ``exc``."""
    for exc_type in type(exc).__mro__:
        handler = EXCEPTION_HANDLERS.get(exc_type)
        if handler is not None:
            return handler(exc)
    return to_http_exception(exc)
