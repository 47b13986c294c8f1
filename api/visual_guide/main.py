from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.structured_logging import LoggerFactory
from .middleware.request_response import RequestResponseMiddleware
from .models.exceptions import VisualGuideError, resolve_http_exception
from .routers import health, vision
from .services.image_generation import ImageGenerationClient
from .services.vision_client import VisionClient

logger = LoggerFactory.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared HTTP client once and hand it to the service clients."""
    http_client = httpx.AsyncClient(follow_redirects=False)
    app.state.vision_client = VisionClient(http_client)
    app.state.image_client = ImageGenerationClient(http_client)
    # The guideline document store is external; deployments attach one here.
    if not hasattr(app.state, "guide_store"):
        app.state.guide_store = None
    logger.info("Service started", vision_model=settings.vision_model, image_model=settings.image_model)

    try:
        yield
    finally:
        await http_client.aclose()
        logger.info("Shutdown event completed")


app = FastAPI(
    title=settings.service_name,
    description="Visual brand guideline extraction from brand images",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestResponseMiddleware)

origins = [o.strip() for o in (settings.cors_allow_origins or "").split(",") if o.strip()]
if not origins:
    # Wildcard in dev; nothing in production unless configured
    is_production = settings.service_env in ["prod", "production"]
    origins = [] if is_production else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)


@app.exception_handler(VisualGuideError)
async def visual_guide_exception_handler(request: Request, exc: VisualGuideError):
    """Map pipeline exceptions onto JSON error responses."""
    http_exc = resolve_http_exception(exc)
    if http_exc.status_code >= 500:
        logger.exception(
            f"Request failed: {exc.message}",
            exc_info=exc,
            error_type=type(exc).__name__,
            http_status=http_exc.status_code,
        )
    else:
        logger.warning(
            f"Request rejected: {exc.message}",
            error_type=type(exc).__name__,
            http_status=http_exc.status_code,
        )
    return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


app.include_router(health.router)
app.include_router(vision.router)
