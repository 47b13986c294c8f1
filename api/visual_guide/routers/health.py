import time

from fastapi import APIRouter, Request

from ..core.config import settings

router = APIRouter()

_start_time = time.time()


@router.get("/healthz")
async def health(request: Request):
    """Liveness plus a report of which collaborators are wired up."""
    vision_ready = getattr(request.app.state, "vision_client", None) is not None
    images_ready = getattr(request.app.state, "image_client", None) is not None
    api_key_configured = bool(settings.vision_api_key)

    ok = vision_ready and images_ready and (api_key_configured or settings.service_env in {"dev", "test"})
    return {
        "ok": ok,
        "status": "healthy" if ok else "degraded",
        "uptime_seconds": round(time.time() - _start_time, 1),
        "services": {
            "vision_client": vision_ready,
            "image_client": images_ready,
            "api_key_configured": api_key_configured,
            "guide_store": getattr(request.app.state, "guide_store", None) is not None,
        },
    }
