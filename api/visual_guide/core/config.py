from __future__ import annotations

import os
from dataclasses import dataclass


def getenv(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name, default)
    return v


@dataclass
class Settings:
    # Service
    service_name: str = getenv("SERVICE_NAME", "visual-guide-api") or "visual-guide-api"
    service_env: str = getenv("SERVICE_ENV", "dev") or "dev"
    log_level: str = getenv("LOG_LEVEL", "INFO") or "INFO"
    service_base_url: str = getenv("SERVICE_BASE_URL", "http://localhost:8000") or "http://localhost:8000"

    # Vision model (OpenAI-compatible chat completions, OpenRouter by default)
    vision_api_base_url: str = getenv("VISION_API_BASE_URL", "https://openrouter.ai/api/v1") or "https://openrouter.ai/api/v1"
    vision_api_key: str | None = getenv("VISION_API_KEY") or getenv("OPENROUTER_API_KEY")
    vision_model: str = getenv("VISION_MODEL", "openai/gpt-4o") or "openai/gpt-4o"
    vision_temperature: float = float(getenv("VISION_TEMPERATURE", "0.7") or "0.7")
    vision_max_tokens: int = int(getenv("VISION_MAX_TOKENS", "2000") or "2000")
    vision_timeout: int = int(getenv("VISION_TIMEOUT", "60") or "60")

    # Retry policy for the single combined vision request
    vision_max_retries: int = int(getenv("VISION_MAX_RETRIES", "3") or "3")
    vision_retry_initial_delay: float = float(getenv("VISION_RETRY_INITIAL_DELAY", "1.0") or "1.0")
    # Empty/malformed model responses are retried like transport errors unless disabled
    vision_retry_malformed: bool = (getenv("VISION_RETRY_MALFORMED", "true") or "true").lower() == "true"

    # Image fetching
    image_fetch_timeout: int = int(getenv("IMAGE_FETCH_TIMEOUT", "30") or "30")
    image_fetch_max_bytes: int = int(getenv("IMAGE_FETCH_MAX_BYTES", "10000000") or "10000000")  # 10MB cap
    image_fetch_allow_hosts: str | None = getenv("IMAGE_FETCH_ALLOW_HOSTS")

    # Test image generation
    image_model: str = getenv("IMAGE_MODEL", "openai/dall-e-3") or "openai/dall-e-3"
    image_size: str = getenv("IMAGE_SIZE", "1024x1024") or "1024x1024"
    image_timeout: int = int(getenv("IMAGE_TIMEOUT", "120") or "120")

    # Security & policy
    cors_allow_origins: str | None = getenv("CORS_ALLOW_ORIGINS")


settings = Settings()
