"""Pytest configuration and fixtures for the visual guideline API."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest

# Add the api directory to Python path
api_dir = Path(__file__).parent
sys.path.insert(0, str(api_dir))

from visual_guide.services.vision_client import VisionClient  # noqa: E402

VISION_BASE_URL = "https://vision.test/v1"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    test_env = {
        "TESTING": "true",
        "SERVICE_ENV": "test",
        "VISION_API_KEY": "test-key",
        "SERVICE_BASE_URL": "http://localhost:8000",
        "LOG_LEVEL": "DEBUG",
    }
    previous = {key: os.environ.get(key) for key in test_env}
    os.environ.update(test_env)

    yield

    for key, value in previous.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


class SleepRecorder:
    """Async stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


def chat_response(content: Any, status_code: int = 200) -> httpx.Response:
    """Build a chat-completions response carrying ``content``."""
    return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})


def fenced_json(data: Dict[str, Any]) -> str:
    return "Here is the analysis.\n\n```json\n" + json.dumps(data, indent=2) + "\n```\n"


@pytest.fixture
def make_vision_client(sleep_recorder) -> Callable[..., VisionClient]:
    """Factory for a VisionClient backed by an in-process mock transport.

    ``handler`` receives every outgoing ``httpx.Request`` (image downloads and
    model calls alike) and returns an ``httpx.Response``.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> VisionClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        options = {
            "base_url": VISION_BASE_URL,
            "api_key": "test-key",
            "model": "test/vision-model",
            "max_retries": 3,
            "retry_initial_delay": 1.0,
            "retry_malformed": True,
            "image_fetch_allow_hosts": "",
            "sleep": sleep_recorder,
        }
        options.update(kwargs)
        return VisionClient(http_client, **options)

    return _make


@pytest.fixture
def image_urls() -> List[str]:
    return [
        "https://cdn.example.com/brand/hero.png",
        "https://cdn.example.com/brand/team.png",
        "https://cdn.example.com/brand/product.png",
    ]


@pytest.fixture
def sample_guideline() -> Dict[str, Any]:
    """A complete guideline as the model would ideally return it."""
    return {
        "general_principles": ["Warm, human moments", "Natural textures over gloss"],
        "style_direction": {
            "lighting": "Golden-hour daylight",
            "colour": "Earthy tones with a single terracotta accent",
            "composition": "Rule of thirds with generous negative space",
            "format": "4:5 portrait for social, 16:9 for web banners",
        },
        "palette": {
            "primary": ["#C8553D", "#2D3047"],
            "secondary": ["#F4D35E"],
            "neutrals": ["#F7F3E9", "#8C8C8C"],
        },
        "people_and_emotions": ["Diverse small teams", "Quiet confidence"],
        "types_of_images": [
            {
                "category_name": "Workshop",
                "subject_matter": "Hands shaping ceramics",
                "context": "Sunlit studio",
                "examples": ["Close-up of clay on a wheel", "Apron hanging on a hook"],
            },
            {
                "category_name": "Product",
                "examples": ["Mug on a linen tablecloth"],
            },
        ],
        "neuro_triggers": ["Craftsmanship signals quality"],
        "variation_rules": ["Swap props seasonally"],
        "prompting_guidance": ["Mention visible hand-made imperfections", "Use soft shadows"],
        "producer_notes": {
            "camera": "35mm prime at f/2",
            "lighting": "Window light with a bounce card",
            "angle": "Slightly above eye-level",
            "scene": "Wooden workbench with tools in soft focus",
        },
    }
