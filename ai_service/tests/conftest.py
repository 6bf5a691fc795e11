"""Pytest fixtures for the OCR service and benchmark tests."""

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from app.config import Settings
from app.services.ocr import TyphoonOCRService


def completion_body(content: str, model: str = "typhoon-ocr") -> dict:
    """Chat completion payload as the provider returns it."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1760000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def error_body(message: str) -> dict:
    return {"error": {"message": message, "type": "invalid_request_error"}}


class ProviderStub:
    """Replays a scripted list of responses and records every request."""

    def __init__(self, responses: list[httpx.Response | Exception]):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        # httpx binds a response to the request it answers, so hand out copies
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        typhoon_api_key="test-key",
        typhoon_base_url="https://typhoon.test/v1",
        request_timeout=5,
        max_retries=3,
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_service(
    settings: Settings, sleep: RecordingSleep
) -> Callable[[ProviderStub], TyphoonOCRService]:
    """Build a TyphoonOCRService wired to a ProviderStub."""

    def _make(stub: ProviderStub, service_settings: Settings | None = None) -> TyphoonOCRService:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        return TyphoonOCRService(service_settings or settings, http_client=http_client, sleep=sleep)

    return _make


@pytest.fixture
def datasets_dir(tmp_path: Path) -> Path:
    """Two printed samples (one with image) and one handwriting sample with image."""
    printed = tmp_path / "printed"
    handwriting = tmp_path / "handwriting"
    printed.mkdir()
    handwriting.mkdir()

    (printed / "p002.txt").write_text("สวัสดี ครับ", encoding="utf-8")
    (printed / "p001.txt").write_text("ภาษาไทย\r\nบรรทัดสอง", encoding="utf-8")
    (printed / "p001.png").write_bytes(b"\x89PNG fake")

    (handwriting / "h001.txt").write_text("ลายมือ  เขียน", encoding="utf-8")
    (handwriting / "h001.jpg").write_bytes(b"\xff\xd8 fake")

    return tmp_path

