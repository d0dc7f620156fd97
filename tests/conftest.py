"""Test configuration: isolated logging/config plus a fake Gemini client."""

import os
import tempfile

# Keep test logs out of the user's home directory; must run before kit_creator is imported.
os.environ.setdefault("KIT_CREATOR_LOG_DIR", tempfile.mkdtemp(prefix="kit_creator_logs_"))

import pytest

from kit_creator.api import gemini_client
from kit_creator.api.exceptions import GeminiAPIError
from kit_creator.api.gemini_client import GeminiResponse


TEST_API_KEY = "test-key-1234567890"

# 1x1 transparent PNG
PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def text_response(text: str) -> GeminiResponse:
    """A generateContent response carrying a single text part."""
    return GeminiResponse({"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]})


def image_response(data: str = PNG_B64, mime_type: str = "image/png") -> GeminiResponse:
    """A generateContent response carrying a short caption and one inline image."""
    return GeminiResponse({
        "candidates": [{
            "content": {"parts": [
                {"text": "Here is your design."},
                {"inlineData": {"mimeType": mime_type, "data": data}},
            ]},
            "finishReason": "STOP",
        }]
    })


def quota_error() -> GeminiAPIError:
    return GeminiAPIError(
        "Gemini API error 429 (model): Resource has been exhausted (e.g. check quota).",
        status_code=429,
        error_class="RESOURCE_EXHAUSTED",
    )


def server_error() -> GeminiAPIError:
    return GeminiAPIError("Gemini API error 500 (model): Internal error", status_code=500, error_class="INTERNAL")


def fatal_error() -> GeminiAPIError:
    return GeminiAPIError("Gemini API error 400 (model): Invalid argument", status_code=400, error_class="INVALID_ARGUMENT")


class FakeClient:
    """Stands in for GeminiClient; replays scripted responses and records calls."""

    def __init__(self, factory: "FakeClientFactory"):
        self.factory = factory

    def generate_content(self, model, parts, system_instruction=None, generation_config=None):
        self.factory.calls.append({
            "model": model,
            "parts": parts,
            "system_instruction": system_instruction,
            "generation_config": generation_config,
        })
        if not self.factory.outcomes:
            raise AssertionError("FakeClient ran out of scripted outcomes")
        outcome = self.factory.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeClientFactory:
    """Callable client factory; each call returns a FakeClient sharing one script."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.api_keys = []

    def __call__(self, api_key):
        self.api_keys.append(api_key)
        return FakeClient(self)


@pytest.fixture
def fake_factory():
    return FakeClientFactory()


@pytest.fixture
def sleeps():
    """Recorded sleep durations; pass sleeps.append as the sleep function."""
    return []


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No real API keys or config files leak into tests."""
    monkeypatch.setattr(gemini_client, "CONFIG_PATH", tmp_path / "kit_creator_config.json")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    return tmp_path / "kit_creator_config.json"
