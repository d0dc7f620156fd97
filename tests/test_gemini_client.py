"""Tests for kit_creator.api.gemini_client."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from kit_creator.api import gemini_client
from kit_creator.api.exceptions import GeminiAPIError, MissingEntitlementError
from kit_creator.api.gemini_client import (
    GeminiClient,
    GeminiResponse,
    get_api_key,
    has_personal_api_key,
    inline_image_part,
    load_config,
    require_api_key,
    save_config,
    split_data_url,
    to_data_url,
)
from kit_creator.api.retry import QUOTA, classify_error


def http_response(status_code, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text or json.dumps(body or {})
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


# ============================================================================
# Keys and config
# ============================================================================

class TestApiKeys:
    """Personal vs shared key resolution."""

    def test_nothing_configured(self):
        assert get_api_key() is None
        assert not has_personal_api_key()

    def test_env_personal_key_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "personal")
        monkeypatch.setenv("API_KEY", "shared")

        assert get_api_key() == "personal"
        assert has_personal_api_key()

    def test_config_file_key(self):
        save_config({"api_key": "from-file"})

        assert load_config() == {"api_key": "from-file"}
        assert get_api_key() == "from-file"
        assert has_personal_api_key()

    def test_shared_key_is_not_personal(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "shared")

        assert get_api_key() == "shared"
        assert not has_personal_api_key()

    def test_unreadable_config_is_ignored(self, isolated_config):
        isolated_config.write_text("{not json", encoding="utf-8")

        assert load_config() == {}

    def test_require_api_key(self, monkeypatch):
        assert require_api_key("explicit") == "explicit"
        with pytest.raises(MissingEntitlementError):
            require_api_key()
        monkeypatch.setenv("API_KEY", "shared")
        assert require_api_key() == "shared"

    def test_interactive_setup_saves_key(self, isolated_config):
        with patch("builtins.input", side_effect=["", "  typed-key  "]), \
                patch("kit_creator.api.gemini_client.webbrowser.open") as open_browser:
            assert get_api_key(interactive=True) == "typed-key"

        open_browser.assert_called_once()
        assert json.loads(isolated_config.read_text(encoding="utf-8")) == {"api_key": "typed-key"}

    def test_interactive_setup_without_key_exits(self):
        with patch("builtins.input", side_effect=["", ""]), \
                patch("kit_creator.api.gemini_client.webbrowser.open"):
            with pytest.raises(SystemExit):
                get_api_key(interactive=True)


# ============================================================================
# Data URLs
# ============================================================================

class TestDataUrls:
    def test_split_data_url(self):
        assert split_data_url("data:image/webp;base64,AAAA") == ("image/webp", "AAAA")

    def test_bare_base64_gets_default_mime(self):
        assert split_data_url("AAAA") == ("image/jpeg", "AAAA")

    def test_to_data_url(self):
        assert to_data_url("QUJD") == "data:image/png;base64,QUJD"
        assert to_data_url("QUJD", "image/jpeg") == "data:image/jpeg;base64,QUJD"

    def test_inline_image_part(self):
        assert inline_image_part("data:image/png;base64,QUJD") == {
            "inline_data": {"mime_type": "image/png", "data": "QUJD"}
        }


# ============================================================================
# Responses
# ============================================================================

class TestGeminiResponse:
    def test_text_skips_thought_parts(self):
        response = GeminiResponse({"candidates": [{"content": {"parts": [
            {"text": "thinking...", "thought": True},
            {"text": "Hello "},
            {"text": "kit"},
        ]}}]})

        assert response.text == "Hello kit"

    def test_empty_response(self):
        response = GeminiResponse({})

        assert response.text == ""
        assert response.finish_reason is None
        assert response.first_inline_image() is None
        assert not response.safety_blocked

    def test_inline_image_snake_case(self):
        response = GeminiResponse({"candidates": [{"content": {"parts": [
            {"inline_data": {"mime_type": "image/webp", "data": "QUJD"}},
        ]}}]})

        assert response.first_inline_image() == ("image/webp", "QUJD")

    def test_prompt_feedback_block(self):
        response = GeminiResponse({"promptFeedback": {"blockReason": "SAFETY"}})
        assert response.safety_blocked

    def test_safety_finish_reason(self):
        response = GeminiResponse({"candidates": [{"finishReason": "SAFETY", "safetyRatings": [{"a": 1}]}]})

        assert response.safety_blocked
        assert response.safety_ratings == [{"a": 1}]


# ============================================================================
# HTTP client
# ============================================================================

class TestGeminiClient:
    """generateContent over requests."""

    def test_payload_shape(self):
        body = {"candidates": [{"content": {"parts": [{"text": "ok"}]}, "finishReason": "STOP"}]}

        with patch("kit_creator.api.gemini_client.requests.post", return_value=http_response(200, body)) as post:
            response = GeminiClient("k", timeout=12).generate_content(
                "gemini-3-flash-preview",
                [{"text": "hi"}],
                system_instruction="be helpful",
                generation_config={"temperature": 1.0},
            )

        assert response.text == "ok"
        args, kwargs = post.call_args
        assert args[0].endswith("/models/gemini-3-flash-preview:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "k"
        assert kwargs["timeout"] == 12
        assert kwargs["json"] == {
            "contents": [{"parts": [{"text": "hi"}]}],
            "systemInstruction": {"parts": [{"text": "be helpful"}]},
            "generationConfig": {"temperature": 1.0},
        }

    def test_optional_fields_omitted(self):
        with patch("kit_creator.api.gemini_client.requests.post", return_value=http_response(200, {})) as post:
            GeminiClient("k").generate_content("m", [{"text": "hi"}])

        assert post.call_args.kwargs["json"] == {"contents": [{"parts": [{"text": "hi"}]}]}

    def test_http_error_carries_status_and_class(self):
        body = {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}

        with patch("kit_creator.api.gemini_client.requests.post", return_value=http_response(429, body)):
            with pytest.raises(GeminiAPIError) as excinfo:
                GeminiClient("k").generate_content("m", [{"text": "hi"}])

        assert excinfo.value.status_code == 429
        assert excinfo.value.error_class == "RESOURCE_EXHAUSTED"
        assert "Quota exceeded" in str(excinfo.value)
        assert classify_error(excinfo.value) == QUOTA

    def test_http_error_without_json_body(self):
        with patch("kit_creator.api.gemini_client.requests.post", return_value=http_response(502, text="Bad Gateway")):
            with pytest.raises(GeminiAPIError) as excinfo:
                GeminiClient("k").generate_content("m", [])

        assert excinfo.value.status_code == 502
        assert excinfo.value.error_class is None
        assert "Bad Gateway" in str(excinfo.value)

    def test_transport_error_wrapped(self):
        with patch(
            "kit_creator.api.gemini_client.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(GeminiAPIError) as excinfo:
                GeminiClient("k").generate_content("m", [])

        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)

    def test_invalid_json_success_body(self):
        with patch("kit_creator.api.gemini_client.requests.post", return_value=http_response(200, None, text="<html>")):
            with pytest.raises(GeminiAPIError, match="Invalid JSON"):
                GeminiClient("k").generate_content("m", [])

    def test_get_client(self):
        client = gemini_client.get_client("abc")
        assert isinstance(client, GeminiClient)
        assert client.api_key == "abc"
