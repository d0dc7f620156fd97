"""Tests for kit_creator.processing.kit_generator."""

import pytest

from kit_creator.api.exceptions import GeminiAPIError, MissingEntitlementError, RetriesExhaustedError
from kit_creator.config import KIT_FALLBACK_TEXT, THINKING_BUDGET
from kit_creator.core.models import GenerationMode, ProductType
from kit_creator.processing.kit_generator import (
    build_kit_generation_config,
    generate_kit,
    select_kit_model,
)

from conftest import TEST_API_KEY, fatal_error, quota_error, server_error, text_response


class TestModelSelection:
    """Mode -> model and generationConfig."""

    def test_models(self):
        assert select_kit_model(GenerationMode.THINKING) == "gemini-3-pro-preview"
        assert select_kit_model(GenerationMode.FAST) == "gemini-flash-lite-latest"
        assert select_kit_model(GenerationMode.DEFAULT) == "gemini-3-flash-preview"

    def test_thinking_adds_budget(self):
        config = build_kit_generation_config(GenerationMode.THINKING)
        assert config == {"temperature": 1.0, "thinkingConfig": {"thinkingBudget": THINKING_BUDGET}}

    @pytest.mark.parametrize("mode", [GenerationMode.DEFAULT, GenerationMode.FAST])
    def test_other_modes_have_temperature_only(self, mode):
        assert build_kit_generation_config(mode) == {"temperature": 1.0}


class TestGenerateKit:
    """The kit call."""

    def test_returns_markdown_and_sends_expected_request(self, fake_factory, sleeps):
        fake_factory.outcomes = [text_response("| VARIATION | IMAGE PROMPT |\n| 1 | Cat |")]

        markdown = generate_kit(
            "retro cat",
            ProductType.TSHIRT,
            api_key=TEST_API_KEY,
            client_factory=fake_factory,
            sleep=sleeps.append,
        )

        assert markdown.startswith("| VARIATION | IMAGE PROMPT |")
        call = fake_factory.calls[0]
        assert call["model"] == "gemini-3-flash-preview"
        assert call["parts"] == [{"text": "User Input: retro cat\nProduct Type: TSHIRT"}]
        assert "isolated on white background" in call["system_instruction"]
        assert call["generation_config"] == {"temperature": 1.0}
        assert fake_factory.api_keys == [TEST_API_KEY]

    def test_reference_image_and_thinking_mode(self, fake_factory):
        fake_factory.outcomes = [text_response("kit")]

        generate_kit(
            "",
            ProductType.INVITATION,
            mode=GenerationMode.THINKING,
            image_data_url="data:image/jpeg;base64,/9j/AAA",
            api_key=TEST_API_KEY,
            client_factory=fake_factory,
        )

        call = fake_factory.calls[0]
        assert call["model"] == "gemini-3-pro-preview"
        assert call["parts"][1] == {"inline_data": {"mime_type": "image/jpeg", "data": "/9j/AAA"}}
        assert call["generation_config"]["thinkingConfig"] == {"thinkingBudget": 32768}
        assert "CARD TEMPLATE TEXT" in call["system_instruction"]

    def test_empty_text_returns_fallback(self, fake_factory):
        fake_factory.outcomes = [text_response("")]

        assert generate_kit("x", ProductType.TSHIRT, api_key=TEST_API_KEY, client_factory=fake_factory) == KIT_FALLBACK_TEXT

    def test_retries_server_errors_three_times(self, fake_factory, sleeps):
        fake_factory.outcomes = [server_error(), server_error(), text_response("kit")]

        markdown = generate_kit(
            "x", ProductType.TSHIRT, api_key=TEST_API_KEY, client_factory=fake_factory, sleep=sleeps.append
        )

        assert markdown == "kit"
        assert sleeps == [5.0, 10.0]
        assert len(fake_factory.calls) == 3

    def test_exhaustion_propagates(self, fake_factory, sleeps):
        fake_factory.outcomes = [quota_error(), quota_error(), quota_error()]

        with pytest.raises(RetriesExhaustedError):
            generate_kit("x", ProductType.TSHIRT, api_key=TEST_API_KEY, client_factory=fake_factory, sleep=sleeps.append)

        assert sleeps == [75.0, 75.0]

    def test_fatal_error_propagates_immediately(self, fake_factory):
        fake_factory.outcomes = [fatal_error()]

        with pytest.raises(GeminiAPIError):
            generate_kit("x", ProductType.TSHIRT, api_key=TEST_API_KEY, client_factory=fake_factory)

        assert len(fake_factory.calls) == 1

    def test_missing_api_key(self, fake_factory):
        with pytest.raises(MissingEntitlementError):
            generate_kit("x", ProductType.TSHIRT, client_factory=fake_factory)

        assert fake_factory.calls == []

    def test_key_resolved_from_environment(self, fake_factory, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        fake_factory.outcomes = [text_response("kit")]

        generate_kit("x", ProductType.TSHIRT, client_factory=fake_factory)

        assert fake_factory.api_keys == ["env-key"]
