"""
Kit document generation.

One Gemini text call that returns the markdown sales kit (image prompt table,
SEO block and product description).
"""

import time
from typing import Callable, Optional

from ..api.gemini_client import GeminiClient, get_client, require_api_key
from ..api.prompt_builders import build_kit_parts, build_system_instruction
from ..api.retry import KIT_RETRY_POLICY
from ..config import (
    KIT_FALLBACK_TEXT,
    KIT_MODEL_DEFAULT,
    KIT_MODEL_FAST,
    KIT_MODEL_THINKING,
    KIT_TEMPERATURE,
    THINKING_BUDGET,
)
from ..core.models import GenerationMode, ProductType
from ..logging_utils import log_generation_complete, log_generation_start, log_warning


def select_kit_model(mode: GenerationMode) -> str:
    """Model identifier for the kit call in the given mode."""
    mode = GenerationMode(mode)
    if mode == GenerationMode.THINKING:
        return KIT_MODEL_THINKING
    if mode == GenerationMode.FAST:
        return KIT_MODEL_FAST
    return KIT_MODEL_DEFAULT


def build_kit_generation_config(mode: GenerationMode) -> dict:
    """generationConfig for the kit call; thinking mode adds a reasoning budget."""
    config: dict = {"temperature": KIT_TEMPERATURE}
    if GenerationMode(mode) == GenerationMode.THINKING:
        config["thinkingConfig"] = {"thinkingBudget": THINKING_BUDGET}
    return config


def generate_kit(
    input_text: str,
    product_type: ProductType,
    mode: GenerationMode = GenerationMode.DEFAULT,
    image_data_url: Optional[str] = None,
    api_key: Optional[str] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Generate the markdown kit document for one idea and/or reference image.

    Args:
        input_text: The user's description (may be empty when an image is given).
        product_type: TSHIRT or INVITATION.
        mode: DEFAULT, THINKING or FAST model selection.
        image_data_url: Optional reference image as a data URL.
        api_key: Gemini API key (resolved from env/config when None).
        client_factory: Builds a client per call.
        sleep: Sleep used for retry backoff.

    Returns:
        The kit markdown, or KIT_FALLBACK_TEXT when the response has no text.

    Raises:
        RetriesExhaustedError: If quota/server errors persist through all attempts.
        GeminiAPIError: On a fatal API error.
    """
    key = require_api_key(api_key)
    model = select_kit_model(mode)
    parts = build_kit_parts(input_text, product_type, image_data_url)
    system_instruction = build_system_instruction(product_type)
    generation_config = build_kit_generation_config(mode)

    log_generation_start(f"kit ({ProductType(product_type).value}, {model})")

    response = KIT_RETRY_POLICY.execute(
        lambda: client_factory(key).generate_content(
            model,
            parts,
            system_instruction=system_instruction,
            generation_config=generation_config,
        ),
        sleep=sleep,
    )

    text = response.text
    if not text:
        log_warning(f"Kit response from {model} had no text (finishReason={response.finish_reason})")
        log_generation_complete("kit", False, "empty response")
        return KIT_FALLBACK_TEXT

    log_generation_complete("kit", True, f"{len(text)} chars")
    return text
