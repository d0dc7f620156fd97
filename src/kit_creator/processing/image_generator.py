"""
Sequential image generation and editing.

Handles the preview batch (one image per extracted prompt) and the six-variation
image editor. Both run strictly one call at a time with a pacing delay between
calls, and both skip items that fail instead of aborting the batch.
"""

import time
from typing import Callable, List, Optional, Sequence, Tuple

from ..api.exceptions import GeminiAPIError, GeminiSafetyError
from ..api.gemini_client import (
    GeminiClient,
    get_client,
    inline_image_part,
    require_api_key,
    to_data_url,
)
from ..api.prompt_builders import build_edit_prompt, clean_image_prompt
from ..api.retry import IMAGE_RETRY_POLICY
from ..config import (
    EDIT_VARIATION_COUNT,
    IMAGE_EDIT_MODEL,
    IMAGE_MODEL_HIGH_QUALITY,
    IMAGE_MODEL_STANDARD,
)
from ..core.models import AspectRatio, GeneratedAsset, ImageOptions, ItemOutcome
from ..logging_utils import (
    log_debug,
    log_generation_complete,
    log_generation_start,
    log_warning,
)
from .pacing import PacingPolicy, default_pacing


def select_image_model(options: ImageOptions) -> str:
    return IMAGE_MODEL_HIGH_QUALITY if options.use_high_quality else IMAGE_MODEL_STANDARD


def build_image_generation_config(options: ImageOptions) -> dict:
    """
    generationConfig for an image call.

    The resolution is only sent on the high-quality path.
    """
    image_config = {"aspectRatio": AspectRatio(options.aspect_ratio).value}
    if options.use_high_quality and options.size:
        image_config["imageSize"] = options.size.value
    return {"imageConfig": image_config}


def _call_for_image(
    client_factory: Callable[[str], GeminiClient],
    api_key: str,
    model: str,
    parts: List[dict],
    generation_config: dict,
    context: str,
    on_cooldown: Optional[Callable[[str], None]],
    sleep: Callable[[float], None],
) -> Tuple[str, str]:
    """
    One retried image call.

    Returns:
        (mime_type, base64_data) of the first inline image in the response.

    Raises:
        GeminiSafetyError: If the response was withheld by safety filters.
        GeminiAPIError: If the call failed or the response carried no image.
    """
    response = IMAGE_RETRY_POLICY.execute(
        lambda: client_factory(api_key).generate_content(
            model, parts, generation_config=generation_config
        ),
        on_cooldown=on_cooldown,
        sleep=sleep,
    )

    image = response.first_inline_image()
    if image is not None:
        return image

    if response.safety_blocked:
        raise GeminiSafetyError(
            f"Content blocked by safety filters ({context}): {response.finish_reason}",
            response.safety_ratings,
        )
    raise GeminiAPIError(f"No image data in Gemini response ({context}).")


def _pause_between(
    pacing: PacingPolicy,
    outcome: ItemOutcome,
    sleep: Callable[[float], None],
) -> None:
    delay = pacing.wait_before_next(outcome)
    if delay > 0:
        log_debug(f"Pacing: waiting {delay:g}s before next image call")
        sleep(delay)


def generate_preview_images(
    prompts: Sequence[str],
    options: ImageOptions,
    on_asset_ready: Optional[Callable[[GeneratedAsset], None]] = None,
    on_cooldown_start: Optional[Callable[[str], None]] = None,
    api_key: Optional[str] = None,
    pacing: Optional[PacingPolicy] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> List[GeneratedAsset]:
    """
    Generate one image per prompt, one call at a time.

    Each finished asset is appended to the result and passed to on_asset_ready
    immediately. A prompt that still fails after its retries is logged and
    skipped; the remaining prompts still run.

    Args:
        prompts: Image prompts in display order (normally from extract_prompts).
        options: Quality, size and aspect ratio.
        on_asset_ready: Called with each asset as soon as it is generated.
        on_cooldown_start: Called with a message whenever a retry cooldown starts.
        api_key: Gemini API key (resolved from env/config when None).
        pacing: Delay policy between calls (fixed 45s when None).
        client_factory: Builds a client per call.
        sleep: Sleep used for pacing and retry backoff.

    Returns:
        The generated assets, in prompt order, without failed slots.
    """
    key = require_api_key(api_key)
    pacing = default_pacing(pacing)
    model = select_image_model(options)
    generation_config = build_image_generation_config(options)
    results: List[GeneratedAsset] = []

    log_generation_start(f"preview images ({model})", count=len(prompts))

    for index, prompt in enumerate(prompts):
        clean_prompt = clean_image_prompt(prompt)
        context = f"variation {index + 1}"
        outcome = ItemOutcome.FAILED

        try:
            mime_type, data = _call_for_image(
                client_factory,
                key,
                model,
                [{"text": clean_prompt}],
                generation_config,
                context,
                on_cooldown_start,
                sleep,
            )
            asset = GeneratedAsset(url=to_data_url(data, mime_type), prompt=clean_prompt)
            results.append(asset)
            outcome = ItemOutcome.SUCCEEDED
            if on_asset_ready:
                on_asset_ready(asset)
        except GeminiSafetyError as e:
            log_warning(f"Skipping {context}: blocked by safety filters ({e})")
        except GeminiAPIError as e:
            log_warning(f"Skipping {context} after failure: {e}")

        if index < len(prompts) - 1:
            _pause_between(pacing, outcome, sleep)

    log_generation_complete(
        "preview images", bool(results) or not prompts,
        f"{len(results)}/{len(prompts)} generated",
    )
    return results


def edit_image_with_gemini(
    image_data_url: str,
    instruction: str,
    api_key: Optional[str] = None,
    pacing: Optional[PacingPolicy] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> List[GeneratedAsset]:
    """
    Produce up to six edited variations of a reference image.

    Exactly EDIT_VARIATION_COUNT calls are attempted, one at a time. A failed
    variation is logged and left out of the result.

    Args:
        image_data_url: Reference image as a data URL.
        instruction: What to change.
        api_key: Gemini API key (resolved from env/config when None).
        pacing: Delay policy between calls (fixed 45s when None).
        client_factory: Builds a client per call.
        sleep: Sleep used for pacing and retry backoff.

    Returns:
        The successful variations, in call order.
    """
    key = require_api_key(api_key)
    pacing = default_pacing(pacing)
    image_part = inline_image_part(image_data_url)
    generation_config = build_image_generation_config(ImageOptions(aspect_ratio=AspectRatio.SQUARE))
    results: List[GeneratedAsset] = []

    log_generation_start(f"image edit ({IMAGE_EDIT_MODEL})", count=EDIT_VARIATION_COUNT)

    for index in range(EDIT_VARIATION_COUNT):
        context = f"edit variation {index + 1}"
        parts = [image_part, {"text": build_edit_prompt(instruction, index + 1)}]
        outcome = ItemOutcome.FAILED

        try:
            mime_type, data = _call_for_image(
                client_factory,
                key,
                IMAGE_EDIT_MODEL,
                parts,
                generation_config,
                context,
                None,
                sleep,
            )
            results.append(GeneratedAsset(url=to_data_url(data, mime_type), prompt=instruction))
            outcome = ItemOutcome.SUCCEEDED
        except GeminiAPIError as e:
            log_warning(f"Edit failed ({context}): {e}")

        if index < EDIT_VARIATION_COUNT - 1:
            _pause_between(pacing, outcome, sleep)

    log_generation_complete(
        "image edit", bool(results), f"{len(results)}/{EDIT_VARIATION_COUNT} generated"
    )
    return results
