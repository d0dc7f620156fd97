"""
Free-text analysis of an uploaded image for POD research.
"""

import time
from typing import Callable, Optional

from ..api.gemini_client import GeminiClient, get_client, inline_image_part, require_api_key
from ..api.prompt_builders import build_analysis_prompt
from ..api.retry import ANALYSIS_RETRY_POLICY
from ..config import ANALYSIS_FALLBACK_TEXT, ANALYSIS_MODEL
from ..logging_utils import log_generation_complete, log_generation_start


def analyze_image(
    image_data_url: str,
    api_key: Optional[str] = None,
    client_factory: Callable[[str], GeminiClient] = get_client,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Ask the highest-capability model for visual elements, audience and keywords.

    Returns:
        The analysis text, or ANALYSIS_FALLBACK_TEXT when the response is empty.
    """
    key = require_api_key(api_key)
    parts = [inline_image_part(image_data_url), {"text": build_analysis_prompt()}]

    log_generation_start(f"image analysis ({ANALYSIS_MODEL})")
    response = ANALYSIS_RETRY_POLICY.execute(
        lambda: client_factory(key).generate_content(ANALYSIS_MODEL, parts),
        sleep=sleep,
    )

    text = response.text
    log_generation_complete("image analysis", bool(text), f"{len(text)} chars")
    return text or ANALYSIS_FALLBACK_TEXT
