"""
API module for Gemini interactions.

Handles all communication with Google Gemini API including:
- Authentication and configuration
- The generateContent REST call and response parsing
- Retry logic and error classification
- Prompt building
"""

from .exceptions import (
    KitCreatorError,
    GeminiAPIError,
    GeminiSafetyError,
    RetriesExhaustedError,
    KitValidationError,
    MissingEntitlementError,
)

from .gemini_client import (
    GeminiClient,
    GeminiResponse,
    get_client,
    get_api_key,
    get_personal_api_key,
    require_api_key,
    has_personal_api_key,
    load_config,
    save_config,
    interactive_api_key_setup,
    split_data_url,
    to_data_url,
    inline_image_part,
)

from .retry import (
    classify_error,
    execute_with_retry,
    KIT_RETRY_POLICY,
    IMAGE_RETRY_POLICY,
    ANALYSIS_RETRY_POLICY,
)

from .prompt_builders import (
    build_system_instruction,
    build_kit_parts,
    build_edit_prompt,
    build_analysis_prompt,
    clean_image_prompt,
)

__all__ = [
    # Exceptions
    "KitCreatorError",
    "GeminiAPIError",
    "GeminiSafetyError",
    "RetriesExhaustedError",
    "KitValidationError",
    "MissingEntitlementError",
    # Client
    "GeminiClient",
    "GeminiResponse",
    "get_client",
    "get_api_key",
    "get_personal_api_key",
    "require_api_key",
    "has_personal_api_key",
    "load_config",
    "save_config",
    "interactive_api_key_setup",
    "split_data_url",
    "to_data_url",
    "inline_image_part",
    # Retry
    "classify_error",
    "execute_with_retry",
    "KIT_RETRY_POLICY",
    "IMAGE_RETRY_POLICY",
    "ANALYSIS_RETRY_POLICY",
    # Prompt builders
    "build_system_instruction",
    "build_kit_parts",
    "build_edit_prompt",
    "build_analysis_prompt",
    "clean_image_prompt",
]
