"""
Gemini API client for kit generation.

Handles authentication, the REST call to generateContent, and response
parsing for Google Gemini. Retrying is left to api.retry so each call site
can choose its own policy.
"""

import json
import os
import re
import webbrowser
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config import (
    API_KEY_PAGE_URL,
    CONFIG_PATH,
    DEFAULT_IMAGE_MIME,
    GEMINI_API_BASE,
    HTTP_TIMEOUT_SECONDS,
)
from ..logging_utils import log_api_call, log_debug, log_warning
from .exceptions import GeminiAPIError, MissingEntitlementError


# Finish reasons that mean the candidate was withheld by safety filters
SAFETY_FINISH_REASONS = ("SAFETY", "IMAGE_SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST")

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)


# =============================================================================
# Configuration Management
# =============================================================================

def load_config() -> dict:
    """
    Load configuration from ~/.kit_creator_config.json if present.

    Returns:
        Dictionary containing configuration, or empty dict if not found or unreadable.
    """
    if CONFIG_PATH.is_file():
        try:
            with CONFIG_PATH.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_warning(f"Could not read config file {CONFIG_PATH}: {e}")
            return {}
    return {}


def save_config(config: dict) -> None:
    """
    Save configuration dictionary to CONFIG_PATH.

    Sets file permissions to 0o600 since the file holds an API key.
    """
    CONFIG_PATH.write_text(json.dumps(config, indent=2), encoding="utf-8")
    try:
        os.chmod(CONFIG_PATH, 0o600)
    except OSError:
        pass  # Permissions may not be supported on all platforms


def interactive_api_key_setup() -> str:
    """
    Prompt user for a personal Gemini API key and save it to config.

    Opens browser to API key page and prompts for input.

    Returns:
        The API key entered by the user.

    Raises:
        SystemExit: If no API key is entered.
    """
    print("\nIt looks like you haven't configured a Gemini API key yet.")
    print("The kit creator needs a Google Gemini API key to generate kits and images.")
    input("Press Enter to open the Gemini API key page in your browser...")

    try:
        webbrowser.open(API_KEY_PAGE_URL)
    except webbrowser.Error as e:
        print(f"Warning: could not open browser automatically: {e}")
        print(f"Please open this URL manually in your browser: {API_KEY_PAGE_URL}")

    api_key = input("\nPaste your Gemini API key here and press Enter:\n> ").strip()
    if not api_key:
        raise SystemExit("No API key entered. Please rerun the command when you have a key.")

    config = load_config()
    config["api_key"] = api_key
    save_config(config)
    print(f"Saved API key to {CONFIG_PATH}.")
    return api_key


def get_personal_api_key() -> Optional[str]:
    """Return the user's own key from GEMINI_API_KEY or the config file, if set."""
    env_key = os.environ.get("GEMINI_API_KEY")
    if env_key:
        return env_key
    return load_config().get("api_key") or None


def has_personal_api_key() -> bool:
    """True when the user configured their own key (required for high-quality images)."""
    return get_personal_api_key() is not None


def get_api_key(interactive: bool = False) -> Optional[str]:
    """
    Return a Gemini API key.

    Checks the personal key first (GEMINI_API_KEY, then the config file), then
    the shared API_KEY environment variable. If none is available and
    interactive is True, prompts the user on the terminal.

    Returns:
        The API key, or None if nothing is configured and interactive is False.
    """
    personal = get_personal_api_key()
    if personal:
        return personal

    shared = os.environ.get("API_KEY")
    if shared:
        return shared

    if interactive:
        return interactive_api_key_setup()
    return None


def require_api_key(api_key: Optional[str] = None) -> str:
    """
    Return api_key, or the configured key when api_key is None.

    Raises:
        MissingEntitlementError: If no key is available at all.
    """
    key = api_key or get_api_key()
    if not key:
        raise MissingEntitlementError(
            "No Gemini API key configured. Set GEMINI_API_KEY or run the setup."
        )
    return key


# =============================================================================
# Inline Image Helpers
# =============================================================================

def split_data_url(image: str) -> Tuple[str, str]:
    """
    Split a data URL into (mime_type, base64_data).

    Bare base64 strings are accepted too and get DEFAULT_IMAGE_MIME.
    """
    match = _DATA_URL_RE.match(image.strip())
    if not match:
        return DEFAULT_IMAGE_MIME, image.strip()
    return match.group("mime") or DEFAULT_IMAGE_MIME, match.group("data")


def to_data_url(data_b64: str, mime_type: str = "image/png") -> str:
    """Build a self-describing data URL from base64 image data."""
    return f"data:{mime_type};base64,{data_b64}"


def inline_image_part(image: str) -> dict:
    """Build an inline_data content part from a data URL (or bare base64)."""
    mime_type, data = split_data_url(image)
    return {"inline_data": {"mime_type": mime_type, "data": data}}


# =============================================================================
# Responses
# =============================================================================

@dataclass
class GeminiResponse:
    """Thin view over a parsed generateContent JSON response."""
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def candidates(self) -> List[dict]:
        return self.data.get("candidates") or []

    @property
    def parts(self) -> List[dict]:
        """Content parts of the first candidate."""
        if not self.candidates:
            return []
        return (self.candidates[0].get("content") or {}).get("parts") or []

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate, excluding thought parts."""
        return "".join(
            part["text"] for part in self.parts
            if "text" in part and not part.get("thought")
        )

    @property
    def finish_reason(self) -> Optional[str]:
        if not self.candidates:
            return None
        return self.candidates[0].get("finishReason")

    @property
    def safety_blocked(self) -> bool:
        block_reason = (self.data.get("promptFeedback") or {}).get("blockReason")
        return bool(block_reason) or self.finish_reason in SAFETY_FINISH_REASONS

    @property
    def safety_ratings(self) -> List[dict]:
        if not self.candidates:
            return []
        return self.candidates[0].get("safetyRatings") or []

    def first_inline_image(self) -> Optional[Tuple[str, str]]:
        """
        Return (mime_type, base64_data) of the first inline image part, if any.

        Handles both 'inlineData' and 'inline_data' field naming.
        """
        for part in self.parts:
            blob = part.get("inlineData") or part.get("inline_data")
            if blob and blob.get("data"):
                mime_type = blob.get("mimeType") or blob.get("mime_type") or "image/png"
                return mime_type, blob["data"]
        return None


def _error_from_response(response: requests.Response, model: str) -> GeminiAPIError:
    """Turn a non-2xx HTTP response into a GeminiAPIError with status and error class."""
    error_class = None
    message = response.text
    try:
        body = response.json()
        error = body.get("error") or {}
        error_class = error.get("status")
        message = error.get("message") or message
    except ValueError:
        pass
    return GeminiAPIError(
        f"Gemini API error {response.status_code} ({model}): {message}",
        status_code=response.status_code,
        error_class=error_class,
    )


# =============================================================================
# Client
# =============================================================================

class GeminiClient:
    """
    Stateless client for the Gemini generateContent endpoint.

    Each call opens its own HTTP request; no session is shared between calls.
    """

    def __init__(self, api_key: str, timeout: float = HTTP_TIMEOUT_SECONDS):
        self.api_key = api_key
        self.timeout = timeout

    def generate_content(
        self,
        model: str,
        parts: List[dict],
        system_instruction: Optional[str] = None,
        generation_config: Optional[dict] = None,
    ) -> GeminiResponse:
        """
        Call models/{model}:generateContent once.

        Args:
            model: Gemini model identifier.
            parts: Content parts (text and/or inline_data).
            system_instruction: Optional system instruction text.
            generation_config: Optional generationConfig dict (temperature,
                thinkingConfig, imageConfig, ...).

        Returns:
            The parsed response.

        Raises:
            GeminiAPIError: On transport failure or a non-2xx response.
        """
        url = f"{GEMINI_API_BASE}/models/{model}:generateContent"
        payload: Dict[str, Any] = {"contents": [{"parts": parts}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        log_debug(f"Gemini API call starting: {model} ({len(parts)} parts)")

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            log_api_call(model, False, str(e))
            raise GeminiAPIError(f"Gemini request failed ({model}): {e}") from e

        if not response.ok:
            error = _error_from_response(response, model)
            log_api_call(model, False, f"HTTP {response.status_code}: {str(error)[:200]}")
            raise error

        try:
            data = response.json()
        except ValueError as e:
            log_api_call(model, False, "Response was not valid JSON")
            raise GeminiAPIError(f"Invalid JSON in Gemini response ({model})") from e

        result = GeminiResponse(data)
        log_api_call(model, True, f"finishReason={result.finish_reason}")
        return result


def get_client(api_key: str) -> GeminiClient:
    """Create a fresh client for one call."""
    return GeminiClient(api_key)
