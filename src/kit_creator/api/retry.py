"""
Bounded retry with quota-aware backoff for single Gemini calls.

Errors are sorted into three kinds:
- quota:  HTTP 429 / RESOURCE_EXHAUSTED / "quota" -> fixed cooldown window
- server: HTTP 500                                -> exponential backoff
- fatal:  anything else                           -> raised immediately
"""

import time
from typing import Callable, Optional, TypeVar

from ..config import (
    ANALYSIS_RETRY,
    IMAGE_RETRY,
    KIT_RETRY,
    QUOTA_COOLDOWN_SECONDS,
)
from ..core.models import RetryPolicy
from ..logging_utils import log_error, log_warning
from .exceptions import RetriesExhaustedError

T = TypeVar("T")

QUOTA = "quota"
SERVER = "server"
FATAL = "fatal"

# Call-site policies
KIT_RETRY_POLICY = RetryPolicy(*KIT_RETRY)
IMAGE_RETRY_POLICY = RetryPolicy(*IMAGE_RETRY)
ANALYSIS_RETRY_POLICY = RetryPolicy(*ANALYSIS_RETRY)


def classify_error(error: BaseException) -> str:
    """
    Classify an exception as QUOTA, SERVER or FATAL.

    Looks at a status_code / status attribute, an error_class attribute and
    the message text.
    """
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    error_class = getattr(error, "error_class", None) or ""
    message = str(error)

    if (
        status == 429
        or error_class == "RESOURCE_EXHAUSTED"
        or "429" in message
        or "RESOURCE_EXHAUSTED" in message
        or "quota" in message
    ):
        return QUOTA
    if status == 500:
        return SERVER
    return FATAL


def execute_with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 5.0,
    on_cooldown: Optional[Callable[[str], None]] = None,
    quota_delay: float = QUOTA_COOLDOWN_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run operation, retrying quota and server errors up to max_attempts times.

    Quota errors wait quota_delay before the next attempt. Server errors wait
    initial_delay, doubled after every retry. on_cooldown receives a
    human-readable message before each wait.

    Args:
        operation: Zero-argument callable performing one remote call.
        max_attempts: Total attempts allowed (including the first).
        initial_delay: First server-error backoff, in seconds.
        on_cooldown: Optional progress callback.
        quota_delay: Fixed wait after a quota error, in seconds.
        sleep: Sleep function (injectable for tests).

    Returns:
        Whatever operation returns.

    Raises:
        RetriesExhaustedError: If the last allowed attempt fails with a quota
            or server error.
        Exception: Fatal errors are re-raised unchanged on first occurrence.
    """
    current_delay = initial_delay

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            kind = classify_error(e)
            if kind == FATAL:
                raise

            if attempt >= max_attempts:
                log_error(f"Giving up after {attempt} attempts ({kind} error)", str(e))
                raise RetriesExhaustedError(
                    f"Maximum retries reached due to API quota limits ({attempt} attempts): {e}",
                    attempts=attempt,
                    last_error=e,
                ) from e

            if kind == QUOTA:
                wait_time = quota_delay
                message = f"Rate limit hit. Cooling down for {int(quota_delay)}s..."
            else:
                wait_time = current_delay
                message = "Server busy. Retrying..."

            if on_cooldown:
                on_cooldown(message)
            log_warning(
                f"{kind.capitalize()} error on attempt {attempt}/{max_attempts}; "
                f"waiting {wait_time:g}s: {e}"
            )
            sleep(wait_time)
            current_delay *= 2

    # Only reachable when max_attempts < 1
    raise RetriesExhaustedError(
        "Maximum retries reached due to API quota limits.", attempts=0
    )
