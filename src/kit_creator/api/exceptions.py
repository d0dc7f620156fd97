"""Custom exceptions for Gemini API errors and request validation."""
from typing import List, Optional


class KitCreatorError(RuntimeError):
    """Base exception for everything raised by the kit creator."""
    pass


class GeminiAPIError(KitCreatorError):
    """
    Raised when a Gemini API call fails.

    Attributes:
        status_code: HTTP status of the failed call, or None for transport errors.
        error_class: Machine-readable error status from the response body
            (e.g. "RESOURCE_EXHAUSTED"), if any.
    """
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_class: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_class = error_class


class GeminiSafetyError(GeminiAPIError):
    """
    Raised when Gemini blocks content due to safety filters.

    Attributes:
        safety_ratings: List of safety rating dicts from the API response.
    """
    def __init__(self, message: str, safety_ratings: Optional[List[dict]] = None):
        super().__init__(message)
        self.safety_ratings = safety_ratings or []


class RetriesExhaustedError(GeminiAPIError):
    """
    Raised when a retryable error persists through every allowed attempt.

    The last underlying error is available as __cause__ and last_error.
    """
    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(
            message,
            status_code=getattr(last_error, "status_code", None),
            error_class=getattr(last_error, "error_class", None),
        )
        self.attempts = attempts
        self.last_error = last_error


class KitValidationError(KitCreatorError):
    """Raised before any remote call when a request is missing required input."""
    pass


class MissingEntitlementError(KitValidationError):
    """Raised when the configured API key does not allow the requested feature."""
    pass
