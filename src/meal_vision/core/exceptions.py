"""Custom exception classes for the API.

Every subclass carries a stable machine-readable ``code`` that is sent to the
client in the failure envelope alongside a generic human-readable message.
"""

from typing import Any


class APIError(Exception):
    """Base exception for API errors."""

    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str | None = None,
        details: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(message)

    def to_envelope(self) -> dict:
        """Render the client-facing failure envelope."""
        return {"success": False, "error": self.message, "code": self.code}


class InvalidRequestError(APIError):
    """Malformed analyze request; no external call was made."""

    code = "INVALID_REQUEST"

    def __init__(self, message: str = "Invalid request format", details: Any = None):
        super().__init__(message=message, status_code=400, details=details)


class UnauthorizedError(APIError):
    """Missing or invalid session."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, status_code=401)


class ImageTooLargeError(APIError):
    """Decoded image exceeds the configured maximum."""

    code = "IMAGE_TOO_LARGE"

    def __init__(self, size_bytes: int, max_bytes: int):
        size_mb = size_bytes / 1024 / 1024
        max_mb = max_bytes / 1024 / 1024
        super().__init__(
            message=(
                f"Image size ({size_mb:.2f}MB) exceeds maximum allowed size "
                f"of {max_mb:g}MB"
            ),
            status_code=400,
            details={"size": size_bytes, "max_size": max_bytes},
        )
        self.size_bytes = size_bytes


class ModelTimeoutError(APIError):
    """External model call exceeded the timeout."""

    code = "TIMEOUT"

    def __init__(self, message: str = "Analysis request timed out. Please try again."):
        super().__init__(message=message, status_code=504)


class AIServiceError(APIError):
    """External model call failed for a non-timeout reason."""

    code = "AI_ERROR"

    def __init__(
        self,
        message: str = "AI analysis service is temporarily unavailable. Please try again.",
        details: Any = None,
    ):
        super().__init__(message=message, status_code=500, details=details)


class ParseError(APIError):
    """Model output could not be reconciled into a MealAnalysis."""

    code = "PARSE_ERROR"

    def __init__(self, message: str = "Failed to parse analysis results. Please try again."):
        super().__init__(message=message, status_code=500)


class InternalError(APIError):
    """Unanticipated fault."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred. Please try again."):
        super().__init__(message=message, status_code=500)
