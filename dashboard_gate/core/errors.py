"""Portal API and storage error classes.

Every failed portal call is raised as a PortalApiError subclass so callers
can tell throttling apart from auth, not-found, and server failures.
"""

import math


class PortalApiError(Exception):
    """Base class for portal API errors.

    All portal errors have a message, an optional HTTP status, and the
    machine-readable error codes returned by (or derived for) the response.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code, or None for transport failures.
        errors: Error codes or validation entries from the response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)


class RateLimitError(PortalApiError):
    """Too many requests (429).

    Carries the server's Retry-After hint, defaulting to 5 seconds.
    """

    def __init__(self, retry_after_seconds: float = 5.0) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            message=(
                "Rate limit exceeded. Please wait "
                f"{math.ceil(retry_after_seconds)} seconds before trying again."
            ),
            status_code=429,
            errors=["RATE_LIMIT"],
        )


class AuthenticationRequiredError(PortalApiError):
    """Authentication required (401)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "Authentication required. Please log in again.",
            status_code=401,
            errors=["REQUEST_FAILED"],
        )


class AccessDeniedError(PortalApiError):
    """Not allowed to access resource (403)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Access denied. You do not have permission to perform this action.",
            status_code=403,
            errors=["REQUEST_FAILED"],
        )


class ResourceNotFoundError(PortalApiError):
    """Resource not found (404)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "Not found. The requested resource does not exist.",
            status_code=404,
            errors=["REQUEST_FAILED"],
        )


class ServerError(PortalApiError):
    """Server-side failure (5xx).

    Args:
        status_code: The 5xx status returned.
        detail: Server message or reason phrase.
    """

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(
            message=(
                f"Server error ({status_code}): {detail}. Please try again later."
            ),
            status_code=status_code,
            errors=["SERVER_ERROR"],
        )


class ValidationFailedError(PortalApiError):
    """Request rejected with field-level validation errors (4xx)."""

    def __init__(self, status_code: int, errors: list[dict]) -> None:
        messages = ", ".join(
            str(err.get("msg") or err.get("message") or "") for err in errors
        )
        super().__init__(
            message=f"Validation failed: {messages}",
            status_code=status_code,
            errors=errors,
        )


class RequestFailedError(PortalApiError):
    """Any other non-2xx response, or a transport failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code, errors=["REQUEST_FAILED"])


class InvalidResponseError(PortalApiError):
    """Response body could not be decoded as a JSON object."""

    def __init__(self, message: str = "Invalid response from server") -> None:
        super().__init__(message, errors=["INVALID_RESPONSE"])


class StorageError(Exception):
    """Local key/value storage could not be read or written."""
