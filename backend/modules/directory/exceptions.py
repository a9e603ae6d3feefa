"""
Directory authority module exceptions.

These exceptions are raised while talking to the 42 intra API and can be
caught by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError, NotFoundError, PeerdexError

SERVICE_NAME = "intra"


class DirectoryError(PeerdexError):
    """Base exception for directory-authority errors."""

    pass


class AuthExchangeError(ExternalServiceError, DirectoryError):
    """Raised when the client-credentials token exchange fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            f"Credential exchange failed: {message}",
            service=SERVICE_NAME,
            code="AUTH_EXCHANGE_FAILED",
            details={"status_code": status_code},
        )
        self.status_code = status_code


class ExternalApiError(ExternalServiceError, DirectoryError):
    """
    Raised for any non-success authority response other than rate limiting.

    status_code is None when no response was received (timeout, connection
    reset, DNS failure).
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(
            message,
            service=SERVICE_NAME,
            code="EXTERNAL_API_ERROR",
            details={"status_code": status_code},
        )
        self.status_code = status_code


class RateLimitExceededError(ExternalServiceError, DirectoryError):
    """Raised when the authority keeps rate limiting past the retry budget."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Rate limit still in effect after {attempts} attempts",
            service=SERVICE_NAME,
            code="RATE_LIMIT_EXCEEDED",
            details={"attempts": attempts},
        )
        self.attempts = attempts


class UserNotFoundError(NotFoundError, DirectoryError):
    """Raised when the authority has no user with the requested login."""

    def __init__(self, login: str):
        super().__init__(
            f"User not found: {login}",
            code="USER_NOT_FOUND",
            details={"login": login},
        )
        self.login = login
