"""
Profile module exceptions.
"""

from typing import Optional

from shared.exceptions import PeerdexError


class ProfileError(PeerdexError):
    """Base exception for profile cache errors."""

    pass


class CacheUnavailableError(ProfileError):
    """
    Raised by a profile store when its backend cannot be reached.

    Always a soft failure: readers treat it as a miss, writers skip the
    write.
    """

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Profile cache unavailable during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            code="CACHE_UNAVAILABLE",
            details={"operation": operation},
        )
        self.operation = operation
