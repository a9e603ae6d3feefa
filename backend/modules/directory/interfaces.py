"""
Directory authority module interface.

Other modules depend on these protocols, not the concrete httpx-backed
classes, so resolver and populator tests can run against fakes.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import DirectoryUser, DirectoryUserSummary


@runtime_checkable
class ICredentialProvider(Protocol):
    """Source of a valid bearer token for the authority."""

    async def get_valid_credential(self) -> str:
        """
        Return a bearer token that is valid right now.

        Raises:
            ConfigError: If client id or secret is not configured
            AuthExchangeError: If the token exchange fails
        """
        ...


@runtime_checkable
class IDirectoryClient(Protocol):
    """
    Interface for reading users from the directory authority.

    Implementations authenticate and apply rate-limit retries themselves.
    """

    async def get_user(self, login: str) -> DirectoryUser:
        """
        Fetch the full profile of one user.

        Raises:
            UserNotFoundError: If the authority has no such login
            RateLimitExceededError: If the retry budget is exhausted
            ExternalApiError: For any other failure
        """
        ...

    async def list_users(
        self,
        page: int,
        page_size: int,
        campus_id: Optional[int] = None,
    ) -> list[DirectoryUserSummary]:
        """
        Fetch one page of the user list (1-indexed).

        Returns an empty list past the last page.
        """
        ...
