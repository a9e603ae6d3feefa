"""
Directory authority module.

Talks to the 42 intra API: machine credential caching, rate-limit retries
and typed user payloads.

Public API:
- ICredentialProvider / IDirectoryClient: Interfaces used by other modules
- CredentialCache: Client-credentials token cache
- RateLimitedTransport: Retry-on-429 wrapper around httpx
- DirectoryClient: Typed user endpoints
"""

from .interfaces import ICredentialProvider, IDirectoryClient
from .models import (
    Credential,
    TokenGrant,
    DirectoryImage,
    DirectoryUser,
    DirectoryUserSummary,
)
from .exceptions import (
    DirectoryError,
    AuthExchangeError,
    ExternalApiError,
    RateLimitExceededError,
    UserNotFoundError,
)
from .credentials import CredentialCache
from .transport import RateLimitedTransport
from .client import DirectoryClient

__all__ = [
    # Interfaces
    "ICredentialProvider",
    "IDirectoryClient",
    # Models
    "Credential",
    "TokenGrant",
    "DirectoryImage",
    "DirectoryUser",
    "DirectoryUserSummary",
    # Exceptions
    "DirectoryError",
    "AuthExchangeError",
    "ExternalApiError",
    "RateLimitExceededError",
    "UserNotFoundError",
    # Implementations
    "CredentialCache",
    "RateLimitedTransport",
    "DirectoryClient",
]
