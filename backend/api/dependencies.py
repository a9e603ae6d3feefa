"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. The credential cache, the HTTP client and the background
writer are owned here and handed to the services that need them; nothing
else creates them.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    import httpx

    from modules.directory.credentials import CredentialCache
    from modules.directory.interfaces import IDirectoryClient
    from modules.directory.transport import RateLimitedTransport
    from modules.population.populator import BulkPopulator
    from modules.profiles.interfaces import IProfileResolver, IProfileStore, ISearchRanker
    from modules.profiles.writer import BackgroundWriter

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached for the
    lifetime of the container. Call aclose() on shutdown to flush pending
    cache writes and release the HTTP connection pool.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._http: "httpx.AsyncClient | None" = None
        self._credentials: "CredentialCache | None" = None
        self._transport: "RateLimitedTransport | None" = None
        self._directory: "IDirectoryClient | None" = None
        self._profile_store: "IProfileStore | None" = None
        self._writer: "BackgroundWriter | None" = None
        self._resolver: "IProfileResolver | None" = None
        self._search: "ISearchRanker | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def http(self) -> "httpx.AsyncClient":
        """Shared HTTP client; its timeout applies to every authority call."""
        if self._http is None:
            import httpx
            self._http = httpx.AsyncClient(
                timeout=self.settings.http_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        return self._http

    @property
    def credentials(self) -> "CredentialCache":
        """The process-wide directory credential."""
        if self._credentials is None:
            from modules.directory.credentials import CredentialCache
            s = self.settings
            self._credentials = CredentialCache(
                self.http,
                token_url=s.intra_token_url,
                client_id=s.intra_client_id,
                client_secret=s.intra_client_secret,
                safety_margin=timedelta(seconds=s.credential_safety_margin_seconds),
            )
        return self._credentials

    @property
    def transport(self) -> "RateLimitedTransport":
        if self._transport is None:
            from modules.directory.transport import RateLimitedTransport
            s = self.settings
            self._transport = RateLimitedTransport(
                self.http,
                max_retries=s.rate_limit_max_retries,
                base_delay=s.rate_limit_base_delay_seconds,
                max_delay=s.rate_limit_max_delay_seconds,
            )
        return self._transport

    @property
    def directory(self) -> "IDirectoryClient":
        if self._directory is None:
            from modules.directory.client import DirectoryClient
            self._directory = DirectoryClient(
                self.credentials,
                self.transport,
                base_url=self.settings.intra_api_base_url,
            )
        return self._directory

    @property
    def profile_store(self) -> "IProfileStore":
        if self._profile_store is None:
            if self.settings.profile_store == "memory":
                from modules.profiles.repository import InMemoryProfileStore
                logger.warning("Using in-memory profile store; cache is not persisted")
                self._profile_store = InMemoryProfileStore()
            else:
                from modules.profiles.repository import SupabaseProfileStore
                from shared.database import get_supabase_client
                self._profile_store = SupabaseProfileStore(get_supabase_client())
        return self._profile_store

    @property
    def writer(self) -> "BackgroundWriter":
        if self._writer is None:
            from modules.profiles.writer import BackgroundWriter
            self._writer = BackgroundWriter(self.settings.max_background_writes)
        return self._writer

    @property
    def resolver(self) -> "IProfileResolver":
        if self._resolver is None:
            from modules.profiles.resolver import ProfileResolver
            max_age = self.settings.profile_max_age_seconds
            self._resolver = ProfileResolver(
                self.profile_store,
                self.directory,
                self.writer,
                max_age=timedelta(seconds=max_age) if max_age > 0 else None,
            )
        return self._resolver

    @property
    def search(self) -> "ISearchRanker":
        if self._search is None:
            from modules.profiles.search import SearchRanker
            self._search = SearchRanker(
                self.profile_store,
                per_tier_cap=self.settings.search_per_tier_cap,
            )
        return self._search

    def populator(self, campus_id: Optional[int] = None) -> "BulkPopulator":
        """Build a population job; ``campus_id`` overrides INTRA_CAMPUS_ID."""
        from modules.population.populator import BulkPopulator
        s = self.settings
        return BulkPopulator(
            self.directory,
            self.profile_store,
            page_size=s.populate_page_size,
            batch_size=s.populate_batch_size,
            page_delay=s.populate_page_delay_seconds,
            batch_delay=s.populate_batch_delay_seconds,
            campus_id=campus_id if campus_id is not None else s.intra_campus_id,
        )

    async def aclose(self) -> None:
        """Flush background writes and close the HTTP client."""
        if self._writer is not None:
            await self._writer.drain()
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._http = None
        self._credentials = None
        self._transport = None
        self._directory = None
        self._profile_store = None
        self._writer = None
        self._resolver = None
        self._search = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container with new
    service instances. Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_app_settings() -> Settings:
    """FastAPI dependency for settings."""
    return get_container().settings


def get_profile_resolver() -> "IProfileResolver":
    """FastAPI dependency for the profile resolver."""
    return get_container().resolver


def get_search_ranker() -> "ISearchRanker":
    """FastAPI dependency for the search ranker."""
    return get_container().search
