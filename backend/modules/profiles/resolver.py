"""
Cache-aside profile resolution.

A cached full profile is served without touching the network. Misses,
partial records, forced refreshes and (optionally) stale records are
fetched from the directory, returned directly, and written back to the
cache in the background.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from modules.directory.exceptions import DirectoryError, UserNotFoundError
from modules.directory.interfaces import IDirectoryClient
from shared.clock import Clock, utc_now

from .exceptions import CacheUnavailableError
from .interfaces import IProfileStore
from .models import ProfileRecord, profile_from_directory_user
from .writer import BackgroundWriter

logger = logging.getLogger(__name__)


class ProfileResolver:
    """
    Resolves logins to profiles through the cache.

    Concurrent fetches for the same login are coalesced: the first caller
    starts the fetch and later callers await the same task.
    """

    def __init__(
        self,
        store: IProfileStore,
        directory: IDirectoryClient,
        writer: BackgroundWriter,
        max_age: Optional[timedelta] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize the resolver.

        Args:
            store: Profile cache.
            directory: Authority client used on cache misses.
            writer: Runs cache upserts off the request path.
            max_age: When set, full records older than this are refreshed,
                     falling back to the cached copy if the refresh fails.
            clock: Time source for fetch timestamps and staleness checks.
        """
        self._store = store
        self._directory = directory
        self._writer = writer
        self._max_age = max_age
        self._clock = clock
        self._in_flight: dict[str, asyncio.Task] = {}

    @property
    def writer(self) -> BackgroundWriter:
        return self._writer

    async def resolve(self, login: str, force_refresh: bool = False) -> ProfileRecord:
        """Return the profile for ``login``."""
        if force_refresh:
            logger.info(f"Forced refresh for {login}")
            return await self._fetch_shared(login)

        cached = await self._read_cache(login)
        if cached is None:
            logger.info(f"Cache miss for {login}")
            return await self._fetch_shared(login)

        if cached.is_partial:
            logger.info(f"Cache hit for {login} (basic info only), fetching full profile")
            return await self._fetch_shared(login)

        if self._is_stale(cached):
            logger.info(f"Cache hit for {login} (stale), refreshing")
            try:
                return await self._fetch_shared(login)
            except UserNotFoundError:
                raise
            except DirectoryError as e:
                logger.warning(f"Refresh failed for {login}, serving stale record: {e}")
                return cached

        logger.debug(f"Cache hit for {login}")
        return cached

    async def _read_cache(self, login: str) -> Optional[ProfileRecord]:
        try:
            return await self._store.get(login)
        except CacheUnavailableError as e:
            logger.warning(f"Treating cache read failure for {login} as a miss: {e}")
            return None

    def _is_stale(self, record: ProfileRecord) -> bool:
        if not self._max_age:
            return False
        return self._clock() - record.last_refreshed_at > self._max_age

    async def _fetch_shared(self, login: str) -> ProfileRecord:
        task = self._in_flight.get(login)
        if task is None:
            task = asyncio.create_task(self._fetch_and_store(login))
            self._in_flight[login] = task
            task.add_done_callback(lambda t, key=login: self._forget(key, t))
        else:
            logger.debug(f"Joining in-flight fetch for {login}")
        # shield: one waiter's cancellation must not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, login: str, task: asyncio.Task) -> None:
        if self._in_flight.get(login) is task:
            del self._in_flight[login]
        if not task.cancelled():
            # Mark the exception retrieved when every waiter went away.
            task.exception()

    async def _fetch_and_store(self, login: str) -> ProfileRecord:
        user = await self._directory.get_user(login)
        record = profile_from_directory_user(user, refreshed_at=self._clock())
        self._writer.spawn(
            lambda: self._store.upsert(record),
            description=f"upsert profile {record.login}",
        )
        return record
