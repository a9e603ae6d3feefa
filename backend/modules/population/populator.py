"""
Bulk population of the profile cache.

Walks the authority's paginated user list and upserts every active user as
a partial profile. Full details are filled in later by the resolver, on
the first individual request for each login.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from modules.directory.interfaces import IDirectoryClient
from modules.profiles.exceptions import CacheUnavailableError
from modules.profiles.interfaces import IProfileStore
from modules.profiles.models import ProfileRecord, partial_profile_from_summary
from shared.clock import Clock, utc_now

from .models import PopulationReport

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_BATCH_SIZE = 100


class BulkPopulator:
    """
    Offline job that fills the profile cache from the user list.

    The run is not transactional: a failed batch is logged and skipped, and
    a failed page fetch ends the run once the buffered records are written.
    """

    def __init__(
        self,
        directory: IDirectoryClient,
        store: IProfileStore,
        page_size: int = DEFAULT_PAGE_SIZE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        page_delay: float = 0.0,
        batch_delay: float = 0.0,
        campus_id: Optional[int] = None,
        clock: Clock = utc_now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if page_size < 1 or batch_size < 1:
            raise ValueError("page_size and batch_size must be positive")
        self._directory = directory
        self._store = store
        self._page_size = page_size
        self._batch_size = batch_size
        self._page_delay = page_delay
        self._batch_delay = batch_delay
        self._campus_id = campus_id
        self._clock = clock
        self._sleep = sleep

    async def run(self, max_pages: Optional[int] = None) -> PopulationReport:
        """
        Populate the cache.

        Args:
            max_pages: Stop after this many pages (None walks the whole list).

        Returns:
            Counters for the run

        Raises:
            DirectoryError: If a page fetch fails
        """
        report = PopulationReport(started_at=self._clock())
        pending: list[ProfileRecord] = []
        page = 1

        logger.info(
            f"Starting cache population (page size {self._page_size}, "
            f"batch size {self._batch_size}, campus {self._campus_id or 'all'})"
        )

        try:
            while max_pages is None or page <= max_pages:
                if page > 1 and self._page_delay:
                    await self._sleep(self._page_delay)

                entries = await self._directory.list_users(
                    page, self._page_size, campus_id=self._campus_id
                )
                report.pages_fetched += 1
                if not entries:
                    logger.info(f"Page {page} is empty, stopping")
                    break

                active = [entry for entry in entries if entry.active]
                report.users_seen += len(entries)
                report.active_users += len(active)
                logger.info(
                    f"Page {page}: {len(entries)} users, {len(active)} active "
                    f"(total active {report.active_users})"
                )

                fetched_at = self._clock()
                pending.extend(partial_profile_from_summary(e, fetched_at) for e in active)
                while len(pending) >= self._batch_size:
                    batch = pending[: self._batch_size]
                    pending = pending[self._batch_size :]
                    await self._write_batch(batch, report)

                if len(entries) < self._page_size:
                    logger.info(f"Page {page} is the last page")
                    break
                page += 1
        except Exception as e:
            logger.error(
                f"Cache population stopped at page {page}: {e} "
                f"({report.records_written} written, {len(pending)} buffered records "
                f"still to write)"
            )
            raise
        finally:
            # Records already fetched are written even when a later page fails.
            if pending:
                await self._write_batch(pending, report)

        report.finished_at = self._clock()
        logger.info(
            f"Cache population finished: {report.records_written} written, "
            f"{report.records_failed} failed across {report.pages_fetched} pages"
        )
        return report

    async def _write_batch(self, batch: list[ProfileRecord], report: PopulationReport) -> None:
        if (report.batches_written or report.batches_failed) and self._batch_delay:
            await self._sleep(self._batch_delay)

        try:
            await self._store.upsert_many(batch)
        except CacheUnavailableError as e:
            report.batches_failed += 1
            report.records_failed += len(batch)
            logger.warning(f"Skipping batch of {len(batch)} records: {e}")
            return

        report.batches_written += 1
        report.records_written += len(batch)
