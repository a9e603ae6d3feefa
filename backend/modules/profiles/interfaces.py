"""
Profile module interfaces.

Route handlers and the population job depend on these protocols, not the
concrete Supabase or in-memory implementations.
"""

from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from .models import ProfileField, ProfileRecord, SuggestionRecord


@runtime_checkable
class IProfileStore(Protocol):
    """
    Keyed store of cached profiles.

    Every method raises CacheUnavailableError when the backing store cannot
    be reached. Matching is case-insensitive; results are ordered ascending
    by the matched field, then by login.
    """

    async def get(self, login: str) -> Optional[ProfileRecord]:
        """Exact lookup by login. Returns None on a miss."""
        ...

    async def find_by_prefix(
        self,
        field: ProfileField,
        prefix: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        """
        Records whose ``field`` starts with ``prefix``.

        Records where any of ``exclude_prefix_fields`` also starts with
        ``prefix`` are left out before the limit is applied.
        """
        ...

    async def find_by_substring(
        self,
        field: ProfileField,
        term: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        """
        Records whose ``field`` contains ``term``.

        Records where any of ``exclude_prefix_fields`` starts with ``term``
        are left out before the limit is applied.
        """
        ...

    async def upsert(self, record: ProfileRecord) -> None:
        """Insert or update one record by login."""
        ...

    async def upsert_many(self, records: Iterable[ProfileRecord]) -> None:
        """Insert or update a batch of records in one write."""
        ...


@runtime_checkable
class IProfileResolver(Protocol):
    """Cache-aside profile resolution."""

    async def resolve(self, login: str, force_refresh: bool = False) -> ProfileRecord:
        """
        Return the profile for ``login``.

        Raises:
            UserNotFoundError: If the authority has no such login
            RateLimitExceededError: If the retry budget is exhausted
            ExternalApiError: For any other authority failure
        """
        ...


@runtime_checkable
class ISearchRanker(Protocol):
    """Partial-name search suggestions."""

    async def suggest(self, query: str, limit: int = 10) -> list[SuggestionRecord]:
        """Ranked, deduplicated suggestions, at most ``limit`` long."""
        ...
