"""
Profile cache stores.

Two implementations of IProfileStore:
- InMemoryProfileStore: dict-backed, for development and tests
- SupabaseProfileStore: the ``users_cache`` table in Supabase

Both stamp ``last_refreshed_at`` at write time and never move it backwards.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from supabase import Client

from shared.clock import Clock, utc_now
from shared.repository import BaseRepository

from .exceptions import CacheUnavailableError
from .models import ProfileField, ProfileRecord

logger = logging.getLogger(__name__)


def _sort_key(record: ProfileRecord, field: ProfileField) -> tuple[str, str]:
    value = getattr(record, field.value) or ""
    return (value.casefold(), record.login)


def _merge(existing: Optional[ProfileRecord], incoming: ProfileRecord, stamp: datetime) -> ProfileRecord:
    """Overlay the non-None fields of ``incoming`` on ``existing``."""
    if existing is None:
        return incoming.model_copy(update={"last_refreshed_at": stamp})

    updates = incoming.model_dump(exclude_none=True, exclude={"login", "last_refreshed_at"})
    updates["last_refreshed_at"] = max(existing.last_refreshed_at, stamp)
    return existing.model_copy(update=updates)


class InMemoryProfileStore:
    """
    Profile store kept in a process-local dict.

    For testing and development. Use SupabaseProfileStore for production.
    """

    def __init__(self, clock: Clock = utc_now):
        self._records: dict[str, ProfileRecord] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, login: object) -> bool:
        return login in self._records

    async def get(self, login: str) -> Optional[ProfileRecord]:
        return self._records.get(login)

    async def find_by_prefix(
        self,
        field: ProfileField,
        prefix: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        needle = prefix.casefold()
        return self._select(
            field,
            lambda value: value.startswith(needle),
            needle,
            limit,
            exclude_prefix_fields,
        )

    async def find_by_substring(
        self,
        field: ProfileField,
        term: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        needle = term.casefold()
        return self._select(
            field,
            lambda value: needle in value,
            needle,
            limit,
            exclude_prefix_fields,
        )

    def _select(
        self,
        field: ProfileField,
        matches_field: Callable[[str], bool],
        needle: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField],
    ) -> list[ProfileRecord]:
        matches = []
        for record in self._records.values():
            if not matches_field((getattr(record, field.value) or "").casefold()):
                continue
            if any(
                (getattr(record, excluded.value) or "").casefold().startswith(needle)
                for excluded in exclude_prefix_fields
            ):
                continue
            matches.append(record)
        matches.sort(key=lambda r: _sort_key(r, field))
        return matches[:limit]

    async def upsert(self, record: ProfileRecord) -> None:
        self._records[record.login] = _merge(
            self._records.get(record.login), record, self._clock()
        )

    async def upsert_many(self, records: Iterable[ProfileRecord]) -> None:
        for record in records:
            await self.upsert(record)


# users_cache uses the directory payload column names;
# *_sort columns are generated lower() copies used for ordering.
TABLE = "users_cache"

_FIELD_COLUMNS: dict[ProfileField, str] = {
    ProfileField.LOGIN: "login",
    ProfileField.DISPLAY_NAME: "displayname",
}

_SORT_COLUMNS: dict[ProfileField, str] = {
    ProfileField.LOGIN: "login_sort",
    ProfileField.DISPLAY_NAME: "displayname_sort",
}

SEARCH_COLUMNS = "login,displayname,image_url,image_small_url,last_refreshed_at"


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally.

    PostgREST rewrites ``*`` to ``%`` before the pattern reaches Postgres and
    offers no escape for it, so ``*`` is dropped.
    """
    return (
        value.replace("*", "")
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


class SupabaseProfileStore(BaseRepository[ProfileRecord]):
    """
    Profile store backed by the Supabase ``users_cache`` table.

    Any client or PostgREST failure is re-raised as CacheUnavailableError.
    A database trigger keeps last_refreshed_at from moving backwards.
    """

    def __init__(self, db: Client, clock: Clock = utc_now) -> None:
        super().__init__(db)
        self._clock = clock

    async def _execute(self, operation: str, build_query: Any) -> Any:
        try:
            return await self._run(lambda: build_query().execute())
        except Exception as e:
            logger.warning(f"users_cache {operation} failed: {e}")
            raise CacheUnavailableError(operation, str(e)) from e

    async def _fetch_records(self, operation: str, build_query: Any) -> list[ProfileRecord]:
        """Run a read and map its rows; an unreadable row fails the whole read."""
        result = await self._execute(operation, build_query)
        try:
            return [self._map_to_record(row) for row in result.data or []]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"users_cache {operation} returned an unreadable row: {e}")
            raise CacheUnavailableError(operation, f"unreadable row: {e}") from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, login: str) -> Optional[ProfileRecord]:
        records = await self._fetch_records(
            "get",
            lambda: self._db.table(TABLE).select("*").eq("login", login).limit(1),
        )
        return records[0] if records else None

    async def find_by_prefix(
        self,
        field: ProfileField,
        prefix: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        return await self._search(
            "find_by_prefix", field, f"{escape_like(prefix)}%", prefix, limit,
            exclude_prefix_fields,
        )

    async def find_by_substring(
        self,
        field: ProfileField,
        term: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField] = (),
    ) -> list[ProfileRecord]:
        return await self._search(
            "find_by_substring", field, f"%{escape_like(term)}%", term, limit,
            exclude_prefix_fields,
        )

    async def _search(
        self,
        operation: str,
        field: ProfileField,
        pattern: str,
        term: str,
        limit: int,
        exclude_prefix_fields: Sequence[ProfileField],
    ) -> list[ProfileRecord]:
        excluded_pattern = f"{escape_like(term)}%"

        def build():
            query = (
                self._db.table(TABLE)
                .select(SEARCH_COLUMNS)
                .ilike(_FIELD_COLUMNS[field], pattern)
            )
            for excluded in exclude_prefix_fields:
                query = query.not_.ilike(_FIELD_COLUMNS[excluded], excluded_pattern)
            return query.order(_SORT_COLUMNS[field]).order("login").limit(limit)

        return await self._fetch_records(operation, build)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def upsert(self, record: ProfileRecord) -> None:
        await self.upsert_many([record])

    async def upsert_many(self, records: Iterable[ProfileRecord]) -> None:
        rows = self._to_rows(list(records), self._clock())
        if not rows:
            return
        await self._execute(
            "upsert",
            lambda: self._db.table(TABLE).upsert(rows, on_conflict="login"),
        )

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_row(record: ProfileRecord) -> dict[str, Any]:
        return {
            "login": record.login,
            "displayname": record.display_name,
            "email": record.email,
            "image_url": record.image_url,
            "image_small_url": record.image_small_url,
            "wallet": record.wallet,
            "correction_points": record.correction_points,
            "cursus_users": record.cursus_records,
            "projects_users": record.project_records,
        }

    def _to_rows(self, records: list[ProfileRecord], stamp: datetime) -> list[dict[str, Any]]:
        """
        Build upsert rows with one shared key set.

        PostgREST bulk upserts require every object to carry the same keys.
        Columns that are None in every row are dropped so a batch of partial
        records leaves existing profile details untouched.
        """
        raw = [self._to_row(r) for r in records]
        columns = [
            key for key in raw[0] if any(row[key] is not None for row in raw)
        ] if raw else []
        return [
            {**{key: row[key] for key in columns}, "last_refreshed_at": stamp.isoformat()}
            for row in raw
        ]

    @staticmethod
    def _map_to_record(row: dict[str, Any]) -> ProfileRecord:
        data: dict[str, Any] = {
            "login": row["login"],
            "display_name": row.get("displayname"),
            "email": row.get("email"),
            "image_url": row.get("image_url"),
            "image_small_url": row.get("image_small_url"),
            "wallet": row.get("wallet"),
            "correction_points": row.get("correction_points"),
            "cursus_records": row.get("cursus_users"),
            "project_records": row.get("projects_users"),
        }
        # pydantic parses any fractional-second precision PostgREST emits
        if row.get("last_refreshed_at"):
            data["last_refreshed_at"] = row["last_refreshed_at"]
        return ProfileRecord(**data)
