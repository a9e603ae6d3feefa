"""
Tiered search suggestions over the profile cache.

A query is matched in four tiers, evaluated strictly in order:

1. login starts with the query
2. display name starts with the query (login prefix matches excluded)
3. login contains the query (login prefix matches excluded)
4. display name contains the query (login and display-name prefix matches excluded)

Each tier is one store query ordered by the matched field, capped at
``per_tier_cap`` rows. Earlier tiers' prefix matches are excluded in the
query, so the cap is not spent on rows already emitted. Rows are merged in
tier order, skipping logins an earlier tier already produced, until
``limit`` suggestions are collected.
Tiers after that point are never queried.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .exceptions import CacheUnavailableError
from .interfaces import IProfileStore
from .models import ProfileField, ProfileRecord, SuggestionRecord

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_PER_TIER_CAP = 5


class MatchMode(str, Enum):
    PREFIX = "prefix"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class MatchTier:
    """One ranking tier: which field to match and how."""

    name: str
    field: ProfileField
    mode: MatchMode
    exclude_prefix_fields: tuple[ProfileField, ...] = ()


TIERS: tuple[MatchTier, ...] = (
    MatchTier("login_prefix", ProfileField.LOGIN, MatchMode.PREFIX),
    MatchTier(
        "display_name_prefix",
        ProfileField.DISPLAY_NAME,
        MatchMode.PREFIX,
        (ProfileField.LOGIN,),
    ),
    MatchTier(
        "login_contains",
        ProfileField.LOGIN,
        MatchMode.SUBSTRING,
        (ProfileField.LOGIN,),
    ),
    MatchTier(
        "display_name_contains",
        ProfileField.DISPLAY_NAME,
        MatchMode.SUBSTRING,
        (ProfileField.LOGIN, ProfileField.DISPLAY_NAME),
    ),
)


class SearchRanker:
    """Builds ranked suggestion lists from the profile store."""

    def __init__(
        self,
        store: IProfileStore,
        per_tier_cap: int = DEFAULT_PER_TIER_CAP,
        tiers: tuple[MatchTier, ...] = TIERS,
    ):
        self._store = store
        self._per_tier_cap = per_tier_cap
        self._tiers = tiers

    async def suggest(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SuggestionRecord]:
        # PostgREST reads "*" as a wildcard; drop it so every store matches alike
        term = query.replace("*", "").strip()
        if not term or limit <= 0:
            return []

        suggestions: list[SuggestionRecord] = []
        seen: set[str] = set()

        for tier in self._tiers:
            if len(suggestions) >= limit:
                break

            for record in await self._run_tier(tier, term):
                if record.login in seen:
                    continue
                seen.add(record.login)
                suggestions.append(SuggestionRecord.from_profile(record))
                if len(suggestions) >= limit:
                    break

        logger.debug(f"Found {len(suggestions)} suggestions for '{term}'")
        return suggestions

    async def _run_tier(self, tier: MatchTier, term: str) -> list[ProfileRecord]:
        """Run one tier's query; a store failure yields no candidates."""
        try:
            if tier.mode is MatchMode.PREFIX:
                return await self._store.find_by_prefix(
                    tier.field,
                    term,
                    self._per_tier_cap,
                    exclude_prefix_fields=tier.exclude_prefix_fields,
                )
            return await self._store.find_by_substring(
                tier.field,
                term,
                self._per_tier_cap,
                exclude_prefix_fields=tier.exclude_prefix_fields,
            )
        except CacheUnavailableError as e:
            logger.warning(f"Search tier {tier.name} failed for '{term}': {e}")
            return []
