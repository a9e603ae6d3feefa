"""
Profile module.

Cache-aside profile resolution and tiered search suggestions over the
profile cache.

Public API:
- IProfileStore / IProfileResolver / ISearchRanker: Interfaces
- ProfileRecord / SuggestionRecord: Data models
- InMemoryProfileStore / SupabaseProfileStore: Cache stores
- ProfileResolver: Cache-aside resolution with single-flight fetches
- SearchRanker: Four-tier suggestion ranking
- BackgroundWriter: Bounded fire-and-forget cache writes
"""

from .interfaces import IProfileStore, IProfileResolver, ISearchRanker
from .models import (
    ProfileField,
    ProfileRecord,
    SuggestionRecord,
    profile_from_directory_user,
    partial_profile_from_summary,
)
from .exceptions import ProfileError, CacheUnavailableError
from .repository import InMemoryProfileStore, SupabaseProfileStore
from .writer import BackgroundWriter
from .resolver import ProfileResolver
from .search import SearchRanker, MatchTier, TIERS

__all__ = [
    # Interfaces
    "IProfileStore",
    "IProfileResolver",
    "ISearchRanker",
    # Models
    "ProfileField",
    "ProfileRecord",
    "SuggestionRecord",
    "profile_from_directory_user",
    "partial_profile_from_summary",
    # Exceptions
    "ProfileError",
    "CacheUnavailableError",
    # Implementations
    "InMemoryProfileStore",
    "SupabaseProfileStore",
    "BackgroundWriter",
    "ProfileResolver",
    "SearchRanker",
    "MatchTier",
    "TIERS",
]
