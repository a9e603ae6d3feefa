"""
Shared infrastructure for Peerdex backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- repository: Base class for Supabase-backed repositories
- clock: Injectable time source

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    PeerdexError,
    ConfigError,
    NotFoundError,
    ExternalServiceError,
)
from .clock import Clock, utc_now

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "PeerdexError",
    "ConfigError",
    "NotFoundError",
    "ExternalServiceError",
    "Clock",
    "utc_now",
]
