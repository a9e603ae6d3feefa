"""
Centralized configuration for the Peerdex backend.

All settings are loaded from environment variables with sensible defaults.
Integration-specific settings are namespaced (INTRA_*, SUPABASE_*, POPULATE_*).
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Peerdex API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type"]

    # Directory authority (42 intra API)
    intra_client_id: str = ""
    intra_client_secret: str = ""
    intra_api_base_url: str = "https://api.intra.42.fr/v2"
    intra_token_url: str = "https://api.intra.42.fr/oauth/token"
    intra_campus_id: Optional[int] = None

    # Outbound HTTP
    http_timeout_seconds: float = 10.0
    rate_limit_max_retries: int = 5
    rate_limit_base_delay_seconds: float = 1.0
    rate_limit_max_delay_seconds: float = 30.0
    credential_safety_margin_seconds: int = 60

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # Direct Postgres URI, used by run_migrations.py

    # Profile cache
    profile_store: Literal["supabase", "memory"] = "supabase"
    profile_max_age_seconds: int = 0  # 0 disables stale refresh
    max_background_writes: int = 8

    # Search suggestions
    search_default_limit: int = 10
    search_per_tier_cap: int = 5

    # Bulk population job
    populate_page_size: int = 100
    populate_batch_size: int = 100
    populate_page_delay_seconds: float = 0.5
    populate_batch_delay_seconds: float = 0.2


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
