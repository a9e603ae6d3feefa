"""
Profile module data models.

ProfileRecord is what the cache stores and the API returns; the mapping
functions at the bottom are the only place authority payloads become
records.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from modules.directory.models import DirectoryUser, DirectoryUserSummary


class ProfileField(str, Enum):
    """Record fields the store can match on."""

    LOGIN = "login"
    DISPLAY_NAME = "display_name"


class ProfileRecord(BaseModel):
    """
    A cached profile, keyed by login.

    project_records is None for partial records written by the bulk
    population job; the resolver enriches those on first request.
    """

    login: str = Field(..., description="Unique, stable natural key")
    display_name: Optional[str] = Field(None, description="Full display name")
    email: Optional[str] = None
    image_url: Optional[str] = Field(None, description="Full-size picture link")
    image_small_url: Optional[str] = Field(None, description="Small picture link")
    wallet: Optional[int] = None
    correction_points: Optional[int] = None
    cursus_records: Optional[list[dict[str, Any]]] = None
    project_records: Optional[list[dict[str, Any]]] = None
    last_refreshed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_partial(self) -> bool:
        """True when only list-endpoint fields are present."""
        return self.project_records is None


class SuggestionRecord(BaseModel):
    """A single search suggestion. Built per query, never stored."""

    login: str
    display_name: Optional[str] = None
    image_url: Optional[str] = Field(None, description="Small picture link")

    model_config = {"frozen": True}

    @classmethod
    def from_profile(cls, record: ProfileRecord) -> "SuggestionRecord":
        return cls(
            login=record.login,
            display_name=record.display_name,
            image_url=record.image_small_url or record.image_url,
        )


def profile_from_directory_user(
    user: DirectoryUser,
    refreshed_at: datetime,
) -> ProfileRecord:
    """Map a full authority profile into a cache record."""
    image = user.image
    return ProfileRecord(
        login=user.login,
        display_name=user.displayname,
        email=user.email,
        image_url=image.link if image else None,
        image_small_url=image.versions.small if image else None,
        wallet=user.wallet,
        correction_points=user.correction_point,
        cursus_records=user.cursus_users,
        project_records=user.projects_users,
        last_refreshed_at=refreshed_at,
    )


def partial_profile_from_summary(
    summary: DirectoryUserSummary,
    refreshed_at: datetime,
) -> ProfileRecord:
    """Map a user-list entry into a partial cache record."""
    image = summary.image
    return ProfileRecord(
        login=summary.login,
        display_name=summary.displayname,
        email=summary.email,
        image_url=image.link if image else None,
        image_small_url=image.versions.small if image else None,
        last_refreshed_at=refreshed_at,
    )
