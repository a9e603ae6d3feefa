"""
Directory authority data models.

Typed shapes of the 42 intra API payloads this backend consumes. Only the
fields we read are declared; everything else in the payload is ignored.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """A bearer token for the authority and the instant it stops being usable."""

    token: str = Field(..., description="Bearer access token")
    expires_at: datetime = Field(
        ...,
        description="Issue time + ttl - safety margin",
    )

    model_config = {"frozen": True}

    def is_valid(self, now: datetime) -> bool:
        """Check whether the credential can still be used at ``now``."""
        return now < self.expires_at

    @classmethod
    def from_grant(
        cls,
        grant: "TokenGrant",
        issued_at: datetime,
        safety_margin: timedelta,
    ) -> "Credential":
        """Build a credential from a token grant issued at ``issued_at``."""
        return cls(
            token=grant.access_token,
            expires_at=issued_at + timedelta(seconds=grant.expires_in) - safety_margin,
        )


class TokenGrant(BaseModel):
    """Response body of the client-credentials exchange."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
    expires_in: int = Field(..., ge=0, description="Lifetime in seconds")
    scope: Optional[str] = None


class ImageVersions(BaseModel):
    """Resized variants of a profile picture."""

    model_config = ConfigDict(extra="ignore")

    large: Optional[str] = None
    medium: Optional[str] = None
    small: Optional[str] = None
    micro: Optional[str] = None


class DirectoryImage(BaseModel):
    """Profile picture links."""

    model_config = ConfigDict(extra="ignore")

    link: Optional[str] = None
    versions: ImageVersions = Field(default_factory=ImageVersions)


class DirectoryUserSummary(BaseModel):
    """
    One entry of the paginated ``/users`` list.

    The list endpoint omits wallet, cursus and project data; those are only
    available from the per-login endpoint.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    login: str = Field(..., min_length=1)
    displayname: Optional[str] = None
    email: Optional[str] = None
    image: Optional[DirectoryImage] = None
    active: bool = Field(default=False, alias="active?")


class DirectoryUser(DirectoryUserSummary):
    """Full profile payload returned by ``/users/{login}``."""

    wallet: Optional[int] = None
    correction_point: Optional[int] = None
    cursus_users: list[dict[str, Any]] = Field(default_factory=list)
    projects_users: list[dict[str, Any]] = Field(default_factory=list)
