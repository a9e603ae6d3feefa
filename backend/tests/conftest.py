"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Any, Optional

from api.dependencies import reset_container
from modules.directory.exceptions import UserNotFoundError
from modules.directory.models import DirectoryUser, DirectoryUserSummary


FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for services that take a ``clock`` callable."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def user_payload(
    login: str = "jdoe",
    displayname: Optional[str] = "John Doe",
    active: bool = True,
    with_details: bool = True,
    **overrides: Any,
) -> dict[str, Any]:
    """
    Build a directory user payload shaped like the intra API response.

    Args:
        login: Login of the user
        displayname: Display name (None to omit)
        active: Value of the ``active?`` flag
        with_details: Include wallet, cursus and project entries

    Returns:
        Dict payload
    """
    payload: dict[str, Any] = {
        "id": sum(map(ord, login)),
        "login": login,
        "displayname": displayname,
        "email": f"{login}@student.42.fr",
        "image": {
            "link": f"https://cdn.intra.42.fr/users/{login}.jpg",
            "versions": {
                "large": f"https://cdn.intra.42.fr/users/large_{login}.jpg",
                "medium": f"https://cdn.intra.42.fr/users/medium_{login}.jpg",
                "small": f"https://cdn.intra.42.fr/users/small_{login}.jpg",
                "micro": f"https://cdn.intra.42.fr/users/micro_{login}.jpg",
            },
        },
        "active?": active,
    }
    if with_details:
        payload.update({
            "wallet": 120,
            "correction_point": 4,
            "cursus_users": [{"level": 7.42, "cursus": {"slug": "42cursus"}}],
            "projects_users": [{"final_mark": 100, "project": {"slug": "libft"}}],
        })
    payload.update(overrides)
    return payload


class FakeDirectory:
    """
    In-memory directory client.

    ``users`` maps login to payload; ``pages`` is the list returned page by page.
    Set ``error`` to make every get_user call raise it.
    """

    def __init__(
        self,
        users: Optional[dict[str, dict[str, Any]]] = None,
        pages: Optional[list[list[dict[str, Any]]]] = None,
    ) -> None:
        self.users = users or {}
        self.pages = pages or []
        self.error: Optional[Exception] = None
        self.get_calls: list[str] = []
        self.list_calls: list[tuple[int, int, Optional[int]]] = []

    async def get_user(self, login: str) -> DirectoryUser:
        self.get_calls.append(login)
        if self.error is not None:
            raise self.error
        if login not in self.users:
            raise UserNotFoundError(login)
        return DirectoryUser.model_validate(self.users[login])

    async def list_users(
        self, page: int, page_size: int, campus_id: Optional[int] = None
    ) -> list[DirectoryUserSummary]:
        self.list_calls.append((page, page_size, campus_id))
        if page > len(self.pages):
            return []
        return [DirectoryUserSummary.model_validate(p) for p in self.pages[page - 1]]


@pytest.fixture(autouse=True)
def reset_container_singleton():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def clock() -> FakeClock:
    """Clock pinned to FIXED_NOW."""
    return FakeClock()


@pytest.fixture
def fake_directory() -> FakeDirectory:
    """Directory with a single known user, jdoe."""
    return FakeDirectory(users={"jdoe": user_payload()})
