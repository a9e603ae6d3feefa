"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access.
"""

import asyncio
from typing import Any, Callable, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - _run() to execute the synchronous client off the event loop

    Subclasses implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[ProfileRecord]):
            async def get(self, login: str) -> Optional[ProfileRecord]:
                result = await self._run(
                    lambda: self._db.table("users_cache").select("*").eq("login", login).execute()
                )
                ...
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    async def _run(self, operation: Callable[[], Any]) -> Any:
        """Run a blocking Supabase call in a worker thread."""
        return await asyncio.to_thread(operation)
