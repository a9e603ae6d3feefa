"""
HTTP client for the directory authority.

Combines the credential cache and the rate-limited transport, and turns
raw JSON into the typed payload models.
"""

import logging
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from .exceptions import ExternalApiError, UserNotFoundError
from .interfaces import ICredentialProvider
from .models import DirectoryUser, DirectoryUserSummary
from .transport import RateLimitedTransport

logger = logging.getLogger(__name__)

_summary_list = TypeAdapter(list[DirectoryUserSummary])


class DirectoryClient:
    """
    Reads users from the 42 intra API.

    Every call asks the credential provider for a valid token, so an expired
    credential is rotated transparently between calls.
    """

    def __init__(
        self,
        credentials: ICredentialProvider,
        transport: RateLimitedTransport,
        base_url: str,
    ):
        self._credentials = credentials
        self._transport = transport
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        token = await self._credentials.get_valid_credential()
        response = await self._transport.request(
            "GET",
            f"{self._base_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        try:
            return response.json()
        except ValueError as e:
            raise ExternalApiError(
                response.status_code, f"Non-JSON body from {path}"
            ) from e

    async def get_user(self, login: str) -> DirectoryUser:
        """Fetch the full profile for ``login``."""
        logger.info(f"Fetching profile for {login} from directory")
        try:
            payload = await self._get(f"/users/{login}")
        except ExternalApiError as e:
            if e.status_code == 404:
                raise UserNotFoundError(login) from e
            raise

        try:
            return DirectoryUser.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Rejected malformed profile payload for {login}: {e}")
            raise ExternalApiError(
                None, f"Unexpected profile payload for {login}"
            ) from e

    async def list_users(
        self,
        page: int,
        page_size: int,
        campus_id: Optional[int] = None,
    ) -> list[DirectoryUserSummary]:
        """Fetch one page of the user list."""
        params: dict[str, Any] = {
            "page[number]": page,
            "page[size]": page_size,
        }
        if campus_id is not None:
            params["filter[primary_campus_id]"] = campus_id

        payload = await self._get("/users", params=params)
        if not payload:
            return []

        try:
            return _summary_list.validate_python(payload)
        except ValidationError as e:
            logger.error(f"Rejected malformed user list page {page}: {e}")
            raise ExternalApiError(
                None, f"Unexpected user list payload on page {page}"
            ) from e

