"""
Machine credential cache for the directory authority.

Holds one client-credentials bearer token and rotates it lazily once it
reaches its expiry (issue time + ttl - safety margin).
"""

import logging
from datetime import timedelta
from typing import Optional

import httpx
from pydantic import ValidationError

from shared.clock import Clock, utc_now
from shared.exceptions import ConfigError

from .exceptions import AuthExchangeError
from .models import Credential, TokenGrant

logger = logging.getLogger(__name__)

DEFAULT_SAFETY_MARGIN = timedelta(seconds=60)


class CredentialCache:
    """
    Caches the bearer credential used to call the authority.

    One instance is owned by the service container and injected into the
    directory client. Two coroutines that both find the credential expired
    will both exchange; the later write wins and both tokens are valid.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token_url: str,
        client_id: str,
        client_secret: str,
        safety_margin: timedelta = DEFAULT_SAFETY_MARGIN,
        clock: Clock = utc_now,
    ):
        self._http = http
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._safety_margin = safety_margin
        self._clock = clock
        self._credential: Optional[Credential] = None

    @property
    def current(self) -> Optional[Credential]:
        """The cached credential, valid or not."""
        return self._credential

    async def get_valid_credential(self) -> str:
        """Return a valid token, exchanging for a new one when needed."""
        credential = self._credential
        if credential is not None and credential.is_valid(self._clock()):
            return credential.token

        credential = await self._exchange()
        self._credential = credential
        return credential.token

    async def _exchange(self) -> Credential:
        """Perform the client-credentials grant."""
        if not self._client_id or not self._client_secret:
            raise ConfigError(
                "INTRA_CLIENT_ID or INTRA_CLIENT_SECRET is not set",
                code="MISSING_CLIENT_CREDENTIALS",
            )

        issued_at = self._clock()
        try:
            response = await self._http.post(
                self._token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
            )
        except httpx.HTTPError as e:
            raise AuthExchangeError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise AuthExchangeError(
                f"token endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            grant = TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AuthExchangeError(
                f"unexpected token response: {e}",
                status_code=response.status_code,
            ) from e

        credential = Credential.from_grant(grant, issued_at, self._safety_margin)
        logger.info(
            f"Obtained new directory credential (expires at {credential.expires_at.isoformat()})"
        )
        return credential
