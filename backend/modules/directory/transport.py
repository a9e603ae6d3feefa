"""
Rate-limit aware transport for directory authority calls.

The intra API answers 429 when a client exceeds its per-second budget.
Each logical call is retried with exponential backoff up to a fixed
number of retries, then surfaced as RateLimitExceededError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .exceptions import ExternalApiError, RateLimitExceededError

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 429

Sleep = Callable[[float], Awaitable[Any]]


class RateLimitedTransport:
    """
    Wraps outbound requests with retry-on-429 backoff.

    Any other non-2xx response is raised immediately as ExternalApiError.
    Transport failures and timeouts are raised as ExternalApiError with
    no status code.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        max_retries: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the transport.

        Args:
            http: Shared client; its timeout applies to every attempt.
            max_retries: Retries allowed after the first attempt.
            base_delay: Delay before the first retry, doubled each time.
            max_delay: Upper bound for any single delay.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._http = http
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleep = sleep

    def backoff_delay(self, retry: int, retry_after: Optional[str] = None) -> float:
        """
        Delay before retry number ``retry`` (0-indexed).

        A numeric Retry-After header takes precedence over the exponential
        schedule. Both are capped at max_delay.
        """
        delay = self._base_delay * (2**retry)
        if retry_after:
            try:
                delay = float(retry_after)
            except ValueError:
                pass
        return max(0.0, min(delay, self._max_delay))

    async def request(
        self,
        method: str,
        url: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send one logical request, retrying while rate limited.

        Returns:
            The first successful response

        Raises:
            RateLimitExceededError: If still rate limited after max_retries
            ExternalApiError: For any other non-success outcome
        """
        if timeout is not None:
            kwargs["timeout"] = timeout

        retry = 0
        while True:
            try:
                response = await self._http.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                raise ExternalApiError(None, f"Request to {url} timed out") from e
            except httpx.HTTPError as e:
                raise ExternalApiError(None, f"Request to {url} failed: {e}") from e

            if response.status_code != RATE_LIMITED_STATUS:
                break

            if retry >= self._max_retries:
                logger.warning(
                    f"Rate limit budget exhausted for {method} {url} after {retry + 1} attempts"
                )
                raise RateLimitExceededError(attempts=retry + 1)

            delay = self.backoff_delay(retry, response.headers.get("Retry-After"))
            retry += 1
            logger.warning(
                f"Rate limited on {method} {url}, retrying in {delay:.2f}s "
                f"(attempt {retry}/{self._max_retries})"
            )
            await self._sleep(delay)

        if not response.is_success:
            raise ExternalApiError(response.status_code, _error_message(response))

        return response


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from an authority error body."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    return response.reason_phrase or f"HTTP {response.status_code}"
