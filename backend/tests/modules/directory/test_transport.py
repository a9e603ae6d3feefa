"""Tests for modules/directory/transport.py."""

import pytest
import httpx

from modules.directory.exceptions import ExternalApiError, RateLimitExceededError
from modules.directory.transport import RateLimitedTransport

URL = "https://api.intra.42.fr/v2/users/jdoe"


class ScriptedServer:
    """Returns the scripted responses in order, repeating the last one."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_transport(handler, max_retries=5, base_delay=1.0, max_delay=30.0):
    sleep = RecordingSleep()
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = RateLimitedTransport(
        http,
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
        sleep=sleep,
    )
    return transport, sleep


class TestBackoffDelay:
    def test_doubles_each_retry(self):
        transport, _ = make_transport(ScriptedServer(httpx.Response(200)))
        assert [transport.backoff_delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_max_delay(self):
        transport, _ = make_transport(ScriptedServer(httpx.Response(200)), max_delay=5.0)
        assert transport.backoff_delay(10) == 5.0

    def test_retry_after_takes_precedence(self):
        transport, _ = make_transport(ScriptedServer(httpx.Response(200)))
        assert transport.backoff_delay(0, "3") == 3.0
        assert transport.backoff_delay(0, "120") == 30.0

    def test_ignores_non_numeric_retry_after(self):
        transport, _ = make_transport(ScriptedServer(httpx.Response(200)))
        assert transport.backoff_delay(1, "Wed, 21 Oct 2015 07:28:00 GMT") == 2.0


class TestRequest:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        server = ScriptedServer(httpx.Response(200, json={"login": "jdoe"}))
        transport, sleep = make_transport(server)

        response = await transport.request("GET", URL)

        assert response.json() == {"login": "jdoe"}
        assert server.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_rate_limiting(self):
        """Three 429s then a 200 should succeed after three waits."""
        server = ScriptedServer(
            httpx.Response(429),
            httpx.Response(429),
            httpx.Response(429),
            httpx.Response(200, json={"login": "jdoe"}),
        )
        transport, sleep = make_transport(server, max_retries=5)

        response = await transport.request("GET", URL)

        assert response.status_code == 200
        assert server.calls == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        """Persistent 429s should raise after max_retries + 1 attempts."""
        server = ScriptedServer(httpx.Response(429))
        transport, sleep = make_transport(server, max_retries=3)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await transport.request("GET", URL)

        assert exc_info.value.attempts == 4
        assert server.calls == 4
        assert len(sleep.delays) == 3

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        server = ScriptedServer(httpx.Response(429))
        transport, sleep = make_transport(server, max_retries=0)

        with pytest.raises(RateLimitExceededError):
            await transport.request("GET", URL)
        assert server.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_honours_retry_after(self):
        server = ScriptedServer(
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200),
        )
        transport, sleep = make_transport(server)

        await transport.request("GET", URL)
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        """A 500 should surface immediately as ExternalApiError."""
        server = ScriptedServer(httpx.Response(500, json={"error": "Internal failure"}))
        transport, sleep = make_transport(server)

        with pytest.raises(ExternalApiError) as exc_info:
            await transport.request("GET", URL)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal failure"
        assert server.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_not_found_carries_status(self):
        transport, _ = make_transport(ScriptedServer(httpx.Response(404)))

        with pytest.raises(ExternalApiError) as exc_info:
            await transport.request("GET", URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not Found"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        transport, _ = make_transport(handler)

        with pytest.raises(ExternalApiError, match="timed out") as exc_info:
            await transport.request("GET", URL)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        transport, _ = make_transport(handler)

        with pytest.raises(ExternalApiError, match="no route to host"):
            await transport.request("GET", URL)
