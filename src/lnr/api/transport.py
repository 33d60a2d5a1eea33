"""HTTP transport pipeline for the Linear API.

Requests flow through composable httpx transports:

    RetryTransport -> AuthTransport -> base transport

Each stage owns one concern. Retrying is transparent to callers: only HTTP
429 is retried, and when retries run out the last 429 response is returned
as-is for the caller to inspect.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0


class AuthTransport(httpx.AsyncBaseTransport):
    """Attach the API key and JSON content type to every request."""

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport):
        self.api_key = api_key
        self.transport = transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # Linear personal API keys are sent raw, without a "Bearer" scheme.
        request.headers["Authorization"] = self.api_key
        request.headers["Content-Type"] = "application/json"
        return await self.transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self.transport.aclose()


class RetryTransport(httpx.AsyncBaseTransport):
    """Retry rate-limited (429) requests with exponential backoff.

    Waits ``base_delay * 2**attempt`` seconds between attempts (1, 2, 4 with
    the defaults) unless the response carries a numeric Retry-After header,
    which takes precedence. The wait is a plain ``asyncio.sleep``, so
    cancelling the task aborts the operation without another attempt.

    Transport errors (connection refused, DNS, ...) propagate immediately.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
    ):
        self.transport = transport
        self.max_retries = max_retries
        self.base_delay = base_delay

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # Buffer the body once so every attempt resends the same bytes.
        await request.aread()

        attempt = 0
        while True:
            response = await self.transport.handle_async_request(request)

            if response.status_code != 429 or attempt >= self.max_retries:
                return response

            delay = compute_delay(attempt, self.base_delay, response)
            logger.warning(
                "Rate limited by Linear (attempt %d/%d), waiting %.1fs",
                attempt + 1,
                self.max_retries,
                delay,
            )
            await response.aclose()
            await asyncio.sleep(delay)
            attempt += 1

    async def aclose(self) -> None:
        await self.transport.aclose()


def compute_delay(
    attempt: int,
    base_delay: float,
    response: Optional[httpx.Response] = None,
) -> float:
    """Delay before retry number ``attempt + 1``.

    Retry-After (seconds) wins over the exponential schedule.
    """
    if response is not None:
        retry_after = parse_retry_after(response)
        if retry_after is not None:
            return retry_after
    return base_delay * (2**attempt)


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse the Retry-After header (seconds only, not HTTP-date)."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value)
    except (ValueError, TypeError):
        return None
    if seconds < 0:
        return None
    return seconds


def build_transport(
    api_key: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RetryTransport:
    """Compose the pipeline around ``transport`` (a real HTTP transport by default)."""
    base = transport if transport is not None else httpx.AsyncHTTPTransport()
    return RetryTransport(
        AuthTransport(api_key, base),
        max_retries=max_retries,
        base_delay=base_delay,
    )
