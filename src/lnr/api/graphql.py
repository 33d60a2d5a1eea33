"""Async GraphQL executor for the Linear API.

Posts documents through the transport pipeline and classifies the response
into data or a single ``LinearError`` tagged with the operation name.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import (
    LinearAPIError,
    LinearDecodeError,
    LinearGraphQLError,
    LinearRateLimitError,
    LinearTimeoutError,
    LinearTransportError,
)
from ..observability.logging import log_context
from .transport import parse_retry_after

logger = logging.getLogger(__name__)

LINEAR_API = "https://api.linear.app/graphql"
DEFAULT_TIMEOUT = 30.0


class GraphQLClient:
    """Execute GraphQL documents against a single endpoint."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        endpoint: str = LINEAR_API,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout),
        )

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation: str = "",
    ) -> Dict[str, Any]:
        """Execute a single GraphQL document.

        Args:
            query: GraphQL document.
            variables: Optional typed variables.
            operation: Human-readable operation name used in errors and logs.

        Returns:
            The "data" portion of the response.

        Raises:
            LinearTransportError: Connection-level failure.
            LinearTimeoutError: The overall deadline (retries included) expired.
            LinearRateLimitError: Still rate limited after retries.
            LinearGraphQLError: The response carries GraphQL errors.
            LinearAPIError: Any other non-success status.
            LinearDecodeError: The body is not a JSON object.
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        with log_context(operation):
            logger.debug("Executing %s", operation or "query")
            try:
                response = await asyncio.wait_for(
                    self._http.post(self.endpoint, json=payload),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as exc:
                raise LinearTimeoutError(
                    f"request timed out after {self.timeout:.0f}s", operation
                ) from exc
            except httpx.TimeoutException as exc:
                raise LinearTimeoutError(
                    f"request timed out: {type(exc).__name__}", operation
                ) from exc
            except httpx.TransportError as exc:
                raise LinearTransportError(
                    f"connection failed: {exc}", operation
                ) from exc

            return self._handle_response(response, operation)

    def _handle_response(
        self, response: httpx.Response, operation: str
    ) -> Dict[str, Any]:
        if response.status_code == 429:
            raise LinearRateLimitError(
                "rate limited by Linear (HTTP 429)",
                retry_after=parse_retry_after(response),
                operation=operation,
            )

        try:
            body = response.json()
        except ValueError as exc:
            if response.status_code >= 400:
                raise LinearAPIError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                    operation=operation,
                ) from exc
            raise LinearDecodeError("response is not valid JSON", operation) from exc

        if not isinstance(body, dict):
            raise LinearDecodeError("response is not a JSON object", operation)

        if body.get("errors"):
            messages = "; ".join(
                e.get("message", "Unknown error") if isinstance(e, dict) else str(e)
                for e in body["errors"]
            )
            raise LinearGraphQLError(
                messages,
                errors=body["errors"],
                status_code=response.status_code,
                operation=operation,
            )

        if response.status_code >= 400:
            raise LinearAPIError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
                operation=operation,
            )

        data = body.get("data")
        if data is None:
            raise LinearDecodeError("response has no data", operation)
        return data

    async def aclose(self) -> None:
        await self._http.aclose()
