"""Exception types raised by the Linear API layer.

Every error carries the name of the logical operation that failed
("get issue", "list projects", ...) so the CLI can print a one-line message.
Task cancellation is not wrapped: ``asyncio.CancelledError`` propagates as-is.
"""

from typing import Any, Dict, List, Optional


class LinearError(Exception):
    """Base exception for all lnr errors."""

    def __init__(self, message: str, operation: str = ""):
        self.message = message
        self.operation = operation
        super().__init__(message)

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class ConfigurationError(LinearError):
    """Required configuration (the API key) is missing."""

    pass


class LinearTransportError(LinearError):
    """Connection-level failure. Never retried."""

    pass


class LinearTimeoutError(LinearError):
    """The overall per-operation deadline expired."""

    pass


class LinearAPIError(LinearError):
    """The API returned a non-success response."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: str = "",
        operation: str = "",
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, operation)


class LinearRateLimitError(LinearAPIError):
    """Still rate limited (429) after the transport exhausted its retries."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        operation: str = "",
    ):
        self.retry_after = retry_after
        super().__init__(message, status_code=429, operation=operation)


class LinearGraphQLError(LinearAPIError):
    """The service rejected the query or reported GraphQL-level errors."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: int = 0,
        operation: str = "",
    ):
        self.errors = errors or []
        super().__init__(
            message,
            status_code=status_code,
            response_body=str(self.errors)[:500],
            operation=operation,
        )


class LinearDecodeError(LinearError):
    """The response could not be decoded into domain entities."""

    pass


class NoActiveCycleError(LinearError):
    """The team exists but has no cycle in progress."""

    def __init__(self, team_id: str, operation: str = "get active cycle"):
        self.team_id = team_id
        super().__init__("no active cycle for this team", operation)
