"""Shared CLI plumbing: per-invocation state and running one API operation."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, NoReturn, Optional, Tuple, Type, TypeVar

import typer

from ..api.client import LinearClient
from ..config import get_settings
from ..exceptions import LinearError
from .output import Formatter

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[], LinearClient]


def default_client_factory() -> LinearClient:
    return LinearClient.from_settings(get_settings())


@dataclass
class AppState:
    json_output: bool = False
    client_factory: Optional[ClientFactory] = None

    @property
    def formatter(self) -> Formatter:
        return Formatter(json_output=self.json_output)

    def make_client(self) -> LinearClient:
        factory = self.client_factory or default_client_factory
        return factory()


def get_state(ctx: typer.Context) -> AppState:
    return ctx.ensure_object(AppState)


def run_operation(
    ctx: typer.Context,
    operation: Callable[[LinearClient], Awaitable[T]],
    handled: Tuple[Type[LinearError], ...] = (),
) -> T:
    """Run one API operation to completion.

    Errors listed in ``handled`` are re-raised for the command to deal with;
    any other LinearError prints a message and exits with status 1.
    """
    state = get_state(ctx)

    async def _run() -> T:
        async with state.make_client() as client:
            return await operation(client)

    try:
        return asyncio.run(_run())
    except handled:
        raise
    except LinearError as exc:
        fail(exc)


def fail(exc: Exception) -> NoReturn:
    logger.debug("Command failed", exc_info=exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)
