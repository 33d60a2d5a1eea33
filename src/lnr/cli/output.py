"""Table, detail and JSON rendering for CLI output."""

import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from ..api.filters import Page


@dataclass
class DetailField:
    label: str
    value: str
    show_empty: bool = False


def to_jsonable(data: Any) -> Any:
    """Convert entities (or pages / lists of them) to plain JSON data."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, Page):
        return [to_jsonable(item) for item in data.items]
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    return data


class Formatter:
    """Render results either as JSON or as human-readable text."""

    def __init__(self, json_output: bool = False, console: Optional[Console] = None):
        self.json_output = json_output
        self._console = console

    @property
    def console(self) -> Console:
        # Created lazily so output follows whatever stdout is current.
        if self._console is None:
            self._console = Console(highlight=False, soft_wrap=True)
        return self._console

    def print_json(self, data: Any) -> None:
        typer.echo(json.dumps(to_jsonable(data), indent=2))

    def print_table(self, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        rows = list(rows)
        if not rows:
            typer.echo("No results found.")
            return

        table = Table(box=None, pad_edge=False, show_edge=False, header_style="bold")
        for header in headers:
            table.add_column(header, no_wrap=True, overflow="ellipsis")
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    def print(
        self,
        headers: Sequence[str],
        rows: Iterable[Sequence[str]],
        data: Any,
    ) -> None:
        if self.json_output:
            self.print_json(data)
        else:
            self.print_table(headers, rows)

    def print_detail(self, fields: List[DetailField], data: Any) -> None:
        if self.json_output:
            self.print_json(data)
            return

        width = max((len(f.label) for f in fields), default=0)
        for f in fields:
            if not f.value and not f.show_empty:
                continue
            padding = " " * (width - len(f.label))
            typer.echo(f"{f.label}:{padding}  {f.value}")


def truncate(text: Optional[str], max_len: int) -> str:
    text = text or ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."


def percentage(value: float) -> str:
    return f"{value * 100:.0f}%"


def dash(value: Any) -> str:
    """The value as text, or "-" when missing or empty."""
    if value is None or value == "":
        return "-"
    return str(value)


def warn_if_truncated(page: Page) -> None:
    if page.truncated:
        typer.echo(
            f"Warning: showing the first {page.page_size} results; more may exist.",
            err=True,
        )
