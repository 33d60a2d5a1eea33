"""Cycle commands."""

from typing import Optional

import typer

from ..exceptions import NoActiveCycleError
from .common import get_state, run_operation
from .output import DetailField, dash, percentage, warn_if_truncated

cycle_app = typer.Typer(help="Cycles (sprints).", no_args_is_help=True)


def _fields(cycle):
    return [
        DetailField("ID", cycle.id),
        DetailField("Name", cycle.display_name),
        DetailField("Number", str(cycle.number)),
        DetailField("Starts", dash(cycle.starts_at)),
        DetailField("Ends", dash(cycle.ends_at)),
        DetailField("Progress", percentage(cycle.progress)),
        DetailField("Team", dash(cycle.team.name if cycle.team else None)),
        DetailField("Description", cycle.description or ""),
    ]


@cycle_app.command("list")
def list_cycles(
    ctx: typer.Context,
    team: Optional[str] = typer.Option(None, "--team", help="Filter by team ID"),
):
    """List cycles."""
    cycles = run_operation(ctx, lambda client: client.get_cycles(team))
    warn_if_truncated(cycles)

    rows = [
        [
            str(c.number),
            c.display_name,
            dash(c.team.key if c.team else None),
            dash(c.starts_at.date() if c.starts_at else None),
            dash(c.ends_at.date() if c.ends_at else None),
            percentage(c.progress),
        ]
        for c in cycles
    ]
    get_state(ctx).formatter.print(
        ["NUMBER", "NAME", "TEAM", "STARTS", "ENDS", "PROGRESS"], rows, cycles
    )


@cycle_app.command("view")
def view_cycle(ctx: typer.Context, cycle_id: str = typer.Argument(..., help="Cycle ID")):
    """Show cycle details."""
    cycle = run_operation(ctx, lambda client: client.get_cycle(cycle_id))
    get_state(ctx).formatter.print_detail(_fields(cycle), cycle)


@cycle_app.command("active")
def active_cycle(
    ctx: typer.Context,
    team_id: str = typer.Argument(..., help="Team ID"),
):
    """Show the active cycle for a team."""
    try:
        cycle = run_operation(
            ctx,
            lambda client: client.get_active_cycle(team_id),
            handled=(NoActiveCycleError,),
        )
    except NoActiveCycleError:
        typer.echo("No active cycle for this team.")
        return
    get_state(ctx).formatter.print_detail(_fields(cycle), cycle)
