"""Workspace commands: auth, users, teams, labels and workflow states."""

import asyncio
from typing import Optional

import typer

from ..config import API_KEY_ENV
from ..exceptions import ConfigurationError, LinearError
from .common import fail, get_state, run_operation
from .output import DetailField, dash, truncate, warn_if_truncated

auth_app = typer.Typer(help="Authentication status.", no_args_is_help=True)
user_app = typer.Typer(help="Workspace users.", no_args_is_help=True)
team_app = typer.Typer(help="Teams.", no_args_is_help=True)
label_app = typer.Typer(help="Issue labels.", no_args_is_help=True)
state_app = typer.Typer(help="Workflow states.", no_args_is_help=True)

_NOT_AUTHENTICATED = f"""Not authenticated.

To authenticate, set your Linear API key:
  export {API_KEY_ENV}=your_api_key

You can create an API key at:
  Settings > Account > Security & Access > Personal API keys"""


# -- auth ----------------------------------------------------------------------


@auth_app.command("status")
def auth_status(ctx: typer.Context):
    """Verify the API key and show account information."""
    state = get_state(ctx)

    async def _status():
        async with state.make_client() as client:
            user = await client.get_viewer()
            organisation = await client.get_organisation()
            return user, organisation

    try:
        user, organisation = asyncio.run(_status())
    except ConfigurationError:
        typer.echo(_NOT_AUTHENTICATED)
        return
    except LinearError as exc:
        fail(exc)

    if state.json_output:
        state.formatter.print_json(
            {"authenticated": True, "user": user, "organisation": organisation}
        )
        return

    typer.echo("Authenticated!")
    typer.echo("")
    typer.echo(f"User:         {user.name} ({user.email})")
    typer.echo(f"Organisation: {organisation.name}")
    typer.echo(f"Users:        {organisation.user_count}")
    if user.admin:
        typer.echo("Role:         Admin")


# -- users ---------------------------------------------------------------------


@user_app.command("list")
def list_users(ctx: typer.Context):
    """List users in the workspace."""
    users = run_operation(ctx, lambda client: client.get_users())
    warn_if_truncated(users)

    rows = [
        [u.name, u.email, u.display_name, "yes" if u.active else "no", "yes" if u.admin else "no"]
        for u in users
    ]
    get_state(ctx).formatter.print(
        ["NAME", "EMAIL", "DISPLAY NAME", "ACTIVE", "ADMIN"], rows, users
    )


@user_app.command("me")
def me(ctx: typer.Context):
    """Show the authenticated user."""
    user = run_operation(ctx, lambda client: client.get_viewer())
    fields = [
        DetailField("ID", user.id),
        DetailField("Name", user.name),
        DetailField("Display Name", user.display_name),
        DetailField("Email", user.email),
        DetailField("Admin", "yes" if user.admin else "no"),
    ]
    get_state(ctx).formatter.print_detail(fields, user)


# -- teams ---------------------------------------------------------------------


@team_app.command("list")
def list_teams(ctx: typer.Context):
    """List teams in the workspace."""
    teams = run_operation(ctx, lambda client: client.get_teams())
    warn_if_truncated(teams)

    rows = [[t.key, t.name, t.id, truncate(t.description, 50)] for t in teams]
    get_state(ctx).formatter.print(["KEY", "NAME", "ID", "DESCRIPTION"], rows, teams)


@team_app.command("view")
def view_team(ctx: typer.Context, team_id: str = typer.Argument(..., help="Team ID")):
    """Show team details."""
    team = run_operation(ctx, lambda client: client.get_team(team_id))
    fields = [
        DetailField("ID", team.id),
        DetailField("Key", team.key),
        DetailField("Name", team.name),
        DetailField("Private", "yes" if team.private else "no"),
        DetailField("Description", team.description or ""),
    ]
    get_state(ctx).formatter.print_detail(fields, team)


# -- labels & states -----------------------------------------------------------


@label_app.command("list")
def list_labels(
    ctx: typer.Context,
    team: Optional[str] = typer.Option(None, "--team", help="Filter by team ID"),
):
    """List issue labels."""
    labels = run_operation(ctx, lambda client: client.get_labels(team))
    warn_if_truncated(labels)

    rows = [
        [
            label.name,
            label.color,
            dash(label.team.key if label.team else None),
            truncate(label.description, 40),
        ]
        for label in labels
    ]
    get_state(ctx).formatter.print(["NAME", "COLOR", "TEAM", "DESCRIPTION"], rows, labels)


@state_app.command("list")
def list_states(
    ctx: typer.Context,
    team: Optional[str] = typer.Option(None, "--team", help="Filter by team ID"),
):
    """List workflow states."""
    states = run_operation(ctx, lambda client: client.get_workflow_states(team))
    warn_if_truncated(states)

    rows = [[s.name, s.type, s.color, dash(s.team.key if s.team else None)] for s in states]
    get_state(ctx).formatter.print(["NAME", "TYPE", "COLOR", "TEAM"], rows, states)
