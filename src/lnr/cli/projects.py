"""Project and initiative commands."""

from typing import Optional

import typer

from ..api.filters import ProjectListOptions
from .common import get_state, run_operation
from .output import DetailField, dash, percentage, truncate, warn_if_truncated

project_app = typer.Typer(help="Projects.", no_args_is_help=True)
initiative_app = typer.Typer(help="Initiatives.", no_args_is_help=True)


@project_app.command("list")
def list_projects(
    ctx: typer.Context,
    team: Optional[str] = typer.Option(None, "--team", help="Filter by team ID"),
    state: Optional[str] = typer.Option(
        None, "--state", help="Filter by state (e.g. started, completed, canceled)"
    ),
    limit: int = typer.Option(50, "--limit", min=0, help="Maximum number of projects to fetch"),
):
    """List projects."""
    options = ProjectListOptions(team_id=team, state=state, first=limit)
    projects = run_operation(ctx, lambda client: client.get_projects(options))
    warn_if_truncated(projects)

    rows = [
        [
            truncate(p.name, 40),
            p.state,
            percentage(p.progress),
            dash(p.lead.name if p.lead else None),
            ", ".join(t.key for t in p.teams),
        ]
        for p in projects
    ]
    get_state(ctx).formatter.print(
        ["NAME", "STATE", "PROGRESS", "LEAD", "TEAMS"], rows, projects
    )


@project_app.command("view")
def view_project(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project ID"),
):
    """Show project details."""
    project = run_operation(ctx, lambda client: client.get_project(project_id))

    fields = [
        DetailField("ID", project.id),
        DetailField("Name", project.name),
        DetailField("State", project.state),
        DetailField("Progress", percentage(project.progress)),
        DetailField("Lead", dash(project.lead.name if project.lead else None)),
        DetailField("Teams", ", ".join(t.name for t in project.teams)),
        DetailField("Start Date", dash(project.start_date)),
        DetailField("Target Date", dash(project.target_date)),
        DetailField("URL", project.url),
        DetailField("Description", project.description or ""),
    ]
    get_state(ctx).formatter.print_detail(fields, project)


@initiative_app.command("list")
def list_initiatives(ctx: typer.Context):
    """List initiatives."""
    initiatives = run_operation(ctx, lambda client: client.get_initiatives())
    warn_if_truncated(initiatives)

    rows = [
        [
            truncate(i.name, 40),
            dash(i.owner.name if i.owner else None),
            dash(i.target_date),
        ]
        for i in initiatives
    ]
    get_state(ctx).formatter.print(["NAME", "OWNER", "TARGET DATE"], rows, initiatives)


@initiative_app.command("view")
def view_initiative(
    ctx: typer.Context,
    initiative_id: str = typer.Argument(..., help="Initiative ID"),
):
    """Show initiative details and its projects."""
    initiative = run_operation(ctx, lambda client: client.get_initiative(initiative_id))

    fields = [
        DetailField("ID", initiative.id),
        DetailField("Name", initiative.name),
        DetailField("Owner", dash(initiative.owner.name if initiative.owner else None)),
        DetailField("Target Date", dash(initiative.target_date)),
        DetailField(
            "Projects",
            ", ".join(f"{p.name} ({p.state})" for p in initiative.projects),
        ),
        DetailField("Description", initiative.description or ""),
    ]
    get_state(ctx).formatter.print_detail(fields, initiative)
