"""Issue commands."""

from typing import Optional

import typer

from ..api.filters import IssueListOptions
from .common import get_state, run_operation
from .output import DetailField, dash, truncate, warn_if_truncated

issue_app = typer.Typer(help="Issues.", no_args_is_help=True)

_HEADERS = ["ID", "TITLE", "STATE", "ASSIGNEE", "PRIORITY"]


def _rows(issues):
    return [
        [
            issue.identifier,
            truncate(issue.title, 50),
            dash(issue.state.name if issue.state else None),
            dash(issue.assignee.name if issue.assignee else None),
            issue.priority_label,
        ]
        for issue in issues
    ]


@issue_app.command("list")
def list_issues(
    ctx: typer.Context,
    team: Optional[str] = typer.Option(None, "--team", help="Filter by team ID"),
    assignee: Optional[str] = typer.Option(None, "--assignee", help="Filter by assignee ID"),
    state: Optional[str] = typer.Option(None, "--state", help="Filter by state ID"),
    project: Optional[str] = typer.Option(None, "--project", help="Filter by project ID"),
    limit: int = typer.Option(50, "--limit", min=0, help="Maximum number of issues to fetch"),
):
    """List issues with optional filters."""
    options = IssueListOptions(
        team_id=team,
        assignee_id=assignee,
        state_id=state,
        project_id=project,
        first=limit,
    )
    issues = run_operation(ctx, lambda client: client.get_issues(options))
    warn_if_truncated(issues)
    get_state(ctx).formatter.print(_HEADERS, _rows(issues), issues)


@issue_app.command("search")
def search_issues(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in issue titles"),
    limit: int = typer.Option(50, "--limit", min=0, help="Maximum number of issues to fetch"),
):
    """Search issues by title."""
    options = IssueListOptions(first=limit)
    issues = run_operation(ctx, lambda client: client.search_issues(query, options))
    warn_if_truncated(issues)
    get_state(ctx).formatter.print(_HEADERS, _rows(issues), issues)


@issue_app.command("view")
def view_issue(
    ctx: typer.Context,
    issue_id: str = typer.Argument(..., help="Issue ID or identifier (e.g. ENG-123)"),
):
    """Show issue details."""
    issue = run_operation(ctx, lambda client: client.get_issue(issue_id))

    fields = [
        DetailField("Identifier", issue.identifier),
        DetailField("Title", issue.title),
        DetailField("State", dash(issue.state.name if issue.state else None)),
        DetailField("Priority", issue.priority_label),
        DetailField("Assignee", dash(issue.assignee.name if issue.assignee else None)),
        DetailField("Creator", dash(issue.creator.name if issue.creator else None)),
        DetailField("Team", issue.team.name),
        DetailField("Project", dash(issue.project.name if issue.project else None)),
        DetailField("Cycle", dash(issue.cycle.display_name if issue.cycle else None)),
        DetailField("Labels", ", ".join(label.name for label in issue.labels)),
        DetailField("Estimate", dash(issue.estimate)),
        DetailField("Due Date", dash(issue.due_date)),
        DetailField("URL", issue.url),
        DetailField("Description", issue.description or ""),
    ]
    get_state(ctx).formatter.print_detail(fields, issue)
