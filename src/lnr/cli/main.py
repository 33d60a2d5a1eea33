"""lnr command-line entry point."""

from typing import Optional

import typer

from .. import __version__
from ..config import API_KEY_ENV, get_settings
from ..exceptions import LinearError
from ..observability.logging import configure_logging
from .common import fail, get_state
from .cycles import cycle_app
from .issues import issue_app
from .projects import initiative_app, project_app
from .workspace import auth_app, label_app, state_app, team_app, user_app

app = typer.Typer(
    name="lnr",
    help=f"""Linear CLI - read-only access to your Linear workspace.

View issues, projects, initiatives, teams and more from the terminal.

To get started, set your Linear API key:

    export {API_KEY_ENV}=your_api_key

Then verify your authentication with: lnr auth status""",
    no_args_is_help=True,
)

app.add_typer(auth_app, name="auth")
app.add_typer(cycle_app, name="cycle")
app.add_typer(initiative_app, name="initiative")
app.add_typer(issue_app, name="issue")
app.add_typer(label_app, name="label")
app.add_typer(project_app, name="project")
app.add_typer(state_app, name="state")
app.add_typer(team_app, name="team")
app.add_typer(user_app, name="user")


def _version_callback(value: bool):
    if value:
        typer.echo(f"lnr {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    try:
        settings = get_settings()
    except LinearError as exc:
        fail(exc)
    configure_logging(
        log_format=settings.log_format,
        log_level="DEBUG" if verbose else settings.log_level,
    )
    get_state(ctx).json_output = json_output


def main():
    app()
