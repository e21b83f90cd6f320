"""MCBridge CLI - action execution core for a game-bot tool server."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from mcbridge_core.cli.actions import actions_app
from mcbridge_core.cli.audit import audit_app
from mcbridge_core.cli.serve import serve
from mcbridge_core.cli.tools import tools_app
from mcbridge_core.config import Settings

app = typer.Typer(
    name="mcbridge",
    help="Action execution core for a game-bot tool server",
    no_args_is_help=True,
)

# Add command groups
app.add_typer(actions_app, name="actions")
app.add_typer(tools_app, name="tools")
app.add_typer(audit_app, name="audit")
app.command("serve")(serve)


@app.callback()
def configure_logging(
    log_level: str = typer.Option(
        None, "--log-level", help="Log level (default: MCBRIDGE_LOG_LEVEL or INFO)"
    ),
) -> None:
    """Send logs to stderr; stdout is reserved for the MCP transport."""
    level = (log_level or Settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
