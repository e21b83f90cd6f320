"""CLI commands for tool inspection.

Provides user-facing commands for viewing the tools the bridge exposes:
- list: Show published tools under the current allow/deny settings
"""

import typer
from rich.console import Console
from rich.table import Table

from mcbridge_core.cli.factory import create_bridge
from mcbridge_core.config import Settings

tools_app = typer.Typer(help="Inspect tools exposed to clients")
console = Console()


@tools_app.command("list")
def list_tools(
    location: list[str] = typer.Option(
        None,
        "--location",
        "-l",
        help="Discovery location (package or directory); repeatable",
    ),
) -> None:
    """List tools the server would publish."""
    settings = Settings()
    bridge, _ = create_bridge(settings, locations=location or None)

    table = Table(title=f"Tools ({settings.server_name})")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Action", style="green")
    table.add_column("Input", style="dim")
    table.add_column("Description")

    for tool in bridge.list_tools():
        if tool.builtin:
            action = "[dim]built-in[/dim]"
        else:
            action = tool.action_name or "[dim](from input)[/dim]"
        fields = ", ".join(tool.input_model.model_fields) if tool.input_model else "-"
        table.add_row(tool.name, action, fields, tool.description)

    console.print(table)

    if settings.tools_disabled:
        console.print(f"[dim]Disabled: {', '.join(settings.tools_disabled)}[/dim]")
