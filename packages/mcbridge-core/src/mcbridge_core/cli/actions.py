"""CLI commands for action inspection.

Provides user-facing commands for viewing discovered actions:
- list: Run discovery and show registered actions with their parameters
"""

import typer
from rich.console import Console
from rich.table import Table

from mcbridge_core.cli.factory import discover_actions
from mcbridge_core.config import Settings

actions_app = typer.Typer(help="Inspect discovered actions")
console = Console()


@actions_app.command("list")
def list_actions(
    location: list[str] = typer.Option(
        None,
        "--location",
        "-l",
        help="Discovery location (package or directory); repeatable",
    ),
) -> None:
    """List actions registered by discovery."""
    locations = location or Settings().discovery_locations
    registry, discovery = discover_actions(locations)

    if len(registry) == 0:
        console.print(f"[yellow]No actions found in: {', '.join(locations)}[/yellow]")
        return

    table = Table(title="Registered Actions")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Parameters", style="dim")
    table.add_column("Tools", style="green")

    tools_by_action: dict[str, list[str]] = {}
    for spec in discovery.discovered_tools:
        if spec.action_name:
            tools_by_action.setdefault(spec.action_name, []).append(spec.tool_name)

    for name, info in sorted(registry.describe_all().items()):
        params = "\n".join(f"{key}: {hint}" for key, hint in info.params.items()) or "-"
        table.add_row(
            name,
            info.description,
            params,
            ", ".join(tools_by_action.get(name, [])) or "-",
        )

    console.print(table)
