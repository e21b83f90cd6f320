"""Tool invocation audit CLI commands.

This module provides CLI commands for reviewing recorded tool calls:
- list: Display recent invocations in table format

Per project patterns: CLI tool, not Web UI. Parameter summaries are
already redacted when written.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mcbridge_core.actions.audit import InvocationAuditor
from mcbridge_core.config import Settings

audit_app = typer.Typer(help="Review tool invocation audit logs")

DEFAULT_DB_PATH = Path.home() / ".mcbridge" / "audit.db"


def _resolve_db_path(db_path: Path | None) -> Path:
    """Get database path from the option, settings, or the default."""
    if db_path is not None:
        return db_path
    return Settings().audit_db_path or DEFAULT_DB_PATH


@audit_app.command("list")
def list_invocations(
    tool: str = typer.Option(None, "--tool", "-t", help="Only invocations of this tool"),
    failed: bool = typer.Option(False, "--failed", help="Only failed invocations"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of invocations to show"),
    db_path: Path = typer.Option(None, "--db", help="Path to audit database"),
) -> None:
    """List recent tool invocations."""
    console = Console()
    path = _resolve_db_path(db_path)

    if not path.exists():
        console.print("[yellow]No audit database found. No invocations to list.[/yellow]")
        return

    auditor = InvocationAuditor(path)
    records = asyncio.run(
        auditor.get_invocations(tool_name=tool, ok=False if failed else None, limit=limit)
    )

    if not records:
        console.print("[yellow]No invocations found[/yellow]")
        return

    table = Table(title="Tool Invocations")
    table.add_column("Time", style="dim")
    table.add_column("Tool", style="cyan")
    table.add_column("Action")
    table.add_column("Result")
    table.add_column("Elapsed", justify="right")
    table.add_column("Params", style="dim")

    for record in records:
        result = "[green]ok[/green]" if record.ok else f"[red]{record.error_code}[/red]"
        params = json.dumps(record.params_summary, default=str) if record.params_summary else "-"
        if len(params) > 60:
            params = params[:57] + "..."
        table.add_row(
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            record.tool_name,
            record.action_name or "-",
            result,
            f"{record.elapsed_ms}ms",
            params,
        )

    console.print(table)
