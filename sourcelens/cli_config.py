"""``slens config`` commands: inspect and edit the TOML settings."""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from . import config_manager
from .config import WORKSPACE_CONFIG_NAME

config_app = typer.Typer(help="Inspect and change sourcelens settings.", no_args_is_help=True)
console = Console()


def _coerce(raw: str, current: Any) -> Any:
    """Convert CLI text to the type of the setting's current value."""
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise typer.BadParameter(f"Expected a boolean, got '{raw}'.")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise typer.BadParameter(f"Expected an integer, got '{raw}'.")
    if isinstance(current, float):
        try:
            return float(raw)
        except ValueError:
            raise typer.BadParameter(f"Expected a number, got '{raw}'.")
    if isinstance(current, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


@config_app.command("show")
def show(
    workspace: Path = typer.Option(
        Path("."), "--workspace", "-w", exists=True, file_okay=False, help="Project root directory."
    ),
):
    """Show the effective configuration for a workspace."""
    resolution, modification = config_manager.load_config(workspace.resolve())

    for title, section in (("resolution", resolution), ("modification", modification)):
        table = Table(title=f"[{title}]", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for f in fields(section):
            value = getattr(section, f.name)
            table.add_row(f.name, "[dim](not set)[/dim]" if value is None else str(value))
        console.print(table)

    console.print(f"[dim]Global config:    {config_manager.CONFIG_FILE}[/dim]")
    console.print(f"[dim]Workspace config: {workspace.resolve() / WORKSPACE_CONFIG_NAME}[/dim]")


@config_app.command("set")
def set_value(
    section: str = typer.Argument(..., help="resolution or modification"),
    key: str = typer.Argument(..., help="Setting name."),
    value: str = typer.Argument(..., help="New value (comma-separated for lists)."),
):
    """Persist a setting in the global config file."""
    if section not in config_manager.SECTIONS:
        raise typer.BadParameter(f"Unknown section '{section}'. Use: {', '.join(config_manager.SECTIONS)}.")
    defaults = config_manager.SECTIONS[section]()
    if not hasattr(defaults, key):
        raise typer.BadParameter(f"Unknown setting '{key}' in [{section}].")
    allowed = config_manager.CHOICES.get(key)
    if allowed and value not in allowed:
        raise typer.BadParameter(f"'{key}' must be one of: {', '.join(allowed)}.")

    current = getattr(defaults, key)
    coerced = _coerce(value, current) if current is not None else value
    if config_manager.save_config(section, {key: coerced}):
        console.print(f"[green]✓[/green] {section}.{key} = {coerced!r}")
    else:
        console.print(f"[red]✗ Could not write {config_manager.CONFIG_FILE}[/red]")
        raise typer.Exit(code=1)
