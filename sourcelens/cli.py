"""Typer-based CLI for sourcelens."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .cli_config import config_app
from .models import ComponentHierarchy, ElementDescriptor, ElementStyleChanges, SourceLocation
from .workspace import Workspace, open_workspace

app = typer.Typer(
    help="🔎 SourceLens: find the source of rendered UI elements and edit their styles.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")

console = Console()

WORKSPACE_OPTION = typer.Option(
    Path("."), "--workspace", "-w", exists=True, file_okay=False, help="Project root directory."
)
JSON_OPTION = typer.Option(False, "--json", help="Print machine-readable JSON.")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"SourceLens v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """SourceLens: element-to-source resolution and safe style rewriting."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _echo_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _open(workspace: Path) -> Workspace:
    return open_workspace(workspace.resolve())


def _descriptor(
    tag: Optional[str],
    element_id: Optional[str],
    class_name: Optional[str],
    text: Optional[str],
    descriptor_file: Optional[Path],
) -> ElementDescriptor:
    if descriptor_file is not None:
        try:
            payload = json.loads(descriptor_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise typer.BadParameter(f"Could not read descriptor file: {exc}")
        return ElementDescriptor.from_dict(payload)
    if not tag:
        raise typer.BadParameter("Provide --tag or --descriptor.")
    return ElementDescriptor(tag_name=tag, id=element_id, class_name=class_name, text_content=text)


def _parse_styles(pairs: List[str]) -> Dict[str, str]:
    styles: Dict[str, str] = {}
    for pair in pairs:
        prop, sep, value = pair.partition("=")
        if not sep or not prop.strip():
            raise typer.BadParameter(f"Style '{pair}' must look like property=value.")
        styles[prop.strip()] = value.strip()
    return styles


@app.command("detect")
def detect(
    workspace: Path = WORKSPACE_OPTION,
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the memoized result."),
    as_json: bool = JSON_OPTION,
):
    """Detect the UI framework used by a project."""
    ws = _open(workspace)
    result = ws.detect_framework(refresh=refresh)
    if result is None:
        console.print("[red]✗ Workspace is not a directory.[/red]")
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(result.to_dict())
        return

    console.print(f"[bold]Framework:[/bold] [cyan]{result.framework}[/cyan] ({result.confidence:.0%} confidence)")
    if result.version:
        console.print(f"[bold]Version:[/bold] {result.version}")
    if result.build_tool:
        console.print(f"[bold]Build tool:[/bold] {result.build_tool}")
    for item in result.evidence:
        console.print(f"  [dim]•[/dim] {item}")


@app.command("resolve")
def resolve(
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Element tag name."),
    element_id: Optional[str] = typer.Option(None, "--id", help="Element id."),
    class_name: Optional[str] = typer.Option(None, "--class", "-c", help="Space-separated class list."),
    text: Optional[str] = typer.Option(None, "--text", help="Visible text content."),
    descriptor_file: Optional[Path] = typer.Option(
        None, "--descriptor", "-d", exists=True, dir_okay=False, help="JSON element descriptor."
    ),
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Find the source line that renders an element."""
    descriptor = _descriptor(tag, element_id, class_name, text, descriptor_file)
    ws = _open(workspace)
    info = ws.resolve_element_source(descriptor)
    if info is None:
        if as_json:
            _echo_json(None)
        else:
            console.print("[yellow]Could not locate source for this element.[/yellow]")
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(info.to_dict())
        return

    table = Table(title="Element Source", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Location", str(info))
    table.add_row("Component", info.component_name)
    table.add_row("Framework", info.framework)
    table.add_row("Type", info.element_type)
    table.add_row("Confidence", f"{info.confidence:.2f}")
    rules = info.additional_info.get("matched_rules")
    if rules:
        table.add_row("Matched", ", ".join(rules))
    console.print(table)


def _add_branch(tree: Tree, node: ComponentHierarchy, seen: set) -> None:
    for child in node.children:
        if id(child) in seen:
            continue
        seen.add(id(child))
        branch = tree.add(f"[cyan]{child.component_name}[/cyan] [dim]{child.file_path}[/dim]")
        _add_branch(branch, child, seen)


@app.command("hierarchy")
def hierarchy(
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Show the inferred component tree."""
    ws = _open(workspace)
    root = ws.build_hierarchy()
    if root is None:
        console.print("[yellow]No component hierarchy found.[/yellow]")
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(root.to_dict())
        return

    tree = Tree(f"[bold cyan]{root.component_name}[/bold cyan] [dim]{root.file_path}[/dim]")
    _add_branch(tree, root, {id(root)})
    console.print(tree)


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Component name to search for."),
    framework: Optional[List[str]] = typer.Option(None, "--framework", "-f", help="Restrict to framework(s)."),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum number of results."),
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Search component declarations by name."""
    ws = _open(workspace)
    options = {"frameworks": list(framework)} if framework else None
    matches = ws.search_components(query, options)[:limit]

    if as_json:
        _echo_json([m.to_dict() for m in matches])
        return
    if not matches:
        console.print(f"[yellow]No components matching '{query}'.[/yellow]")
        return

    table = Table(title=f"Components matching '{query}'")
    table.add_column("Component", style="cyan")
    table.add_column("Match")
    table.add_column("Confidence", justify="right")
    table.add_column("Location", style="dim")
    for match in matches:
        table.add_row(
            match.component_name,
            match.match_type,
            f"{match.confidence:.2f}",
            f"{match.file_path}:{match.location.line}",
        )
    console.print(table)


@app.command("apply")
def apply(
    style: List[str] = typer.Option(..., "--style", "-s", help="CSS declaration as property=value (repeatable)."),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Element tag name."),
    element_id: Optional[str] = typer.Option(None, "--id", help="Element id."),
    class_name: Optional[str] = typer.Option(None, "--class", "-c", help="Space-separated class list."),
    file: Optional[Path] = typer.Option(None, "--file", help="Source file, relative to the workspace (skips resolution)."),
    line: Optional[int] = typer.Option(None, "--line", "-l", min=1, help="1-based line of the element."),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="inline-style, css-class or auto (overrides config)."
    ),
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Apply style changes to an element's source."""
    if (file is None) != (line is None):
        raise typer.BadParameter("--file and --line must be given together.")
    if strategy is not None and strategy not in ("inline-style", "css-class", "auto"):
        raise typer.BadParameter("--strategy must be inline-style, css-class or auto.")

    overrides = {"modification": {"preferred_update_method": strategy}} if strategy else None
    ws = open_workspace(workspace.resolve(), overrides)
    changes = ElementStyleChanges(
        element_selector=tag or "",
        styles=_parse_styles(style),
        element_id=element_id,
        class_name=class_name,
        tag_name=tag,
        source_info=SourceLocation(file_path=str(file), line_number=line) if file else None,
    )
    result = ws.apply_style_changes(changes)

    if as_json:
        _echo_json(result.to_dict())
    elif result.success:
        console.print(f"[green]✓[/green] {result}")
        for path in result.modified_files:
            console.print(f"  [dim]modified[/dim] {path}")
        for path in result.backup_files:
            console.print(f"  [dim]backup[/dim]   {path}")
    else:
        console.print(f"[red]✗ {result.error}[/red] [dim]({result.error_code})[/dim]")

    if result.conflicts and result.conflicts.has_conflicts and not as_json:
        for conflict in result.conflicts.conflicts:
            console.print(f"[yellow]⚠ {conflict.description}:[/yellow] {conflict.file_path}")
    if not result.success:
        raise typer.Exit(code=1)


@app.command("rollback")
def rollback(
    file: Path = typer.Argument(..., help="File to restore, relative to the workspace."),
    timestamp: Optional[int] = typer.Option(None, "--timestamp", help="Backup timestamp (epoch ms)."),
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Restore a file from its latest (or a specific) backup."""
    ws = _open(workspace)
    restored = ws.rollback_changes(file, timestamp)
    if as_json:
        _echo_json({"file": str(file), "restored": restored})
        if not restored:
            raise typer.Exit(code=1)
        return
    if restored:
        console.print(f"[green]✓[/green] Restored {file}")
        return
    console.print(f"[red]✗ No backup to restore for {file}[/red]")
    raise typer.Exit(code=1)


@app.command("history")
def history(
    file: Path = typer.Argument(..., help="File whose backups to list, relative to the workspace."),
    workspace: Path = WORKSPACE_OPTION,
    as_json: bool = JSON_OPTION,
):
    """List backups recorded for a file."""
    ws = _open(workspace)
    entries = ws.get_backup_history(file)
    if as_json:
        _echo_json([entry.to_dict() for entry in entries])
        return
    if not entries:
        console.print(f"[yellow]No backups for {file}.[/yellow]")
        return

    table = Table(title=f"Backups of {file}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Hash")
    table.add_column("Reason")
    table.add_column("Backup", style="dim")
    for entry in reversed(entries):
        table.add_row(str(entry.timestamp), entry.hash, entry.reason, entry.backup_path)
    console.print(table)
