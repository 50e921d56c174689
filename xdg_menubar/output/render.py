"""Output rendering for scan reports."""

import json
from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box
from rich.markup import escape

from xdg_menubar.models import DesktopEntry, ScanReport


def render_human(report: ScanReport, width: int = 120) -> str:
    """
    Render scan report in human-readable format using Rich.
    
    Args:
        report: ScanReport to render
        width: Console width in characters
    
    Returns:
        Formatted string suitable for terminal display
    """
    output_buffer = StringIO()
    console = Console(file=output_buffer, width=width, force_terminal=True)
    
    summary = report.summary()
    summary_text = Text()
    summary_text.append(f"{summary['total']} entries  ", style="bold")
    summary_text.append(f"{summary['visible']} visible  ", style="bold green")
    summary_text.append(f"{summary['hidden']} hidden  ", style="dim")
    summary_text.append(f"{summary['launchable']} launchable  ", style="bold cyan")
    if summary["failures"]:
        summary_text.append(f"{summary['failures']} unreadable", style="bold red")
    else:
        summary_text.append("0 unreadable", style="dim")
    
    console.print(Panel(summary_text, title="[bold]Applications[/bold]", border_style="cyan", box=box.ROUNDED))
    
    entries = report.sorted_entries()
    if entries:
        _render_entries(console, entries)
    else:
        console.print("[yellow]No applications found[/yellow]")
    
    if report.failures:
        console.print()
        console.print("[bold red]Unreadable paths[/bold red]")
        for failure in report.failures:
            console.print(f"  [red]•[/red] [dim]{failure.kind}[/dim] {escape(failure.path)}: {escape(failure.error)}")
    
    return output_buffer.getvalue()


def _render_entries(console: Console, entries: list[DesktopEntry]) -> None:
    """Render entries as a table."""
    table = Table(
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        border_style="blue",
        row_styles=["", "dim"],
        expand=False
    )
    table.add_column("Name", style="bold", max_width=30, overflow="fold")
    table.add_column("Categories", style="cyan", max_width=30, overflow="fold")
    table.add_column("Command", max_width=50, overflow="fold")
    table.add_column("Icon", max_width=40, style="dim", overflow="ellipsis")
    
    for entry in entries:
        name = Text(entry.name, style="" if entry.show else "strike")
        categories = ", ".join(entry.categories or [])
        command = entry.command_line if entry.command_line is not None else "-"
        table.add_row(name, Text(categories), Text(command), Text(entry.icon_path or "-"))
    
    console.print(table)


def render_json(report: ScanReport) -> str:
    """
    Render scan report as JSON.
    
    Args:
        report: ScanReport to render
    
    Returns:
        JSON string with sorted keys and indentation
    """
    report_dict = report.model_dump()
    return json.dumps(report_dict, sort_keys=True, indent=2)
