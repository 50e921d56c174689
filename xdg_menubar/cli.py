"""Command-line interface for xdg-menubar."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from xdg_menubar import __version__
from xdg_menubar.config import Config, load_config, save_example_config
from xdg_menubar.engine import filter_by_category, run_scan
from xdg_menubar.output.render import render_human, render_json


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"xdg-menubar version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )


def scan(
    directories: Optional[list[Path]] = typer.Argument(
        None,
        help="Directories to scan (default: XDG application directories)"
    ),
    json: bool = typer.Option(
        False,
        "--json",
        help="Output results in JSON format"
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        help="Write output to file instead of stdout"
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        help="Include entries hidden by NoDisplay or OnlyShowIn"
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Only list entries in this category (e.g. Network)"
    ),
    terminal: Optional[str] = typer.Option(
        None,
        "--terminal",
        help="Terminal used for Terminal=true entries (default: from config or xterm)"
    ),
    wm_name: Optional[str] = typer.Option(
        None,
        "--wm-name",
        help="Window manager name matched against OnlyShowIn (default: from config or awesome)"
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        help="Number of directories scanned concurrently"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to configuration file (default: ~/.xdg-menubar.yaml)"
    ),
    generate_config: Optional[Path] = typer.Option(
        None,
        "--generate-config",
        help="Generate example configuration file at specified path and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug details to stderr"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """
    List the applications found in .desktop files.

    By default, scans the XDG application directories and prints a table of
    visible entries. Use --json for machine-readable output.

    Examples:
        xdg-menubar                                   # Scan default directories
        xdg-menubar ~/.local/share/applications       # Scan one directory
        xdg-menubar --all                             # Include hidden entries
        xdg-menubar --category Network                # Only network applications
        xdg-menubar --terminal "urxvt" --wm-name i3   # Override configuration
        xdg-menubar --json --out apps.json            # Save JSON report
        xdg-menubar --generate-config ~/.xdg-menubar.yaml
    """
    setup_logging(verbose)

    if generate_config:
        try:
            save_example_config(generate_config)
            print(f"✓ Example configuration saved to {generate_config}", file=sys.stderr)
            sys.exit(0)
        except OSError as e:
            print(f"Error generating config: {e}", file=sys.stderr)
            sys.exit(2)

    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(2)

    # Apply CLI overrides to config
    try:
        config = Config(
            terminal=terminal if terminal is not None else config.terminal,
            wm_name=wm_name if wm_name is not None else config.wm_name,
            batch_size=config.batch_size,
            max_workers=workers if workers is not None else config.max_workers,
            application_dirs=config.application_dirs,
            icon_dirs=config.icon_dirs,
            include_hidden=show_all or config.include_hidden
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    roots = [str(d) for d in directories] if directories else None

    try:
        report = run_scan(config, roots=roots, show_progress=not json)
    except Exception as e:
        print(f"Scan failed: {e}", file=sys.stderr)
        sys.exit(3)

    if category:
        report = report.model_copy(update={"entries": filter_by_category(report.entries, category)})

    try:
        output = render_json(report) if json else render_human(report)
    except Exception as e:
        print(f"Rendering failed: {e}", file=sys.stderr)
        sys.exit(3)

    try:
        if out:
            if not out.parent.exists():
                print(f"Error: Directory does not exist: {out.parent}", file=sys.stderr)
                sys.exit(2)
            out.write_text(output)
            print(f"✓ Report written to {out}", file=sys.stderr)
        else:
            print(output)
    except OSError as e:
        print(f"Output failed: {e}", file=sys.stderr)
        sys.exit(3)

    sys.exit(0)


def main() -> None:
    """Entry point for the CLI."""
    typer.run(scan)


if __name__ == "__main__":
    main()
