"""Shared helpers for the noteshare CLI commands."""

import json
import logging
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logs through rich; debug level with --verbose or NOTESHARE_DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                log_time_format="%H:%M:%S",
            )
        ],
        force=True,
    )


def load_settings(path: Optional[str]) -> Dict[str, Any]:
    """Read a JSON settings mapping (``markdown.plugin.*``, ``locale``)."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        console.print(
            f"[bold red]Error:[/bold red] Cannot read settings {escape(path)}: {escape(str(e))}"
        )
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(
            f"[bold red]Error:[/bold red] Settings {escape(path)} must be a JSON object"
        )
        raise typer.Exit(1)
    return data
