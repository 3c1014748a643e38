#!/usr/bin/env python
"""Command line interface for noteshare."""

import typer
from rich.console import Console

from noteshare.cli.commands import share, unlock

app = typer.Typer(help="Export notes as self-contained HTML files")
console = Console()

app.command("share")(share.share_note)
app.command("unlock")(unlock.unlock_note)


@app.callback()
def callback():
    """Share a stored note as a standalone, optionally password-gated, HTML file."""
    pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
