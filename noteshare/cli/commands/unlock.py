"""Unlock command: recover the page hidden in an encrypted share."""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from noteshare.exceptions import PersistenceError
from noteshare.rendering.exporter import write_html
from noteshare.rendering.gate import extract_payload

console = Console()


def unlock_note(
    path: str = typer.Argument(..., help="Encrypted share (.html) to open"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the page here instead of printing it"
    ),
):
    """Check the password of an encrypted share and reveal its page."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = extract_payload(fh.read())
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    page = payload.unlock(password)
    if page is None:
        console.print("[bold red]Error:[/bold red] Wrong password")
        raise typer.Exit(1)

    if not output:
        typer.echo(page, nl=False)
        return
    try:
        write_html(output, page)
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"Unlocked page written to [bold]{escape(output)}[/bold]")
