"""Share command for the noteshare CLI."""

import os
from typing import Callable, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from noteshare.exceptions import NoteShareError, PersistenceError, UserCancelled
from noteshare.i18n import load_translator
from noteshare.models import ShareSettings
from noteshare.rendering.exporter import NoteExporter
from noteshare.rendering.options import RenderConfig
from noteshare.store import NoteBundleStore

from ..utils import configure_logging, load_settings

console = Console()


def _overwrite_check(prompt: str, force: bool) -> Callable[[str], None]:
    def check(path: str) -> None:
        if force or not os.path.exists(path):
            return
        if not typer.confirm(f"{prompt} ({path})"):
            raise UserCancelled(path)

    return check


def share_note(
    note_id: str = typer.Argument(..., help="ID of the note to share"),
    store: str = typer.Option(
        ".", "--store", "-s", help="Directory holding the exported note bundle"
    ),
    share_type: str = typer.Option(
        "public", "--type", "-t", help="Share type: public or encrypted"
    ),
    expiration: str = typer.Option(
        "7", "--expiration", "-e", help="Validity in days (1-365, default 7)"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output .html path (default: <title>.html)"
    ),
    password: Optional[str] = typer.Option(
        None, "--password", "-p", help="Password for encrypted shares (random if omitted)"
    ),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="UI locale"),
    settings_file: Optional[str] = typer.Option(
        None, "--settings", help="JSON file with markdown.plugin.* settings"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
):
    """Render a note to a self-contained HTML file."""
    settings = load_settings(settings_file)
    if locale:
        settings["locale"] = locale
    config = RenderConfig.from_settings(settings)
    configure_logging(verbose or config.debug)
    translator = load_translator(config.locale)
    t = translator.t

    try:
        share_settings = ShareSettings(share_type=share_type, expiration_days=expiration)
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    source = NoteBundleStore(store)
    exporter = NoteExporter(source, source, config=config, translator=translator)

    try:
        result = exporter.share(
            note_id,
            share_settings,
            output,
            password=password,
            confirm_overwrite=_overwrite_check(t("overwritePrompt"), force),
        )
    except UserCancelled:
        console.print(escape(t("cancelled")))
        return
    except PersistenceError as e:
        message = f"{t('saveFailed')}: {e}"
        console.print(f"[bold red]Error:[/bold red] {escape(message)}")
        raise typer.Exit(1)
    except NoteShareError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[bold green]{escape(t('shareSuccessMessage'))}[/bold green]")
    console.print(f"{escape(t('validDays'))}: {result.expiration_days}")
    if result.password:
        console.print(f"{escape(t('password'))}: [bold]{escape(result.password)}[/bold]")
    console.print(f"{escape(t('saveSuccess'))} {escape(os.path.abspath(result.path))}")
