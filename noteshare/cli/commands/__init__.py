"""Command modules for the noteshare CLI."""

from noteshare.cli.commands import share, unlock

__all__ = ["share", "unlock"]
