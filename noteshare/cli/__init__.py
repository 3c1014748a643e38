"""Command line interface for noteshare."""
