"""Errors raised by the note sharing pipeline."""

from __future__ import annotations

from typing import List, Optional


class NoteShareError(Exception):
    """Base noteshare error."""


class NoteNotFound(NoteShareError):
    """The requested note does not exist in the note source."""

    def __init__(self, note_id: str):
        super().__init__(f"Note with ID {note_id} not found")
        self.note_id = note_id


class ResourceNotFound(NoteShareError):
    """A referenced attachment cannot be resolved."""

    def __init__(self, resource_id: str, message: Optional[str] = None):
        super().__init__(message or f"Resource with ID {resource_id} not found")
        self.resource_id = resource_id


class LocaleLoadError(NoteShareError):
    """A locale file is missing or is not a JSON object."""


class FallbackExhausted(NoteShareError):
    """Every provider of a fallback chain failed."""

    def __init__(self, name: str, errors: List[BaseException]):
        detail = "; ".join(str(e) for e in errors) or "no attempts"
        super().__init__(f"{name}: all attempts failed ({detail})")
        self.name = name
        self.errors = errors


class BundleReadError(NoteShareError):
    """A file of the note bundle exists but cannot be read or parsed."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Cannot read {path}: {cause}")
        self.path = path
        self.cause = cause


class CompilerError(NoteShareError):
    """Both the primary and the fallback markdown compilers failed."""


class PersistenceError(NoteShareError):
    """Writing the exported HTML file failed."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


class UserCancelled(NoteShareError):
    """The user declined a confirmation. Not an error for the caller."""


__all__ = [
    "NoteShareError",
    "NoteNotFound",
    "ResourceNotFound",
    "LocaleLoadError",
    "BundleReadError",
    "FallbackExhausted",
    "CompilerError",
    "PersistenceError",
    "UserCancelled",
]
