"""Public API for noteshare."""

from .domain import Note, RenderedFragment, ResourceBlob, ResourceMetadata, ShareResult
from .exceptions import (
    CompilerError,
    NoteNotFound,
    NoteShareError,
    PersistenceError,
    ResourceNotFound,
)
from .models import ShareSettings
from .rendering.exporter import NoteExporter
from .store import NoteBundleStore

__all__ = [
    "NoteExporter",
    "NoteBundleStore",
    "ShareSettings",
    "ShareResult",
    "Note",
    "RenderedFragment",
    "ResourceBlob",
    "ResourceMetadata",
    "NoteShareError",
    "NoteNotFound",
    "ResourceNotFound",
    "CompilerError",
    "PersistenceError",
]
