"""
Collaborator seams for the export pipeline.

The renderer never talks to a note store directly; it only calls these
Protocols. Implementations raise ``NoteNotFound``/``ResourceNotFound`` for
unknown ids.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Protocol

from ..domain import Note, RenderedFragment, ResourceMetadata

MARKUP_LANGUAGE_MARKDOWN = 1
MARKUP_LANGUAGE_HTML = 2


class NoteSource(Protocol):
    def get_note(self, note_id: str) -> Note: ...

    def list_resources(self, note_id: str) -> List[str]: ...


class ResourceSource(Protocol):
    def get_metadata(self, resource_id: str) -> ResourceMetadata: ...

    def get_binary(self, resource_id: str) -> bytes: ...


class PrimaryCompiler(Protocol):
    def render(
        self,
        markup_language: int,
        text: str,
        theme: Any,
        options: Mapping[str, Any],
    ) -> RenderedFragment: ...


class FallbackCompiler(Protocol):
    def render(self, text: str) -> str: ...
