"""In-memory note/resource sources shared by the test modules."""

from typing import Dict, List, Optional, Tuple

from noteshare.domain import Note, ResourceMetadata
from noteshare.exceptions import NoteNotFound, ResourceNotFound

IMAGE_ID = "0123456789abcdef0123456789abcdef"
PDF_ID = "fedcba9876543210fedcba9876543210"
MISSING_ID = "00000000000000000000000000000000"

PNG_BYTES = b"\x89PNG"


class InMemoryStore:
    def __init__(
        self,
        notes: Optional[Dict[str, Note]] = None,
        resources: Optional[Dict[str, Tuple[ResourceMetadata, bytes]]] = None,
        note_resources: Optional[Dict[str, List[str]]] = None,
    ):
        self.notes = dict(notes or {})
        self.resources = dict(resources or {})
        self.note_resources = dict(note_resources or {})
        self.binary_calls: List[str] = []
        self.note_calls: List[str] = []

    def add_note(self, note: Note, resource_ids: Optional[List[str]] = None) -> None:
        self.notes[note.id] = note
        self.note_resources[note.id] = list(resource_ids or [])

    def add_resource(self, resource_id: str, mime: str, data: bytes, ext: str = "") -> None:
        self.resources[resource_id] = (ResourceMetadata(mime=mime, file_extension=ext), data)

    def get_note(self, note_id: str) -> Note:
        self.note_calls.append(note_id)
        try:
            return self.notes[note_id]
        except KeyError:
            raise NoteNotFound(note_id)

    def list_resources(self, note_id: str) -> List[str]:
        self.get_note(note_id)
        return list(self.note_resources.get(note_id, []))

    def get_metadata(self, resource_id: str) -> ResourceMetadata:
        try:
            return self.resources[resource_id][0]
        except KeyError:
            raise ResourceNotFound(resource_id)

    def get_binary(self, resource_id: str) -> bytes:
        self.binary_calls.append(resource_id)
        try:
            return self.resources[resource_id][1]
        except KeyError:
            raise ResourceNotFound(resource_id)
