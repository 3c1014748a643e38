"""Value types shared by the sources, the renderer and the exporter."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Note:
    """A stored note as handed over by the note source."""

    id: str
    title: str
    body: str


@dataclass(frozen=True)
class AttachmentReference:
    """One `[label](:/<resource id>)` span found in a note body.

    ``text`` is the exact substring that was matched and is what gets
    replaced later on.
    """

    text: str
    label: str
    resource_id: str
    embedded: bool = False


@dataclass(frozen=True)
class ResourceMetadata:
    mime: str
    file_extension: str = ""


@dataclass(frozen=True)
class ResourceBlob:
    """Attachment content fetched for a single reference."""

    mime: str
    file_extension: str
    data: bytes

    @property
    def extension(self) -> str:
        return self.file_extension or "bin"

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime};base64,{encoded}"


@dataclass(frozen=True)
class RenderedFragment:
    """Output of a markdown compiler: body html plus the css it relies on."""

    html: str
    style_fragments: Tuple[str, ...] = ()
    plugin_assets: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ShareResult:
    path: str
    share_type: str
    expiration_days: int
    password: Optional[str] = None
