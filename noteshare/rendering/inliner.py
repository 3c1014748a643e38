"""
Inline note attachments as data URIs.

The note body references attachments as ``[label](:/<32 hex id>)`` (or
``![label](...)`` for embeds). Every reference is collected first, then each
one is resolved through the ResourceSource and replaced, by exact substring,
with markup chosen from the attachment's mime type:

  - MediaCategory: closed set of media kinds, classified by mime prefix
  - Renderers: small classes implementing `render(ctx)`
  - Dispatcher: category → renderer, OTHER being the download-link default

A reference whose resource cannot be loaded turns into an inline error marker;
it never aborts the rest of the note.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from tinyhtml import h

from ..domain import AttachmentReference, ResourceBlob
from ..exceptions import ResourceNotFound
from .options import RenderConfig
from .sources import ResourceSource

LOGGER = logging.getLogger(__name__)

RESOURCE_REF_RE = re.compile(r"(!?)\[(.*?)\]\(:/([a-f0-9]{32})\)")


class MediaCategory(Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    PDF = "pdf"
    OTHER = "other"

    @classmethod
    def from_mime(cls, mime: str) -> "MediaCategory":
        # Order matters: prefixes first, then the one exact match.
        m = (mime or "").lower()
        if m.startswith("image/"):
            return cls.IMAGE
        if m.startswith("audio/"):
            return cls.AUDIO
        if m.startswith("video/"):
            return cls.VIDEO
        if m == "application/pdf":
            return cls.PDF
        return cls.OTHER


def find_references(body: str) -> List[AttachmentReference]:
    return [
        AttachmentReference(
            text=m.group(0),
            label=m.group(2),
            resource_id=m.group(3),
            embedded=bool(m.group(1)),
        )
        for m in RESOURCE_REF_RE.finditer(body)
    ]


@dataclass(frozen=True)
class InlineContext:
    ref: AttachmentReference
    blob: ResourceBlob
    data_uri: str
    translate: Callable[[str], str]
    pdf_width: str = "100%"
    pdf_height: str = "600px"


def _attrs(attrs: Dict[str, str]) -> str:
    return " ".join(f'{k}="{html.escape(v)}"' for k, v in attrs.items())


class _Renderer:
    def render(self, ctx: InlineContext) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class _ImageRenderer(_Renderer):
    def render(self, ctx: InlineContext) -> str:
        attr_html = _attrs({"src": ctx.data_uri, "alt": ctx.ref.label})
        return f"<p><img {attr_html}></p>"


class _AudioRenderer(_Renderer):
    def render(self, ctx: InlineContext) -> str:
        attr_html = _attrs({"src": ctx.data_uri})
        fallback = html.escape(ctx.translate("audioNotSupported"))
        return f"<p><audio controls {attr_html}>{fallback}</audio></p>"


class _VideoRenderer(_Renderer):
    def render(self, ctx: InlineContext) -> str:
        source = _attrs({"src": ctx.data_uri, "type": ctx.blob.mime})
        fallback = html.escape(ctx.translate("videoNotSupported"))
        return (
            '<p><video controls width="100%">'
            f"<source {source}>{fallback}</video></p>"
        )


class _PdfRenderer(_Renderer):
    def render(self, ctx: InlineContext) -> str:
        attr_html = _attrs(
            {
                "src": ctx.data_uri,
                "width": ctx.pdf_width,
                "height": ctx.pdf_height,
                "type": "application/pdf",
            }
        )
        return f"<p><embed {attr_html}></p>"


class _DownloadRenderer(_Renderer):
    def render(self, ctx: InlineContext) -> str:
        link = h(
            "a",
            href=ctx.data_uri,
            download=f"attachment.{ctx.blob.extension}",
        )(ctx.translate("downloadAttachment"))
        return h("p")(link).render()


_RENDERERS: Dict[MediaCategory, _Renderer] = {
    MediaCategory.IMAGE: _ImageRenderer(),
    MediaCategory.AUDIO: _AudioRenderer(),
    MediaCategory.VIDEO: _VideoRenderer(),
    MediaCategory.PDF: _PdfRenderer(),
    MediaCategory.OTHER: _DownloadRenderer(),
}


def render_inline(ctx: InlineContext) -> str:
    return _RENDERERS[MediaCategory.from_mime(ctx.blob.mime)].render(ctx)


def _identity(key: str) -> str:
    return key


class ResourceInliner:
    """Replace attachment references in markdown with self-contained markup."""

    def __init__(
        self,
        resources: ResourceSource,
        config: Optional[RenderConfig] = None,
        translate: Optional[Callable[[str], str]] = None,
    ):
        self.resources = resources
        self.config = config or RenderConfig()
        self.translate = translate or _identity

    def fetch(self, resource_id: str) -> ResourceBlob:
        meta = self.resources.get_metadata(resource_id)
        if meta is None or not meta.mime:
            raise ResourceNotFound(resource_id, f"Resource {resource_id} has no mime type")
        data = self.resources.get_binary(resource_id)
        if data is None:
            raise ResourceNotFound(resource_id)
        LOGGER.debug(
            "Resource ID: %s, MIME Type: %s, Extension: %s, bytes=%d",
            resource_id,
            meta.mime,
            meta.file_extension,
            len(data),
        )
        return ResourceBlob(
            mime=meta.mime, file_extension=meta.file_extension or "", data=bytes(data)
        )

    def error_marker(self, ref: AttachmentReference, error: BaseException) -> str:
        text = f"{self.translate('attachmentUnavailable')}: {ref.label or ref.resource_id}"
        return h(
            "p",
            **{
                "class": "attachment-missing",
                "data-resource-id": ref.resource_id,
                "title": str(error),
            },
        )(text).render()

    def markup_for(self, ref: AttachmentReference) -> str:
        try:
            blob = self.fetch(ref.resource_id)
        except Exception as e:
            LOGGER.warning("Could not inline resource %s: %s", ref.resource_id, e)
            return self.error_marker(ref, e)
        ctx = InlineContext(
            ref=ref,
            blob=blob,
            data_uri=blob.data_uri(),
            translate=self.translate,
            pdf_width=self.config.pdf_embed_width,
            pdf_height=self.config.pdf_embed_height,
        )
        return render_inline(ctx)

    def inline(self, body: str) -> str:
        refs = find_references(body)
        if not refs:
            return body
        out = body
        for ref in refs:
            # Emitted markup never contains a complete reference, so the first
            # remaining occurrence of ref.text is the one being processed.
            out = out.replace(ref.text, self.markup_for(ref), 1)
            LOGGER.debug("Replaced resource %s", ref.resource_id)
        LOGGER.info("Inlined %d attachment reference(s)", len(refs))
        return out
