"""
Exporter helpers for note → standalone HTML.

These are thin, testable wrappers around inlining, compiling, page assembly,
the password gate and file I/O. Each call works on its own copy of the note
body; stages run strictly one after another.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Callable, Dict, Optional, Tuple

from ..domain import Note, ShareResult
from ..exceptions import PersistenceError
from ..i18n import Translator, load_translator
from ..models import ShareSettings
from ..store import (
    RESOURCES_DIRNAME,
    note_path,
    resource_blob_path,
    resource_meta_path,
)
from .compiler import MarkdownCompilerAdapter
from .document import DocumentAssembler
from .gate import EncryptedExportWrapper, generate_password
from .inliner import ResourceInliner
from .options import RenderConfig
from .sources import NoteSource, ResourceSource

LOGGER = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')


def default_filename(title: Optional[str]) -> str:
    name = _UNSAFE_FILENAME_RE.sub("_", (title or "").strip()) or "untitled"
    return f"{name}.html"


def write_html(path: str, page: str) -> str:
    try:
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(page)
    except OSError as e:
        raise PersistenceError(path, e) from e
    return path


class NoteExporter:
    def __init__(
        self,
        notes: NoteSource,
        resources: ResourceSource,
        config: Optional[RenderConfig] = None,
        translator: Optional[Translator] = None,
        compiler: Optional[MarkdownCompilerAdapter] = None,
    ):
        self.notes = notes
        self.config = config or RenderConfig()
        self.translator = translator or load_translator(self.config.locale)
        t = self.translator.t
        self.inliner = ResourceInliner(resources, self.config, t)
        self.compiler = compiler or MarkdownCompilerAdapter(self.config)
        self.assembler = DocumentAssembler(escape_title=self.config.escape_title)
        self.gate = EncryptedExportWrapper(t)

    def title_for(self, note: Note) -> str:
        return note.title or self.translator.t("untitled")

    def render_document(self, note_id: str) -> Tuple[Note, str]:
        note = self.notes.get_note(note_id)
        LOGGER.info("Rendering note %s (%s)", note.id, note.title)
        body = self.inliner.inline(note.body)
        fragment = self.compiler.render(body)
        page = self.assembler.assemble(
            self.title_for(note), fragment.html, fragment.style_fragments
        )
        return note, page

    def share(
        self,
        note_id: str,
        settings: ShareSettings,
        output_path: Optional[str] = None,
        *,
        password: Optional[str] = None,
        out_dir: Optional[str] = None,
        confirm_overwrite: Optional[Callable[[str], None]] = None,
    ) -> ShareResult:
        """Render, optionally gate, and write one note.

        Without ``output_path`` the file is named after the note title, inside
        ``out_dir`` (default: the working directory). ``confirm_overwrite`` is
        called with the final path before anything is written and may raise
        ``UserCancelled``.
        """
        note, page = self.render_document(note_id)
        used_password = None
        if settings.encrypted:
            used_password = password or generate_password()
            page = self.gate.wrap(page, used_password, title=self.title_for(note))
        path = output_path or os.path.join(out_dir or "", default_filename(note.title))
        if confirm_overwrite is not None:
            confirm_overwrite(path)
        write_html(path, page)
        LOGGER.info(
            "Note %s shared as %s (%d days) to %s",
            note.id,
            settings.share_type,
            settings.expiration_days,
            path,
        )
        return ShareResult(
            path=path,
            share_type=settings.share_type,
            expiration_days=settings.expiration_days,
            password=used_password,
        )


def dump_note_bundle(
    notes: NoteSource,
    resources: ResourceSource,
    note_id: str,
    out_dir: str,
) -> Dict[str, object]:
    """Write a note and its resources in the layout `NoteBundleStore` reads.

    Resources that fail to export are logged and left out.
    """
    note = notes.get_note(note_id)
    os.makedirs(os.path.join(out_dir, RESOURCES_DIRNAME), exist_ok=True)
    exported = []
    for rid in notes.list_resources(note_id):
        try:
            meta = resources.get_metadata(rid)
            data = resources.get_binary(rid)
            with open(resource_meta_path(out_dir, rid), "w", encoding="utf-8") as f:
                json.dump(
                    {"id": rid, "mime": meta.mime, "file_extension": meta.file_extension},
                    f,
                    indent=2,
                )
            with open(resource_blob_path(out_dir, rid), "wb") as f:
                f.write(data)
        except Exception as e:
            LOGGER.error("Error exporting resource %s: %s", rid, e)
            continue
        exported.append(rid)
        LOGGER.debug("Exported resource: %s", rid)
    with open(note_path(out_dir, note.id), "w", encoding="utf-8") as f:
        json.dump(
            {"id": note.id, "title": note.title, "body": note.body, "resources": exported},
            f,
            indent=2,
            ensure_ascii=False,
        )
    LOGGER.info("Note %s exported to %s", note.id, out_dir)
    return {"note": note, "resources": exported, "output_path": out_dir}
