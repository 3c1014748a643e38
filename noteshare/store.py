"""
Directory-backed note and resource source.

Reads the JSON bundle layout written by `dump_note_bundle`:

    <root>/<note id>.json            {"id", "title", "body", "resources": [...]}
    <root>/resource_<id>.json        {"id", "title", "mime", "filename", "file_extension"}
    <root>/resources/<id>            raw attachment bytes
"""

from __future__ import annotations

import glob
import json
import logging
import os
from typing import Any, Dict, List

from .domain import Note, ResourceMetadata
from .exceptions import BundleReadError, NoteNotFound, ResourceNotFound

LOGGER = logging.getLogger(__name__)

RESOURCE_META_PREFIX = "resource_"
RESOURCES_DIRNAME = "resources"


def note_path(root: str, note_id: str) -> str:
    return os.path.join(root, f"{note_id}.json")


def resource_meta_path(root: str, resource_id: str) -> str:
    return os.path.join(root, f"{RESOURCE_META_PREFIX}{resource_id}.json")


def resource_blob_path(root: str, resource_id: str) -> str:
    return os.path.join(root, RESOURCES_DIRNAME, resource_id)


def _read_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        raise BundleReadError(path, e) from e
    if not isinstance(data, dict):
        raise BundleReadError(path, ValueError("expected a JSON object"))
    return data


class NoteBundleStore:
    def __init__(self, root: str):
        self.root = root

    def get_note(self, note_id: str) -> Note:
        path = note_path(self.root, note_id)
        if not os.path.isfile(path):
            raise NoteNotFound(note_id)
        data = _read_json(path)
        return Note(
            id=str(data.get("id") or note_id),
            title=str(data.get("title") or ""),
            body=str(data.get("body") or ""),
        )

    def list_resources(self, note_id: str) -> List[str]:
        path = note_path(self.root, note_id)
        if not os.path.isfile(path):
            raise NoteNotFound(note_id)
        listed = _read_json(path).get("resources")
        if isinstance(listed, list):
            return [str(r.get("id") if isinstance(r, dict) else r) for r in listed]
        pattern = os.path.join(self.root, f"{RESOURCE_META_PREFIX}*.json")
        return sorted(
            os.path.basename(p)[len(RESOURCE_META_PREFIX) : -len(".json")]
            for p in glob.glob(pattern)
        )

    def get_metadata(self, resource_id: str) -> ResourceMetadata:
        path = resource_meta_path(self.root, resource_id)
        if not os.path.isfile(path):
            raise ResourceNotFound(resource_id)
        data = _read_json(path)
        ext = data.get("file_extension") or ""
        if not ext and data.get("filename"):
            ext = os.path.splitext(str(data["filename"]))[1].lstrip(".")
        return ResourceMetadata(mime=str(data.get("mime") or ""), file_extension=str(ext))

    def get_binary(self, resource_id: str) -> bytes:
        path = resource_blob_path(self.root, resource_id)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except FileNotFoundError as e:
            raise ResourceNotFound(resource_id) from e
