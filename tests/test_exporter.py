import json
import os
import tempfile
import unittest
from unittest.mock import Mock

from noteshare.domain import Note
from noteshare.exceptions import (
    BundleReadError,
    NoteNotFound,
    PersistenceError,
    ResourceNotFound,
    UserCancelled,
)
from noteshare.models import ShareSettings
from noteshare.rendering.compiler import MarkdownCompilerAdapter
from noteshare.rendering.exporter import (
    NoteExporter,
    default_filename,
    dump_note_bundle,
    write_html,
)
from noteshare.rendering.gate import extract_payload
from noteshare.rendering.options import RenderConfig
from noteshare.store import NoteBundleStore

from .helpers import IMAGE_ID, MISSING_ID, PNG_BYTES, InMemoryStore

BODY = f"Intro **bold** text\n\n![diagram](:/{IMAGE_ID})\n\nSecret closing line"


class TestNoteExporter(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.store = InMemoryStore()
        self.store.add_note(Note("n1", "Weekly plan", BODY), [IMAGE_ID])
        self.store.add_resource(IMAGE_ID, "image/png", PNG_BYTES, "png")
        self.exporter = NoteExporter(self.store, self.store)

    def _path(self, name="out.html"):
        return os.path.join(self.tmp.name, name)

    def _read(self, path):
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()

    def test_public_share(self):
        result = self.exporter.share("n1", ShareSettings(), self._path())
        page = self._read(result.path)
        self.assertTrue(page.startswith("<!DOCTYPE html>"))
        self.assertIn("<h1>Weekly plan</h1>", page)
        self.assertIn("<strong>bold</strong>", page)
        self.assertIn('<img src="data:image/png;base64,iVBORw==" alt="diagram">', page)
        self.assertNotIn(f":/{IMAGE_ID}", page)
        self.assertEqual(result.share_type, "public")
        self.assertEqual(result.expiration_days, 7)
        self.assertIsNone(result.password)

    def test_encrypted_share_hides_body(self):
        settings = ShareSettings(share_type="encrypted", expiration_days="30")
        result = self.exporter.share("n1", settings, self._path())
        page = self._read(result.path)
        self.assertNotIn("Secret closing line", page)
        self.assertEqual(len(result.password), 8)
        self.assertEqual(result.expiration_days, 30)
        document = extract_payload(page).unlock(result.password)
        self.assertIn("Secret closing line", document)
        self.assertIn("<h1>Weekly plan</h1>", document)

    def test_encrypted_share_with_given_password(self):
        settings = ShareSettings(share_type="encrypted")
        result = self.exporter.share("n1", settings, self._path(), password="hunter22")
        self.assertEqual(result.password, "hunter22")
        self.assertIsNotNone(extract_payload(self._read(result.path)).unlock("hunter22"))

    def test_missing_attachment_does_not_abort(self):
        self.store.add_note(Note("n2", "Broken", f"a [gone](:/{MISSING_ID}) b"), [MISSING_ID])
        result = self.exporter.share("n2", ShareSettings(), self._path())
        page = self._read(result.path)
        self.assertIn("attachment-missing", page)
        self.assertIn("Attachment unavailable: gone", page)

    def test_missing_note(self):
        with self.assertRaises(NoteNotFound):
            self.exporter.share("nope", ShareSettings(), self._path())
        self.assertFalse(os.path.exists(self._path()))

    def test_untitled_note(self):
        self.store.add_note(Note("n3", "", "x"))
        _, page = self.exporter.render_document("n3")
        self.assertIn("<title>Untitled note</title>", page)

    def test_primary_compiler_failure_uses_fallback(self):
        primary = Mock()
        primary.render.side_effect = RuntimeError("renderer crashed")
        exporter = NoteExporter(
            self.store, self.store, compiler=MarkdownCompilerAdapter(primary=primary)
        )
        result = exporter.share("n1", ShareSettings(), self._path())
        page = self._read(result.path)
        self.assertIn("<strong>bold</strong>", page)
        self.assertIn("data:image/png;base64,iVBORw==", page)

    def test_localized_attachment_text(self):
        rid = "e" * 32
        self.store.add_resource(rid, "application/zip", b"PK", "zip")
        self.store.add_note(Note("n4", "Zip", f"[z](:/{rid})"), [rid])
        exporter = NoteExporter(self.store, self.store, RenderConfig(locale="zh_CN"))
        _, page = exporter.render_document("n4")
        self.assertIn("下载附件", page)

    def test_default_path_comes_from_the_rendered_note(self):
        confirm = Mock()
        result = self.exporter.share(
            "n1", ShareSettings(), out_dir=self.tmp.name, confirm_overwrite=confirm
        )
        expected = os.path.join(self.tmp.name, "Weekly plan.html")
        self.assertEqual(result.path, expected)
        confirm.assert_called_once_with(expected)
        self.assertEqual(self.store.note_calls, ["n1"])
        self.assertIn("<h1>Weekly plan</h1>", self._read(expected))

    def test_declined_overwrite_keeps_existing_file(self):
        path = self._path()
        with open(path, "w", encoding="utf-8") as fh:
            fh.write("keep me")
        confirm = Mock(side_effect=UserCancelled(path))
        with self.assertRaises(UserCancelled):
            self.exporter.share("n1", ShareSettings(), path, confirm_overwrite=confirm)
        self.assertEqual(self._read(path), "keep me")

    def test_write_failure_raises_persistence_error(self):
        with self.assertRaises(PersistenceError) as ctx:
            self.exporter.share("n1", ShareSettings(), self.tmp.name)
        self.assertEqual(ctx.exception.path, self.tmp.name)


class TestFileHelpers(unittest.TestCase):
    def test_default_filename(self):
        self.assertEqual(default_filename('a/b:c*?"<>|d'), "a_b_c______d.html")
        self.assertEqual(default_filename("  Plan  "), "Plan.html")
        self.assertEqual(default_filename(""), "untitled.html")
        self.assertEqual(default_filename(None), "untitled.html")

    def test_write_html_creates_parents(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "a", "b", "note.html")
            self.assertEqual(write_html(path, "<p>ü</p>"), path)
            with open(path, "r", encoding="utf-8") as fh:
                self.assertEqual(fh.read(), "<p>ü</p>")


class TestNoteBundle(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.source = InMemoryStore()
        self.source.add_note(Note("n1", "Trip", f"![map](:/{IMAGE_ID})"), [IMAGE_ID, MISSING_ID])
        self.source.add_resource(IMAGE_ID, "image/png", PNG_BYTES, "png")

    def test_dump_and_read_back(self):
        with self.assertLogs("noteshare.rendering.exporter", level="ERROR"):
            summary = dump_note_bundle(self.source, self.source, "n1", self.tmp.name)
        self.assertEqual(summary["resources"], [IMAGE_ID])

        store = NoteBundleStore(self.tmp.name)
        self.assertEqual(store.get_note("n1"), self.source.get_note("n1"))
        self.assertEqual(store.list_resources("n1"), [IMAGE_ID])
        meta = store.get_metadata(IMAGE_ID)
        self.assertEqual((meta.mime, meta.file_extension), ("image/png", "png"))
        self.assertEqual(store.get_binary(IMAGE_ID), PNG_BYTES)

    def test_bundle_feeds_exporter(self):
        with self.assertLogs("noteshare.rendering.exporter", level="ERROR"):
            dump_note_bundle(self.source, self.source, "n1", self.tmp.name)
        store = NoteBundleStore(self.tmp.name)
        _, page = NoteExporter(store, store).render_document("n1")
        self.assertIn('<img src="data:image/png;base64,iVBORw==" alt="map">', page)

    def test_store_errors(self):
        store = NoteBundleStore(self.tmp.name)
        with self.assertRaises(NoteNotFound):
            store.get_note("missing")
        with self.assertRaises(ResourceNotFound):
            store.get_metadata(IMAGE_ID)
        with self.assertRaises(ResourceNotFound):
            store.get_binary(IMAGE_ID)

    def test_unreadable_bundle_files(self):
        root = self.tmp.name
        with open(os.path.join(root, "n1.json"), "w", encoding="utf-8") as fh:
            fh.write("{not json")
        with open(os.path.join(root, f"resource_{IMAGE_ID}.json"), "w", encoding="utf-8") as fh:
            json.dump(["not", "an", "object"], fh)
        store = NoteBundleStore(root)
        with self.assertRaises(BundleReadError) as ctx:
            store.get_note("n1")
        self.assertEqual(ctx.exception.path, os.path.join(root, "n1.json"))
        with self.assertRaises(BundleReadError):
            store.get_metadata(IMAGE_ID)

    def test_resources_discovered_without_listing(self):
        root = self.tmp.name
        with open(os.path.join(root, "n9.json"), "w", encoding="utf-8") as fh:
            json.dump({"id": "n9", "title": "t", "body": ""}, fh)
        for rid in ("b" * 32, "a" * 32):
            with open(os.path.join(root, f"resource_{rid}.json"), "w", encoding="utf-8") as fh:
                json.dump({"id": rid, "mime": "text/plain", "filename": "notes.txt"}, fh)
        store = NoteBundleStore(root)
        self.assertEqual(store.list_resources("n9"), ["a" * 32, "b" * 32])
        self.assertEqual(store.get_metadata("a" * 32).file_extension, "txt")


if __name__ == "__main__":
    unittest.main()
