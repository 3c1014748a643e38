import unittest

from noteshare.i18n import load_translator
from noteshare.rendering.gate import (
    PASSWORD_ALPHABET,
    EncryptedExportWrapper,
    EncryptedPayload,
    extract_payload,
    generate_password,
)

DOC = "<!DOCTYPE html>\n<html><body><h1>Plan</h1><p>Top secret body</p></body></html>\n"


class TestEncryptedExportWrapper(unittest.TestCase):
    def setUp(self):
        self.wrapper = EncryptedExportWrapper(load_translator("en").t)

    def test_payload_decodes_back_to_document(self):
        gated = self.wrapper.wrap(DOC, "secret123", title="Plan")
        payload = extract_payload(gated)
        self.assertEqual(payload.password, "secret123")
        self.assertEqual(payload.decode(), DOC)
        self.assertEqual(payload.unlock("secret123"), DOC)

    def test_wrong_password_stays_locked(self):
        payload = extract_payload(self.wrapper.wrap(DOC, "secret123"))
        self.assertIsNone(payload.unlock("secret12"))
        self.assertIsNone(payload.unlock(""))

    def test_gated_page_hides_content(self):
        gated = self.wrapper.wrap(DOC, "secret123", title="Plan")
        self.assertTrue(gated.startswith("<!DOCTYPE html>"))
        self.assertIn('<input type="password" id="password"', gated)
        self.assertIn('<div id="content-container"></div>', gated)
        self.assertIn("#content-container {\n    display: none;", gated)
        self.assertNotIn("Top secret body", gated)
        self.assertIn("<title>Plan - Encrypted</title>", gated)
        self.assertIn("Wrong password, please try again.", gated)

    def test_non_ascii_round_trip(self):
        doc = "<p>你好，世界 café</p>"
        self.assertEqual(extract_payload(self.wrapper.wrap(doc, "pw")).decode(), doc)

    def test_password_is_js_safe(self):
        password = 'a"b</script>c'
        gated = self.wrapper.wrap(DOC, password)
        self.assertEqual(gated.count("</script>"), 1)
        self.assertEqual(extract_payload(gated).password, password)

    def test_localized_page(self):
        gated = EncryptedExportWrapper(load_translator("zh-CN").t).wrap(DOC, "pw")
        self.assertIn("解锁", gated)

    def test_extract_rejects_plain_pages(self):
        with self.assertRaises(ValueError):
            extract_payload(DOC)


class TestPasswords(unittest.TestCase):
    def test_generated_password_shape(self):
        password = generate_password()
        self.assertEqual(len(password), 8)
        self.assertTrue(set(password) <= set(PASSWORD_ALPHABET))

    def test_payload_encode(self):
        payload = EncryptedPayload.encode("abc", "pw")
        self.assertEqual(payload.encoded_document, "YWJj")


if __name__ == "__main__":
    unittest.main()
