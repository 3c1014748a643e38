"""
Password-gated wrapper for exported pages.

This is obfuscation, not encryption: the page is base64 encoded and the
password is shipped in plaintext next to it, so anyone reading the file can
recover the note. It only keeps the content off the screen until the right
password is typed.

Client states: Locked (only the prompt is shown) → Unlocked (prompt hidden,
decoded page injected into #content-container). The transition needs an exact
string match; a mismatch shows an alert and stays Locked.
"""

from __future__ import annotations

import base64
import html
import json
import re
import secrets
import string
from dataclasses import dataclass
from typing import Callable, Optional

PASSWORD_ALPHABET = string.ascii_lowercase + string.digits
PASSWORD_LENGTH = 8

_PAYLOAD_RE = re.compile(r'const encodedContent = ("(?:[^"\\]|\\.)*");')
_PASSWORD_RE = re.compile(r'const correctPassword = ("(?:[^"\\]|\\.)*");')

GATE_CSS = """
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, sans-serif;
    line-height: 1.6;
    margin: 0;
    padding: 20px;
    display: flex;
    flex-direction: column;
    min-height: 100vh;
    background-color: #f5f5f5;
}
.login-container {
    max-width: 500px;
    margin: 50px auto;
    padding: 30px;
    background-color: white;
    border-radius: 8px;
    box-shadow: 0 2px 10px rgba(0,0,0,0.1);
    text-align: center;
}
h1 {
    margin-top: 0;
    color: #333;
}
input {
    width: 100%;
    padding: 10px;
    margin: 15px 0;
    border: 1px solid #ccc;
    border-radius: 4px;
    box-sizing: border-box;
}
button {
    background-color: #4a90e2;
    color: white;
    border: none;
    padding: 10px 15px;
    border-radius: 4px;
    cursor: pointer;
    font-size: 16px;
}
button:hover {
    background-color: #357ab8;
}
#content-container {
    display: none;
}
""".strip("\n")


@dataclass(frozen=True)
class EncryptedPayload:
    encoded_document: str
    password: str

    @classmethod
    def encode(cls, document: str, password: str) -> "EncryptedPayload":
        encoded = base64.b64encode(document.encode("utf-8")).decode("ascii")
        return cls(encoded_document=encoded, password=password)

    def decode(self) -> str:
        return base64.b64decode(self.encoded_document).decode("utf-8")

    def unlock(self, attempt: str) -> Optional[str]:
        """Same check as the page script: exact match or nothing."""
        if attempt != self.password:
            return None
        return self.decode()


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def _js_string(value: str) -> str:
    # JSON string literals are valid JS; "</" must not close the script tag.
    return json.dumps(value).replace("</", "<\\/")


def extract_payload(gated_html: str) -> EncryptedPayload:
    payload = _PAYLOAD_RE.search(gated_html)
    password = _PASSWORD_RE.search(gated_html)
    if not payload or not password:
        raise ValueError("Not a password-gated note export")
    return EncryptedPayload(
        encoded_document=json.loads(payload.group(1)),
        password=json.loads(password.group(1)),
    )


def _identity(key: str) -> str:
    return key


class EncryptedExportWrapper:
    def __init__(self, translate: Optional[Callable[[str], str]] = None):
        self.translate = translate or _identity

    def wrap(self, document: str, password: str, title: Optional[str] = None) -> str:
        t = self.translate
        payload = EncryptedPayload.encode(document, password)
        page_title = html.escape(f"{title or t('untitled')} - {t('encrypted')}")
        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<head>\n"
            '<meta charset="UTF-8">\n'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"<title>{page_title}</title>\n"
            f"<style>\n{GATE_CSS}\n</style>\n"
            "</head>\n"
            "<body>\n"
            '<div id="login-container" class="login-container">\n'
            f"<h1>{html.escape(t('encryptedNoteTitle'))}</h1>\n"
            f"<p>{html.escape(t('enterPasswordPrompt'))}</p>\n"
            '<input type="password" id="password" '
            f'placeholder="{html.escape(t("passwordPlaceholder"))}">\n'
            f'<button onclick="decrypt()">{html.escape(t("decrypt"))}</button>\n'
            "</div>\n"
            '<div id="content-container"></div>\n'
            "<script>\n"
            f"const encodedContent = {_js_string(payload.encoded_document)};\n"
            f"const correctPassword = {_js_string(payload.password)};\n"
            f"const wrongPasswordMessage = {_js_string(t('wrongPassword'))};\n"
            f"const decodeFailedMessage = {_js_string(t('decryptFailed'))};\n"
            "function decodeContent(encoded) {\n"
            "    const binary = atob(encoded);\n"
            "    const bytes = Uint8Array.from(binary, function (c) { return c.charCodeAt(0); });\n"
            "    return new TextDecoder('utf-8').decode(bytes);\n"
            "}\n"
            "function decrypt() {\n"
            "    const enteredPassword = document.getElementById('password').value;\n"
            "    if (enteredPassword !== correctPassword) {\n"
            "        alert(wrongPasswordMessage);\n"
            "        return;\n"
            "    }\n"
            "    try {\n"
            "        const container = document.getElementById('content-container');\n"
            "        container.innerHTML = decodeContent(encodedContent);\n"
            "        document.getElementById('login-container').style.display = 'none';\n"
            "        container.style.display = 'block';\n"
            "    } catch (error) {\n"
            "        alert(decodeFailedMessage + ': ' + error);\n"
            "    }\n"
            "}\n"
            "document.getElementById('password').addEventListener('keydown', function (e) {\n"
            "    if (e.key === 'Enter') { decrypt(); }\n"
            "});\n"
            "</script>\n"
            "</body>\n"
            "</html>\n"
        )
