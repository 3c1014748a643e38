"""
Standalone page assembly for rendered notes.

The page carries a fixed baseline stylesheet; compiler/theme CSS is appended
after it so it can refine, but never drop, the baseline rules. Output is a
pure function of the inputs.

Known gap: the title is interpolated verbatim into <title> and <h1>. A title
containing markup characters changes the document. Pass escape_title=True to
opt into escaping.
"""

from __future__ import annotations

import html
from typing import Iterable, Optional

BASELINE_CSS = """
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
    line-height: 1.6;
    color: #333;
    max-width: 800px;
    margin: 0 auto;
    padding: 20px;
}
img {
    max-width: 100%;
}
pre {
    background-color: #f5f5f5;
    padding: 10px;
    border-radius: 5px;
    overflow-x: auto;
}
code {
    font-family: Menlo, Monaco, Consolas, 'Courier New', monospace;
    background-color: #f5f5f5;
    padding: 2px 4px;
    border-radius: 3px;
}
blockquote {
    border-left: 4px solid #ddd;
    padding-left: 15px;
    color: #666;
    margin-left: 0;
}
table {
    border-collapse: collapse;
    width: 100%;
}
table, th, td {
    border: 1px solid #ddd;
}
th, td {
    padding: 8px 12px;
}
th {
    background-color: #f5f5f5;
}
""".strip("\n")


def render_document(
    title: str,
    body_html: str,
    extra_css: Optional[Iterable[str]] = None,
    *,
    escape_title: bool = False,
) -> str:
    shown = html.escape(title) if escape_title else title
    css = BASELINE_CSS
    extra = "\n".join(extra_css or ())
    if extra:
        css = f"{css}\n{extra}"
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{shown}</title>\n"
        f"<style>\n{css}\n</style>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{shown}</h1>\n"
        f"{body_html}\n"
        "</body>\n"
        "</html>\n"
    )


class DocumentAssembler:
    """Class-based interface for page assembly."""

    def __init__(self, escape_title: bool = False):
        self.escape_title = escape_title

    def assemble(
        self, title: str, body_html: str, extra_css: Optional[Iterable[str]] = None
    ) -> str:
        return render_document(
            title, body_html, extra_css, escape_title=self.escape_title
        )
