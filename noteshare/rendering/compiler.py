"""
Markdown → HTML compilation with a fallback compiler.

`MarkdownItCompiler` is the primary compiler: markdown-it-py configured once
from `MarkdownFeatures` (mdit-py-plugins for footnotes, definition lists, math,
sub/superscript and heading anchors; small local rules for mark/insert,
abbreviations, emoji, table of contents, diagrams and media players).

`PythonMarkdownCompiler` is the plain fallback: Python-Markdown with core
extensions only, no feature flags.

`MarkdownCompilerAdapter` calls the primary in body-only mode and, if it
raises, the fallback on the same input. No retries.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import markdown as pymarkdown
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.token import Token
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.subscript import sub_plugin
from mdit_py_plugins.superscript import superscript_plugin

from ..domain import RenderedFragment
from ..exceptions import CompilerError, FallbackExhausted
from ..fallback import first_successful
from .inliner import MediaCategory
from .options import MarkdownFeatures, RenderConfig, Theme
from .sources import (
    MARKUP_LANGUAGE_HTML,
    MARKUP_LANGUAGE_MARKDOWN,
    FallbackCompiler,
    PrimaryCompiler,
)

LOGGER = logging.getLogger(__name__)

_TOC_MARKERS = ("[toc]", "[[toc]]")
_EMOJI_RE = re.compile(r":([a-z0-9_+-]+):")

EMOJI: Dict[str, str] = {
    "smile": "\U0001F604",
    "smiley": "\U0001F603",
    "grin": "\U0001F601",
    "laughing": "\U0001F606",
    "wink": "\U0001F609",
    "blush": "\U0001F60A",
    "heart": "\u2764\ufe0f",
    "thumbsup": "\U0001F44D",
    "+1": "\U0001F44D",
    "thumbsdown": "\U0001F44E",
    "-1": "\U0001F44E",
    "cry": "\U0001F622",
    "joy": "\U0001F602",
    "thinking": "\U0001F914",
    "tada": "\U0001F389",
    "rocket": "\U0001F680",
    "fire": "\U0001F525",
    "star": "\u2b50",
    "warning": "\u26a0\ufe0f",
    "white_check_mark": "\u2705",
    "x": "\u274c",
    "bulb": "\U0001F4A1",
    "memo": "\U0001F4DD",
    "eyes": "\U0001F440",
}

_AUDIO_EXTS = (".mp3", ".wav", ".ogg", ".oga", ".m4a", ".flac", ".aac")
_VIDEO_EXTS = (".mp4", ".webm", ".ogv", ".mov", ".m4v")

_FEATURE_CSS = {
    "footnote": ".footnotes{font-size:.9em;color:#666}"
    ".footnotes-sep{border:0;border-top:1px solid #ddd}",
    "toc": ".table-of-contents ul{list-style:none;padding-left:0}"
    ".table-of-contents li.toc-level-2{padding-left:1em}"
    ".table-of-contents li.toc-level-3{padding-left:2em}"
    ".table-of-contents li.toc-level-4,.table-of-contents li.toc-level-5,"
    ".table-of-contents li.toc-level-6{padding-left:3em}",
    "mark": "mark{background-color:#f3b717;color:inherit}",
    "katex": ".math.block{overflow-x:auto;text-align:center}",
    "mermaid": "pre.mermaid{background:transparent}",
    "abbr": "abbr[title]{text-decoration:underline dotted;cursor:help}",
}


# ----------------------------- inline rules ----------------------------------


def _double_marker_rule(marker: str, name: str, tag: str) -> Callable:
    """`==x==` / `++x++`: nested inline content, no padding whitespace."""
    delim = marker * 2

    def rule(state, silent: bool) -> bool:
        start = state.pos
        end_limit = state.posMax
        if silent or not state.src.startswith(delim, start):
            return False
        close = state.src.find(delim, start + 2, end_limit)
        if close == -1 or close == start + 2:
            return False
        content = state.src[start + 2 : close]
        if content != content.strip():
            return False
        state.pos = start + 2
        state.posMax = close
        token = state.push(f"{name}_open", tag, 1)
        token.markup = delim
        state.md.inline.tokenize(state)
        token = state.push(f"{name}_close", tag, -1)
        token.markup = delim
        state.pos = close + 2
        state.posMax = end_limit
        return True

    return rule


# ------------------------------ core rules -----------------------------------


def _text_token(content: str, level: int) -> Token:
    return Token("text", "", 0, content=content, level=level)


_ABBR_DEF_RE = re.compile(r"^\*\[([^\]]+)\]:[ \t]*(.+?)[ \t]*$", re.M)


def _abbr_collect(state) -> None:
    defs: Dict[str, str] = {}

    def _take(m: "re.Match[str]") -> str:
        defs[m.group(1)] = m.group(2)
        return ""

    state.src = _ABBR_DEF_RE.sub(_take, state.src)
    if defs:
        state.env["abbreviations"] = defs


def _abbr_replace(state) -> None:
    defs = state.env.get("abbreviations")
    if not defs:
        return
    words = sorted(defs, key=len, reverse=True)
    pattern = re.compile(r"(?<!\w)(" + "|".join(re.escape(w) for w in words) + r")(?!\w)")
    for block in state.tokens:
        if block.type != "inline" or not block.children:
            continue
        children: List[Token] = []
        for child in block.children:
            if child.type != "text" or not pattern.search(child.content):
                children.append(child)
                continue
            pos = 0
            for m in pattern.finditer(child.content):
                if m.start() > pos:
                    children.append(_text_token(child.content[pos : m.start()], child.level))
                opener = Token("abbr_open", "abbr", 1, level=child.level)
                opener.attrSet("title", defs[m.group(1)])
                children.append(opener)
                children.append(_text_token(m.group(1), child.level + 1))
                children.append(Token("abbr_close", "abbr", -1, level=child.level))
                pos = m.end()
            if pos < len(child.content):
                children.append(_text_token(child.content[pos:], child.level))
        block.children = children


def _emoji_replace(state) -> None:
    for block in state.tokens:
        if block.type != "inline" or not block.children:
            continue
        for child in block.children:
            if child.type == "text" and ":" in child.content:
                child.content = _EMOJI_RE.sub(
                    lambda m: EMOJI.get(m.group(1), m.group(0)), child.content
                )


def _heading_text(inline: Token) -> str:
    return "".join(
        c.content for c in (inline.children or []) if c.type in ("text", "code_inline")
    )


def _toc_replace(state) -> None:
    tokens = state.tokens
    marker_at = [
        i
        for i in range(1, len(tokens) - 1)
        if tokens[i].type == "inline"
        and tokens[i - 1].type == "paragraph_open"
        and tokens[i].content.strip().lower() in _TOC_MARKERS
    ]
    if not marker_at:
        return
    items = []
    for i, tok in enumerate(tokens[:-1]):
        if tok.type != "heading_open":
            continue
        anchor = tok.attrGet("id")
        text = escapeHtml(_heading_text(tokens[i + 1]))
        link = f'<a href="#{escapeHtml(str(anchor))}">{text}</a>' if anchor else text
        items.append(f'<li class="toc-level-{tok.tag[1:]}">{link}</li>')
    nav = (
        '<nav class="table-of-contents"><ul>' + "".join(items) + "</ul></nav>\n"
    )
    for i in reversed(marker_at):
        tokens[i - 1 : i + 2] = [Token("html_block", "", 0, content=nav, block=True)]


def _media_kind(href: str) -> Optional[MediaCategory]:
    lowered = href.lower()
    if lowered.startswith("data:"):
        mime = lowered[5:].split(",", 1)[0].split(";", 1)[0]
        return MediaCategory.from_mime(mime)
    path = lowered.split("#", 1)[0].split("?", 1)[0]
    if path.endswith(_AUDIO_EXTS):
        return MediaCategory.AUDIO
    if path.endswith(_VIDEO_EXTS):
        return MediaCategory.VIDEO
    if path.endswith(".pdf"):
        return MediaCategory.PDF
    return None


def _media_players(enabled: Sequence[MediaCategory]) -> Callable:
    """Append an inline player after links that point at audio/video/pdf."""

    def rule(state) -> None:
        for block in state.tokens:
            if block.type != "inline" or not block.children:
                continue
            children: List[Token] = []
            pending: Optional[str] = None
            for child in block.children:
                children.append(child)
                if child.type == "link_open":
                    href = str(child.attrGet("href") or "")
                    kind = _media_kind(href)
                    pending = _player_html(kind, href) if kind in enabled else None
                elif child.type == "link_close" and pending:
                    children.append(
                        Token("html_inline", "", 0, content=pending, level=child.level)
                    )
                    pending = None
            block.children = children

    return rule


def _player_html(kind: Optional[MediaCategory], href: str) -> Optional[str]:
    src = escapeHtml(href)
    if kind is MediaCategory.AUDIO:
        return f'<audio class="media-player media-audio" controls src="{src}"></audio>'
    if kind is MediaCategory.VIDEO:
        return f'<video class="media-player media-video" controls src="{src}"></video>'
    if kind is MediaCategory.PDF:
        return (
            f'<embed class="media-player media-pdf" src="{src}" '
            'type="application/pdf" width="100%" height="600px">'
        )
    return None


# ------------------------------- compilers -----------------------------------


def _theme_css(theme: Any) -> str:
    theme = theme if isinstance(theme, Theme) else Theme()
    return (
        f"body{{background-color:{theme.background_color};color:{theme.color}}}"
        f"pre,code{{background-color:{theme.code_bg_color}}}"
    )


class MarkdownItCompiler(PrimaryCompiler):
    """Feature-aware compiler on top of markdown-it-py."""

    def __init__(self, features: Optional[MarkdownFeatures] = None):
        self.features = features or MarkdownFeatures()
        self._md = self._build(self.features)
        self._md_pdf = self._build(self.features, pdf_viewer=True)

    @staticmethod
    def _build(features: MarkdownFeatures, pdf_viewer: bool = False) -> MarkdownIt:
        f = features
        md = MarkdownIt(
            "commonmark",
            {
                "html": True,
                "breaks": not f.softbreaks,
                "linkify": f.linkify,
                "typographer": f.typographer,
            },
        ).enable(["table", "strikethrough"])
        if f.linkify:
            md.enable("linkify")
        if f.typographer:
            md.enable(["replacements", "smartquotes"])
        if f.katex:
            md.use(dollarmath_plugin)
        if f.footnote:
            md.use(footnote_plugin)
        if f.deflist:
            md.use(deflist_plugin)
        if f.sub:
            md.use(sub_plugin)
        if f.sup:
            md.use(superscript_plugin)
        if f.mark:
            md.inline.ruler.after("emphasis", "mark", _double_marker_rule("=", "mark", "mark"))
        if f.insert:
            md.inline.ruler.after("emphasis", "ins", _double_marker_rule("+", "ins", "ins"))
        if f.abbr:
            md.core.ruler.after("normalize", "abbr_collect", _abbr_collect)
            md.core.ruler.after("inline", "abbr_replace", _abbr_replace)
        if f.emoji:
            md.core.ruler.after("inline", "emoji", _emoji_replace)
        if f.toc:
            md.use(anchors_plugin, min_level=1, max_level=6)
            md.core.ruler.push("toc", _toc_replace)
        players = [
            kind
            for kind, on in (
                (MediaCategory.AUDIO, f.audio_player),
                (MediaCategory.VIDEO, f.video_player),
                (MediaCategory.PDF, pdf_viewer),
            )
            if on
        ]
        if players:
            md.core.ruler.push("media_players", _media_players(players))
        if f.mermaid:
            default_fence = md.renderer.rules["fence"]

            def fence(self, tokens, idx, options, env):
                token = tokens[idx]
                info = token.info.strip().split(maxsplit=1)[0].lower() if token.info else ""
                if info == "mermaid":
                    return f'<pre class="mermaid">{escapeHtml(token.content)}</pre>\n'
                return default_fence(tokens, idx, options, env)

            md.add_render_rule("fence", fence)
        return md

    def style_fragments(self, theme: Any) -> List[str]:
        enabled = set(self.features.enabled())
        out = [_theme_css(theme)]
        out.extend(css for name, css in _FEATURE_CSS.items() if name in enabled)
        return out

    def render(
        self,
        markup_language: int,
        text: str,
        theme: Any,
        options: Mapping[str, Any],
    ) -> RenderedFragment:
        if markup_language == MARKUP_LANGUAGE_HTML:
            body = text
        elif markup_language == MARKUP_LANGUAGE_MARKDOWN:
            md = self._md_pdf if options.get("pdfViewerEnabled") else self._md
            body = md.render(text)
        else:
            raise ValueError(f"Unsupported markup language: {markup_language}")
        assets = []
        if self.features.katex and 'class="math' in body:
            assets.append("katex")
        if self.features.mermaid and 'class="mermaid"' in body:
            assets.append("mermaid")
        if not options.get("bodyOnly", True):
            body = f'<div id="rendered-md">{body}</div>'
        return RenderedFragment(
            html=body,
            style_fragments=tuple(self.style_fragments(theme)),
            plugin_assets=assets,
        )


class PythonMarkdownCompiler(FallbackCompiler):
    """Plain Python-Markdown; knows nothing about attachments or plugins."""

    def __init__(self, extensions: Sequence[str] = ("fenced_code", "tables", "nl2br")):
        self.extensions = list(extensions)

    def render(self, text: str) -> str:
        return pymarkdown.markdown(text, extensions=self.extensions, output_format="html")


class MarkdownCompilerAdapter:
    """Primary compiler with an unconditional fallback to the plain one."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        primary: Optional[PrimaryCompiler] = None,
        fallback: Optional[FallbackCompiler] = None,
    ):
        self.config = config or RenderConfig()
        self.primary = primary or MarkdownItCompiler(self.config.features)
        self.fallback = fallback or PythonMarkdownCompiler()

    @property
    def render_options(self) -> Dict[str, Any]:
        return {"bodyOnly": True, "pdfViewerEnabled": self.config.features.pdf_viewer}

    def _render_primary(self, body: str) -> RenderedFragment:
        result = self.primary.render(
            MARKUP_LANGUAGE_MARKDOWN, body, self.config.theme, self.render_options
        )
        if result is None or result.html is None:
            raise CompilerError("primary compiler returned no html")
        return result

    def _render_fallback(self, body: str) -> RenderedFragment:
        return RenderedFragment(html=self.fallback.render(body))

    def render(self, body: str) -> RenderedFragment:
        try:
            return first_successful(
                [
                    ("primary compiler", lambda: self._render_primary(body)),
                    ("fallback compiler", lambda: self._render_fallback(body)),
                ],
                name="markdown",
            )
        except FallbackExhausted as e:
            raise CompilerError(f"Markdown rendering failed: {e}") from e
