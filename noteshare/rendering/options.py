"""
Render configuration for note → HTML export.

Centralizes behavior flags so callers can tune defaults without touching
core logic. Markdown feature flags are read once from a settings mapping
(keys ``markdown.plugin.<name>``, as stored by the note application) and are
immutable for the lifetime of a renderer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

PLUGIN_SETTING_PREFIX = "markdown.plugin."

# Setting name → MarkdownFeatures attribute
_PLUGIN_NAMES: Dict[str, str] = {
    "softbreaks": "softbreaks",
    "typographer": "typographer",
    "linkify": "linkify",
    "katex": "katex",
    "mermaid": "mermaid",
    "audioPlayer": "audio_player",
    "videoPlayer": "video_player",
    "pdfViewer": "pdf_viewer",
    "mark": "mark",
    "footnote": "footnote",
    "toc": "toc",
    "sub": "sub",
    "sup": "sup",
    "deflist": "deflist",
    "abbr": "abbr",
    "emoji": "emoji",
    "insert": "insert",
    "multitable": "multitable",
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class MarkdownFeatures:
    softbreaks: bool = False
    typographer: bool = False
    linkify: bool = True
    katex: bool = True
    mermaid: bool = True
    audio_player: bool = True
    video_player: bool = True
    pdf_viewer: bool = True
    mark: bool = True
    footnote: bool = True
    toc: bool = True
    sub: bool = False
    sup: bool = False
    deflist: bool = False
    abbr: bool = False
    emoji: bool = False
    insert: bool = False
    multitable: bool = False

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "MarkdownFeatures":
        values: Dict[str, bool] = {}
        for name, attr in _PLUGIN_NAMES.items():
            key = f"{PLUGIN_SETTING_PREFIX}{name}"
            if key in settings:
                values[attr] = _as_bool(settings[key])
        return cls(**values)

    def as_settings(self) -> Dict[str, bool]:
        return {
            f"{PLUGIN_SETTING_PREFIX}{name}": getattr(self, attr)
            for name, attr in _PLUGIN_NAMES.items()
        }

    def enabled(self) -> tuple:
        return tuple(f.name for f in fields(self) if getattr(self, f.name))


@dataclass(frozen=True)
class Theme:
    background_color: str = "#ffffff"
    color: str = "#333333"
    code_bg_color: str = "#f5f5f5"


@dataclass(frozen=True)
class RenderConfig:
    # Logging/debug
    debug: bool = False

    features: MarkdownFeatures = field(default_factory=MarkdownFeatures)
    theme: Theme = field(default_factory=Theme)

    # UI language for attachment fallbacks and the password page
    locale: str = "en"

    # Size of inlined <embed> PDF viewers
    pdf_embed_width: str = "100%"
    pdf_embed_height: str = "600px"

    # Titles go into <title>/<h1> verbatim unless this is set
    escape_title: bool = False

    @classmethod
    def from_settings(
        cls, settings: Optional[Mapping[str, Any]] = None, **overrides: Any
    ) -> "RenderConfig":
        """Build a config from a settings mapping plus environment fallbacks.

        NOTESHARE_LOCALE and NOTESHARE_DEBUG are consulted when the mapping
        does not carry ``locale``/``debug``.
        """
        settings = settings or {}
        locale = settings.get("locale") or os.getenv("NOTESHARE_LOCALE") or "en"
        debug = settings.get("debug", os.getenv("NOTESHARE_DEBUG", ""))
        kwargs: Dict[str, Any] = {
            "features": MarkdownFeatures.from_settings(settings),
            "locale": str(locale),
            "debug": _as_bool(debug),
        }
        kwargs.update(overrides)
        return cls(**kwargs)
