"""
Localized UI strings.

Locale files are flat JSON objects (``{"key": "text"}``) named after the
normalized locale, e.g. ``zh_cn.json``. Resolution: requested locale, then the
fallback locale, then an empty table. Missing keys translate to themselves.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Mapping, Optional

from .exceptions import LocaleLoadError
from .fallback import first_successful

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")
FALLBACK_LOCALE = "en"


def normalize_locale(locale: str) -> str:
    return (locale or "").strip().replace("-", "_").lower()


class LocaleStringTable:
    def __init__(
        self,
        locales_dir: Optional[str] = None,
        fallback_locale: str = FALLBACK_LOCALE,
    ):
        self.locales_dir = locales_dir or DEFAULT_LOCALES_DIR
        self.fallback_locale = normalize_locale(fallback_locale)

    def _load(self, locale: str) -> Dict[str, str]:
        if not locale:
            raise LocaleLoadError("empty locale name")
        path = os.path.join(self.locales_dir, f"{locale}.json")
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise LocaleLoadError(f"Failed to load locale file {path}: {e}") from e
        if not isinstance(data, dict):
            raise LocaleLoadError(f"Locale file {path} is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def lookup(self, locale: str) -> Dict[str, str]:
        requested = normalize_locale(locale)
        return first_successful(
            [
                (f"locale {requested!r}", lambda: self._load(requested)),
                (
                    f"fallback locale {self.fallback_locale!r}",
                    lambda: self._load(self.fallback_locale),
                ),
            ],
            default={},
            name="locale",
        )


class Translator:
    """Key → display string; unknown keys are returned unchanged."""

    def __init__(self, strings: Optional[Mapping[str, str]] = None):
        self._strings = dict(strings or {})

    def t(self, key: str) -> str:
        return self._strings.get(key) or key

    __call__ = t


def load_translator(locale: str, locales_dir: Optional[str] = None) -> Translator:
    strings = LocaleStringTable(locales_dir).lookup(locale)
    LOGGER.debug("Loaded %d strings for locale %s", len(strings), locale)
    return Translator(strings)
