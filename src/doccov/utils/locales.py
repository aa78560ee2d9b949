"""Localized labels for coverage reports."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

I18N_DIR = Path(__file__).resolve().parent.parent / "i18n"

DEFAULT_LOCALE = "en"


def available_locales() -> list[str]:
    """Return the locale codes with a bundled catalog."""
    return sorted(p.stem for p in I18N_DIR.glob("*.json"))


class LocalesHelper:
    """Translate report labels using a bundled JSON catalog.

    The catalog is read lazily on first lookup.  Unknown locales fall back
    to ``DEFAULT_LOCALE``.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE, *, i18n_dir: Path = I18N_DIR) -> None:
        self._locale = locale
        self._i18n_dir = i18n_dir
        self._catalog: dict[str, str] | None = None

    @property
    def locale(self) -> str:
        return self._locale

    def _load(self) -> dict[str, str]:
        path = self._i18n_dir / f"{self._locale}.json"
        if not path.is_file():
            logger.warning("No catalog for locale %s, using %s", self._locale, DEFAULT_LOCALE)
            path = self._i18n_dir / f"{DEFAULT_LOCALE}.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        return {str(k).lower(): str(v) for k, v in data.items()}

    def translate(self, text: str) -> str:
        """Return the label for ``text``; the key itself when it is not translated."""
        if not text:
            return ""
        if self._catalog is None:
            self._catalog = self._load()
        return self._catalog.get(text.lower(), text)
