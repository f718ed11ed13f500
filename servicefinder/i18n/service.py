"""File-based message catalog for user-visible search feedback."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator


class I18nService:
    """Look up message templates by key.

    Locale tags are tried from most to least specific (``ar-EG`` then ``ar``),
    then the default locale; an unknown key renders as the key itself.
    """

    def __init__(self, *, locales_path: str | Path | None = None, default_locale: str = "en") -> None:
        self.locales_path = Path(locales_path or Path(__file__).with_name("locales"))
        self.default_locale = default_locale.lower()

    def gettext(self, key: str, *, locale: str | None = None, **kwargs: Any) -> str:
        text = None
        for candidate in self._candidates(locale):
            text = self._load_locale(candidate).get(key)
            if text is not None:
                break
        if text is None:
            text = key
        return text.format(**kwargs) if kwargs else text

    def _candidates(self, locale: str | None) -> Iterator[str]:
        seen: set[str] = set()
        tag = (locale or self.default_locale).replace("_", "-").lower()
        for candidate in (tag, tag.split("-", 1)[0], self.default_locale):
            if candidate and candidate not in seen:
                seen.add(candidate)
                yield candidate

    @lru_cache(maxsize=16)
    def _load_locale(self, locale: str) -> dict[str, str]:
        file_path = self.locales_path / f"{locale}.json"
        if not file_path.exists():
            return {}
        with file_path.open("r", encoding="utf-8") as fp:
            return json.load(fp)


__all__ = ["I18nService"]
