"""Recent search terms, newest first."""

from __future__ import annotations

from servicefinder.domain.models import normalize_service


class SearchHistory:
    def __init__(self, max_entries: int = 5) -> None:
        self.max_entries = max_entries
        self._entries: list[str] = []

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def record(self, term: str) -> bool:
        """Remember ``term``; repeated or blank terms are ignored."""

        term = normalize_service(term)
        if not term or self.max_entries <= 0 or term in self._entries:
            return False
        self._entries.insert(0, term)
        del self._entries[self.max_entries :]
        return True

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["SearchHistory"]
