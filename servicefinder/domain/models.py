"""Pydantic models shared across lookup/orchestration/controller layers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_SERVICES_PER_PROVIDER = 3


def normalize_service(value: Any) -> str:
    """Lower-case and trim a service name or query; non-strings become empty."""

    if not isinstance(value, str):
        return ""
    return value.strip().lower()


class Provider(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    name: str = ""
    phone: str | None = None
    email: str | None = None
    services: tuple[str, ...] = ()
    profile_views: int = Field(default=0, ge=0, alias="profileViews")
    contacts_received: int = Field(default=0, ge=0, alias="contactsReceived")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("name", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("services", mode="before")
    @classmethod
    def _clean_services(cls, value):
        # Keep display casing; drop non-string and blank entries.
        if not isinstance(value, (list, tuple)):
            return ()
        cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return tuple(cleaned[:MAX_SERVICES_PER_PROVIDER])

    @field_validator("profile_views", "contacts_received", mode="before")
    @classmethod
    def _missing_counter_to_zero(cls, value):
        return 0 if value is None else value


class SearchResult(Provider):
    matching_services: tuple[str, ...] = Field(default=(), alias="matchingServices")
    relevance_score: float = Field(default=0.0, alias="relevanceScore")


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    service: str
    score: float


class SearchPhase(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    IN_FLIGHT = "in_flight"
    RESOLVED = "resolved"
    FALLEN_BACK = "fallen_back"
    FAILED = "failed"


class SearchOutcome(BaseModel):
    """Result of one search session, ready to be applied to UI state."""

    model_config = ConfigDict(frozen=True)

    term: str
    sequence: int
    phase: SearchPhase
    results: tuple[SearchResult, ...] = ()
    message: str | None = None


class SearchState(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    query: str = ""
    filtered_suggestions: tuple[str, ...] = Field(default=(), alias="filteredSuggestions")
    show_suggestions: bool = Field(default=False, alias="showSuggestions")
    is_focused: bool = Field(default=False, alias="isFocused")
    is_loading: bool = Field(default=False, alias="isLoading")
    error: str | None = None
    last_search_term: str | None = Field(default=None, alias="lastSearchTerm")


__all__ = [
    "MAX_SERVICES_PER_PROVIDER",
    "Provider",
    "SearchOutcome",
    "SearchPhase",
    "SearchResult",
    "SearchState",
    "Suggestion",
    "normalize_service",
]
