"""Type-ahead scoring of known service names against a partial query."""

from __future__ import annotations

from typing import Iterable

from servicefinder.domain.models import Suggestion, normalize_service

DEFAULT_MAX_SUGGESTIONS = 8

EXACT_SCORE = 100.0
PREFIX_SCORE = 80.0
SUBSTRING_SCORE = 60.0
WORD_OVERLAP_WEIGHT = 40.0
LENGTH_BONUS_CEILING = 20


def score_candidate(query: str, candidate: str) -> float:
    """Score one normalized candidate against a normalized, non-blank query."""

    if candidate == query:
        score = EXACT_SCORE
    elif candidate.startswith(query):
        score = PREFIX_SCORE
    elif query in candidate:
        score = SUBSTRING_SCORE
    else:
        words = [word for word in query.split(" ") if word]
        if not words:
            return 0.0
        found = sum(1 for word in words if word in candidate)
        score = found / len(words) * WORD_OVERLAP_WEIGHT

    if score > 0:
        score += max(0, LENGTH_BONUS_CEILING - len(candidate))
    return score


def rank_suggestions(
    query: str,
    catalog: Iterable[str],
    *,
    limit: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[Suggestion]:
    """Return scored suggestions, best first.

    Ties go to the shorter candidate, then alphabetical order, so the result
    does not depend on catalog iteration order.
    """

    normalized_query = normalize_service(query)
    if not normalized_query or limit <= 0:
        return []

    candidates = {normalize_service(item) for item in catalog}
    candidates.discard("")

    scored = []
    for candidate in candidates:
        score = score_candidate(normalized_query, candidate)
        if score > 0:
            scored.append(Suggestion(service=candidate, score=score))

    scored.sort(key=lambda item: (-item.score, len(item.service), item.service))
    return scored[:limit]


def score_suggestions(
    query: str,
    catalog: Iterable[str],
    *,
    limit: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[str]:
    return [item.service for item in rank_suggestions(query, catalog, limit=limit)]


__all__ = [
    "DEFAULT_MAX_SUGGESTIONS",
    "rank_suggestions",
    "score_candidate",
    "score_suggestions",
]
