"""Provider filtering and ranking shared by the remote and local lookups."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from servicefinder.domain.models import Provider, SearchResult, normalize_service
from servicefinder.logging import logger

EXACT_MATCH_WEIGHT = 100.0
MATCH_COUNT_WEIGHT = 10.0


def coerce_providers(records: Any) -> list[Provider]:
    """Turn raw store documents into ``Provider`` models.

    Accepts ``Provider`` instances, a list of documents, a mapping of
    ``{id: document}`` or a bundle shaped like ``{"users": {id: document}}``.
    Documents that cannot be validated are skipped.
    """

    if records is None or isinstance(records, (str, bytes)):
        return []

    if isinstance(records, Mapping):
        users = records.get("users")
        keyed = users if isinstance(users, Mapping) else records
        items: Iterable[tuple[Any, Any]] = keyed.items()
    elif isinstance(records, Iterable):
        items = ((None, record) for record in records)
    else:
        return []

    providers: list[Provider] = []
    for key, record in items:
        if isinstance(record, Provider):
            providers.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.warning("provider_record_skipped", key=key, reason="not_a_mapping")
            continue
        payload = dict(record)
        if key is not None:
            payload.setdefault("id", key)
        try:
            providers.append(Provider.model_validate(payload))
        except ValidationError as exc:
            logger.warning(
                "provider_record_skipped",
                key=key if key is not None else payload.get("id"),
                reason="invalid",
                errors=exc.error_count(),
            )
    return providers


def match_providers(term: str, providers: Iterable[Provider]) -> list[SearchResult]:
    """Keep providers offering ``term`` and rank them.

    Providers with an exact service match sort first, then by number of
    matching services; store order is kept otherwise.
    """

    needle = normalize_service(term)
    if not needle:
        return []

    ranked: list[tuple[bool, int, SearchResult]] = []
    for provider in providers:
        matching = tuple(
            service for service in provider.services if normalize_service(service) == needle
        )
        if not matching:
            continue
        has_exact = any(normalize_service(service) == needle for service in matching)
        score = (EXACT_MATCH_WEIGHT if has_exact else 0.0) + MATCH_COUNT_WEIGHT * len(matching)
        result = SearchResult(
            **provider.model_dump(),
            matching_services=matching,
            relevance_score=score,
        )
        ranked.append((has_exact, len(matching), result))

    ranked.sort(key=lambda item: (not item[0], -item[1]))
    return [result for _, _, result in ranked]


def local_search(term: str, snapshot: Any) -> list[SearchResult]:
    """Search an in-memory provider snapshot; never raises for bad input."""

    if not normalize_service(term) or snapshot is None:
        return []
    results = match_providers(term, coerce_providers(snapshot))
    logger.info("local_search_completed", term=normalize_service(term), results=len(results))
    return results


__all__ = ["coerce_providers", "local_search", "match_providers"]
