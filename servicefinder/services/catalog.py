"""Known-service catalog and the last-known-good provider snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from servicefinder.domain.models import Provider, normalize_service
from servicefinder.logging import logger
from servicefinder.services.lookup import coerce_providers
from servicefinder.services.seeds import DEFAULT_SERVICES, bundled_providers
from servicefinder.services.suggestions import DEFAULT_MAX_SUGGESTIONS, score_suggestions


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    services: frozenset[str]
    providers: tuple[Provider, ...]
    version: int
    from_fallback: bool


class ServiceCatalog:
    """Service names for type-ahead plus the provider set used offline.

    The catalog is rebuilt from every change-feed snapshot. Each rebuild swaps
    in a new immutable ``CatalogSnapshot``; readers grab ``snapshot`` once per
    operation and never observe a half-built state.
    """

    def __init__(
        self,
        static_services: Iterable[str] = DEFAULT_SERVICES,
        *,
        fallback_providers: Iterable[Provider] | None = None,
    ) -> None:
        self._static_services = tuple(static_services)
        self._fallback_providers = (
            tuple(fallback_providers) if fallback_providers is not None else bundled_providers()
        )
        self._snapshot = self._build(self._fallback_providers, version=0, from_fallback=True)

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def services(self) -> frozenset[str]:
        return self._snapshot.services

    @property
    def providers(self) -> tuple[Provider, ...]:
        return self._snapshot.providers

    def apply_snapshot(self, records: Any) -> CatalogSnapshot:
        """Change-feed listener: rebuild from a full provider collection.

        An empty collection keeps the bundled providers in place so type-ahead
        and offline search still have data to work with.
        """

        providers = coerce_providers(records)
        from_fallback = not providers
        if from_fallback:
            providers = list(self._fallback_providers)
        snapshot = self._build(
            providers, version=self._snapshot.version + 1, from_fallback=from_fallback
        )
        self._snapshot = snapshot
        logger.info(
            "catalog_rebuilt",
            version=snapshot.version,
            providers=len(snapshot.providers),
            services=len(snapshot.services),
            from_fallback=from_fallback,
        )
        return snapshot

    def suggest(self, query: str, *, limit: int = DEFAULT_MAX_SUGGESTIONS) -> list[str]:
        return score_suggestions(query, self._snapshot.services, limit=limit)

    def _build(
        self, providers: Iterable[Provider], *, version: int, from_fallback: bool
    ) -> CatalogSnapshot:
        providers = tuple(providers)
        names = {normalize_service(name) for name in self._static_services}
        for provider in providers:
            names.update(normalize_service(service) for service in provider.services)
        names.discard("")
        return CatalogSnapshot(
            services=frozenset(names),
            providers=providers,
            version=version,
            from_fallback=from_fallback,
        )


__all__ = ["CatalogSnapshot", "ServiceCatalog"]
