"""Application entrypoint: wire the search stack and run one search."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Sequence

import httpx

from servicefinder.config import SearchSettings, get_settings
from servicefinder.i18n import I18nService
from servicefinder.logging import configure_logging, logger
from servicefinder.services.catalog import ServiceCatalog
from servicefinder.services.exceptions import SearchError
from servicefinder.services.history import SearchHistory
from servicefinder.services.orchestrator import SearchOrchestrator
from servicefinder.services.remote import (
    HttpProviderStore,
    InMemoryProviderStore,
    ProviderStore,
    RemoteLookup,
)
from servicefinder.services.seeds import FALLBACK_PROVIDER_RECORDS
from servicefinder.ui.search_bar import ResultsCallback, SearchBarController, StateCallback


def build_search_bar(
    settings: SearchSettings,
    catalog: ServiceCatalog,
    store: ProviderStore,
    *,
    on_results: ResultsCallback | None = None,
    on_state: StateCallback | None = None,
) -> SearchBarController:
    tuning = settings.search
    orchestrator = SearchOrchestrator(
        RemoteLookup(store, timeout_seconds=tuning.remote_timeout_seconds),
        catalog,
        messages=I18nService(default_locale=settings.default_language),
        debounce_seconds=tuning.debounce_seconds,
    )
    return SearchBarController(
        catalog,
        orchestrator,
        on_results=on_results,
        on_state=on_state,
        history=SearchHistory(tuning.history_size),
        max_suggestions=tuning.max_suggestions,
    )


async def refresh_catalog(catalog: ServiceCatalog, store: ProviderStore) -> None:
    """Feed the catalog one full-collection snapshot."""

    try:
        records = await store.fetch_all_providers()
    except SearchError as exc:
        logger.warning("catalog_snapshot_unavailable", error=str(exc))
        return
    catalog.apply_snapshot(records)


async def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    settings = get_settings()
    query = " ".join(argv if argv is not None else sys.argv[1:])
    published = []

    async with httpx.AsyncClient() as client:
        if settings.store.base_url is not None:
            store: ProviderStore = HttpProviderStore(client, settings.store)
        else:
            store = InMemoryProviderStore(FALLBACK_PROVIDER_RECORDS)

        catalog = ServiceCatalog()
        await refresh_catalog(catalog, store)
        controller = build_search_bar(settings, catalog, store, on_results=published.append)

        logger.info("search_starting", environment=settings.environment, query=query)
        controller.quick_search(query)
        await controller.drain()

    results = published[-1] if published else []
    print(
        json.dumps(
            {
                "query": query,
                "error": controller.state.error,
                "suggestions": catalog.suggest(query, limit=settings.search.max_suggestions),
                "results": [result.model_dump(mode="json", by_alias=True) for result in results],
            },
            ensure_ascii=False,
        )
    )
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
