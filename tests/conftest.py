"""Shared fixtures: provider documents, stores and a wired search stack."""

from __future__ import annotations

import asyncio

import pytest

from servicefinder.services.catalog import ServiceCatalog
from servicefinder.services.orchestrator import SearchOrchestrator
from servicefinder.services.remote import InMemoryProviderStore, RemoteLookup


class GatedStore:
    """Provider store whose reads block until the test releases them, in any order."""

    def __init__(self, records) -> None:
        self.records = list(records)
        self.gates: list[asyncio.Event] = []

    async def fetch_all_providers(self):
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return list(self.records)


async def wait_until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def provider_records() -> list[dict]:
    return [
        {
            "id": "p1",
            "name": "Layla Nasser",
            "phone": "+15550001",
            "services": ["tutoring", "translation"],
            "profileViews": 4,
            "contactsReceived": 1,
        },
        {
            "id": "p2",
            "name": "Yusuf Karim",
            "services": ["Plumbing", "electrical"],
        },
        {
            "id": "p3",
            "name": "Samir Haddad",
            "services": ["plumbing repair", "plumbing", " PLUMBING "],
        },
    ]


@pytest.fixture
def catalog() -> ServiceCatalog:
    return ServiceCatalog()


@pytest.fixture
def store(provider_records) -> InMemoryProviderStore:
    return InMemoryProviderStore(provider_records)


@pytest.fixture
def published() -> list:
    return []


@pytest.fixture
def orchestrator(store, catalog, published) -> SearchOrchestrator:
    return SearchOrchestrator(
        RemoteLookup(store, timeout_seconds=1.0),
        catalog,
        debounce_seconds=0.02,
        on_outcome=published.append,
    )
