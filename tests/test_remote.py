"""Tests for the remote provider stores and the time-boxed remote lookup."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from pydantic import SecretStr

from servicefinder.config import ProviderStoreSettings
from servicefinder.services.exceptions import (
    CollectionEmpty,
    SearchTimeout,
    TransientFetchError,
)
from servicefinder.services.remote import HttpProviderStore, InMemoryProviderStore, RemoteLookup


class FailingStore:
    async def fetch_all_providers(self):
        raise ConnectionError("network unreachable")


@pytest.mark.asyncio
async def test_remote_search_returns_ranked_matches(store):
    lookup = RemoteLookup(store)

    results = await lookup.search("Tutoring ")

    assert len(results) == 1
    assert results[0].name == "Layla Nasser"
    assert results[0].matching_services == ("tutoring",)
    assert store.fetch_count == 1


@pytest.mark.asyncio
async def test_remote_search_blank_term_skips_fetch(store):
    lookup = RemoteLookup(store)

    assert await lookup.search("  ") == []
    assert store.fetch_count == 0


@pytest.mark.asyncio
async def test_empty_collection_is_a_failure():
    lookup = RemoteLookup(InMemoryProviderStore([]))

    with pytest.raises(CollectionEmpty):
        await lookup.search("plumbing")


@pytest.mark.asyncio
async def test_zero_matches_is_not_a_failure(store):
    lookup = RemoteLookup(store)

    assert await lookup.search("catering") == []


@pytest.mark.asyncio
async def test_store_errors_become_transient_fetch_errors():
    lookup = RemoteLookup(FailingStore())

    with pytest.raises(TransientFetchError) as exc_info:
        await lookup.search("plumbing")
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_slow_fetch_times_out_and_late_result_is_discarded(provider_records):
    store = InMemoryProviderStore(provider_records, delay_seconds=0.2)
    lookup = RemoteLookup(store, timeout_seconds=0.05)

    with pytest.raises(SearchTimeout):
        await lookup.search("plumbing")

    # the abandoned fetch still completes quietly in the background
    await asyncio.sleep(0.3)
    assert store.fetch_count == 1


def _store_settings(**overrides) -> ProviderStoreSettings:
    values = {"base_url": "https://store.example/api", "max_attempts": 2}
    values.update(overrides)
    return ProviderStoreSettings(**values)


@pytest.mark.asyncio
async def test_http_store_reads_document_list(provider_records):
    seen: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=provider_records)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings(api_key=SecretStr("token")))
        documents = await store.fetch_all_providers()

    assert [document["id"] for document in documents] == ["p1", "p2", "p3"]
    assert seen[0].url.path == "/api/users"
    assert seen[0].headers["Authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_http_store_accepts_keyed_payloads():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"users": {"u1": {"name": "Omar", "services": ["catering"]}}},
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings())
        documents = await store.fetch_all_providers()

    assert documents == [{"id": "u1", "name": "Omar", "services": ["catering"]}]


@pytest.mark.asyncio
async def test_http_store_retries_server_errors(provider_records):
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(503, text="warming up")
        return httpx.Response(200, json={"documents": provider_records})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings())
        documents = await store.fetch_all_providers()

    assert calls == 2
    assert len(documents) == 3


@pytest.mark.asyncio
async def test_http_store_wraps_status_errors():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="forbidden")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings(max_attempts=1))
        with pytest.raises(TransientFetchError, match="403"):
            await store.fetch_all_providers()


@pytest.mark.asyncio
async def test_http_store_rejects_invalid_json():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>", headers={"Content-Type": "text/html"})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings())
        with pytest.raises(TransientFetchError, match="invalid JSON"):
            await store.fetch_all_providers()


@pytest.mark.asyncio
async def test_http_store_requires_base_url():
    async with httpx.AsyncClient() as client:
        store = HttpProviderStore(client, ProviderStoreSettings())
        with pytest.raises(TransientFetchError):
            await store.fetch_all_providers()


@pytest.mark.asyncio
async def test_http_store_does_not_retry_client_errors():
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(404, text="no such collection")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings(max_attempts=3))
        with pytest.raises(TransientFetchError, match="404"):
            await store.fetch_all_providers()

    assert calls == 1


@pytest.mark.asyncio
async def test_http_store_null_body_means_empty_collection():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=b"null", headers={"Content-Type": "application/json"}
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        store = HttpProviderStore(client, _store_settings())
        assert await store.fetch_all_providers() == []

        with pytest.raises(CollectionEmpty):
            await RemoteLookup(store).search("plumbing")
