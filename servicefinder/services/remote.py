"""Remote provider store access and the time-boxed remote lookup."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Iterable, Protocol

import httpx

from servicefinder.config import ProviderStoreSettings
from servicefinder.domain.models import Provider, SearchResult, normalize_service
from servicefinder.logging import logger
from servicefinder.services.exceptions import (
    CollectionEmpty,
    SearchError,
    SearchTimeout,
    TransientFetchError,
)
from servicefinder.services.lookup import coerce_providers, match_providers
from servicefinder.utils.retry import retry_async

DEFAULT_REMOTE_TIMEOUT_SECONDS = 10.0


class ProviderStore(Protocol):
    async def fetch_all_providers(self) -> list[dict[str, Any]]:
        """Return every provider document; may raise on connectivity failure."""


class InMemoryProviderStore:
    """Provider store backed by a list held in memory (bundled data, tests)."""

    def __init__(self, records: Iterable[Any] = (), *, delay_seconds: float = 0.0) -> None:
        self._records = list(records)
        self.delay_seconds = delay_seconds
        self.fetch_count = 0

    def replace(self, records: Iterable[Any]) -> None:
        """Swap in a new collection, as a change-feed update would."""

        self._records = list(records)

    async def fetch_all_providers(self) -> list[dict[str, Any]]:
        self.fetch_count += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        documents = []
        for record in self._records:
            if isinstance(record, Provider):
                documents.append(record.model_dump(by_alias=True))
            elif isinstance(record, Mapping):
                documents.append(dict(record))
            else:
                documents.append(record)
        return documents


class HttpProviderStore:
    """Read the full provider collection from a JSON REST endpoint.

    ``GET {base_url}/{collection}`` may answer with a list of documents, an
    object carrying a ``documents`` list, an object keyed by the collection
    name, or a mapping of ``{id: document}``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: ProviderStoreSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or ProviderStoreSettings()

    async def fetch_all_providers(self) -> list[dict[str, Any]]:
        base_url = self._settings.base_url
        if base_url is None:
            raise TransientFetchError("Provider store URL is not configured.")

        url = f"{str(base_url).rstrip('/')}/{self._settings.collection}"
        headers = {}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key.get_secret_value()}"

        async def _request() -> httpx.Response:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=self._settings.request_timeout_seconds,
            )
            if response.is_client_error:
                raise TransientFetchError(
                    f"Provider store request failed ({response.status_code}): {response.text[:200]}"
                )
            response.raise_for_status()
            return response

        try:
            response = await retry_async(
                _request,
                max_attempts=self._settings.max_attempts,
                base_delay=0.25,
                retry_on=(httpx.RequestError, httpx.HTTPStatusError),
                logger=logger,
                operation_name="provider_store_fetch",
            )
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:200] if exc.response is not None else str(exc)
            status_code = exc.response.status_code if exc.response is not None else "unknown"
            raise TransientFetchError(
                f"Provider store request failed ({status_code}): {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransientFetchError(f"Provider store request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransientFetchError("Provider store returned invalid JSON.") from exc
        return self._extract_documents(payload)

    def _extract_documents(self, payload: Any) -> list[dict[str, Any]]:
        # Firebase-style endpoints answer an empty collection with `null`.
        if payload is None:
            return []
        if isinstance(payload, list):
            return payload
        if not isinstance(payload, Mapping):
            raise TransientFetchError("Provider store returned an unexpected payload.")

        for key in ("documents", self._settings.collection):
            nested = payload.get(key)
            if isinstance(nested, list):
                return nested
            if isinstance(nested, Mapping):
                return self._keyed_documents(nested)
        return self._keyed_documents(payload)

    @staticmethod
    def _keyed_documents(mapping: Mapping[str, Any]) -> list[dict[str, Any]]:
        documents = []
        for doc_id, document in mapping.items():
            if isinstance(document, Mapping):
                documents.append({"id": doc_id, **document})
        return documents


class RemoteLookup:
    """Scan the whole remote collection and rank matches client-side."""

    def __init__(
        self,
        store: ProviderStore,
        *,
        timeout_seconds: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
    ) -> None:
        self._store = store
        self.timeout_seconds = timeout_seconds

    async def search(self, term: str) -> list[SearchResult]:
        needle = normalize_service(term)
        if not needle:
            return []

        # The fetch is shielded: a timeout abandons it rather than cancelling it.
        scan = asyncio.ensure_future(self._scan(needle))
        try:
            results = await asyncio.wait_for(asyncio.shield(scan), self.timeout_seconds)
        except asyncio.TimeoutError:
            scan.add_done_callback(_discard_late_scan)
            logger.warning(
                "remote_search_timeout", term=needle, timeout_seconds=self.timeout_seconds
            )
            raise SearchTimeout(
                f"Remote search for {needle!r} exceeded {self.timeout_seconds}s."
            ) from None
        except asyncio.CancelledError:
            scan.add_done_callback(_discard_late_scan)
            raise

        logger.info("remote_search_completed", term=needle, results=len(results))
        return results

    async def _scan(self, needle: str) -> list[SearchResult]:
        try:
            records = await self._store.fetch_all_providers()
        except SearchError:
            raise
        except Exception as exc:
            raise TransientFetchError(f"Provider store read failed: {exc}") from exc

        if not records:
            raise CollectionEmpty("Provider collection has no documents.")
        return match_providers(needle, coerce_providers(records))


def _discard_late_scan(scan: asyncio.Future) -> None:
    if scan.cancelled():
        return
    error = scan.exception()
    if error is not None:
        logger.info("late_remote_result_discarded", error=str(error))
    else:
        logger.info("late_remote_result_discarded", results=len(scan.result()))


__all__ = [
    "DEFAULT_REMOTE_TIMEOUT_SECONDS",
    "HttpProviderStore",
    "InMemoryProviderStore",
    "ProviderStore",
    "RemoteLookup",
]
