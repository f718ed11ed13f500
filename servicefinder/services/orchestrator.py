"""Debounced, stale-safe search sessions with local fallback."""

from __future__ import annotations

import asyncio
from typing import Callable

from servicefinder.domain.models import SearchOutcome, SearchPhase, normalize_service
from servicefinder.i18n import I18nService
from servicefinder.logging import logger
from servicefinder.services.catalog import ServiceCatalog
from servicefinder.services.exceptions import SearchError
from servicefinder.services.lookup import local_search
from servicefinder.services.remote import RemoteLookup

DEFAULT_DEBOUNCE_SECONDS = 0.3

DispatchCallback = Callable[[str, int], None]
OutcomeCallback = Callable[[SearchOutcome], None]


class SearchOrchestrator:
    """Run search sessions and publish only the newest one.

    Every dispatch takes the next sequence number and becomes the
    authoritative session. Sessions are never aborted; when an older one
    settles after a newer dispatch its outcome is dropped instead of
    published.

    ``on_dispatch(term, sequence)`` fires when a session goes in flight and
    ``on_outcome(outcome)`` when the authoritative session settles.
    """

    def __init__(
        self,
        remote: RemoteLookup,
        catalog: ServiceCatalog,
        *,
        messages: I18nService | None = None,
        locale: str | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_dispatch: DispatchCallback | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        self._remote = remote
        self._catalog = catalog
        self._messages = messages or I18nService()
        self.locale = locale
        self.debounce_seconds = debounce_seconds
        self.on_dispatch = on_dispatch
        self.on_outcome = on_outcome

        self._sequence = 0
        self._authoritative_term: str | None = None
        self._phase = SearchPhase.IDLE
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._current_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def phase(self) -> SearchPhase:
        return self._phase

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def authoritative_term(self) -> str | None:
        return self._authoritative_term

    def schedule(self, query: str) -> None:
        """Debounced dispatch: only the last query of a burst is searched."""

        self._cancel_debounce()
        if not normalize_service(query):
            self.dispatch(query)
            return
        self._phase = SearchPhase.DEBOUNCING
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self.debounce_seconds, self._fire_debounced, query)

    def dispatch(self, query: str) -> asyncio.Task | None:
        """Start a session for ``query`` right away.

        A blank query resolves synchronously with no results and returns
        ``None``. Re-dispatching the term already in flight joins that session.
        """

        self._cancel_debounce()
        term = normalize_service(query)
        if not term:
            self._invalidate()
            self._phase = SearchPhase.RESOLVED
            self._publish(SearchOutcome(term="", sequence=self._sequence, phase=SearchPhase.RESOLVED))
            return None

        current = self._current_task
        if term == self._authoritative_term and current is not None and not current.done():
            logger.debug("search_coalesced", term=term, sequence=self._sequence)
            return current

        self._sequence += 1
        sequence = self._sequence
        self._authoritative_term = term
        self._phase = SearchPhase.IN_FLIGHT
        logger.info("search_dispatched", term=term, sequence=sequence)
        if self.on_dispatch is not None:
            self.on_dispatch(term, sequence)

        task = asyncio.get_running_loop().create_task(self._run(term, sequence))
        self._current_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def search(self, query: str) -> SearchOutcome:
        """Dispatch ``query`` and wait for its session to settle.

        The outcome is returned even if a newer dispatch made it stale; compare
        ``outcome.sequence`` with ``sequence`` to tell.
        """

        task = self.dispatch(query)
        if task is None:
            return SearchOutcome(term="", sequence=self._sequence, phase=SearchPhase.RESOLVED)
        return await task

    def invalidate(self) -> None:
        """Drop any pending debounce and make in-flight sessions stale."""

        self._cancel_debounce()
        self._invalidate()
        self._phase = SearchPhase.IDLE

    async def drain(self) -> None:
        """Wait until no debounce timer or session is outstanding."""

        loop = asyncio.get_running_loop()
        while self._debounce_handle is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(max(0.0, self._debounce_handle.when() - loop.time()))

    async def aclose(self) -> None:
        self._cancel_debounce()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _fire_debounced(self, query: str) -> None:
        self._debounce_handle = None
        self.dispatch(query)

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _invalidate(self) -> None:
        self._sequence += 1
        self._authoritative_term = None
        self._current_task = None

    async def _run(self, term: str, sequence: int) -> SearchOutcome:
        try:
            outcome = await self._resolve(term, sequence)
        except Exception:
            logger.exception("search_failed", term=term, sequence=sequence)
            outcome = SearchOutcome(
                term=term,
                sequence=sequence,
                phase=SearchPhase.FAILED,
                message=self._message("search.failed"),
            )

        if sequence != self._sequence:
            logger.info(
                "stale_search_dropped",
                term=term,
                sequence=sequence,
                current_sequence=self._sequence,
            )
            return outcome

        # A pending debounce keeps the session in DEBOUNCING.
        if self._debounce_handle is None:
            self._phase = outcome.phase
        self._publish(outcome)
        return outcome

    async def _resolve(self, term: str, sequence: int) -> SearchOutcome:
        providers = self._catalog.snapshot.providers
        try:
            results = await self._remote.search(term)
        except SearchError as exc:
            results = local_search(term, providers)
            logger.warning(
                "search_fallback_used",
                term=term,
                reason=exc.__class__.__name__,
                error=str(exc),
                results=len(results),
            )
            return SearchOutcome(
                term=term,
                sequence=sequence,
                phase=SearchPhase.FALLEN_BACK,
                results=tuple(results),
                message=self._message("search.fallback_results", count=len(results), term=term),
            )

        if not results:
            results = local_search(term, providers)
        if not results:
            return SearchOutcome(
                term=term,
                sequence=sequence,
                phase=SearchPhase.RESOLVED,
                message=self._message("search.no_matches", term=term),
            )
        return SearchOutcome(
            term=term,
            sequence=sequence,
            phase=SearchPhase.RESOLVED,
            results=tuple(results),
        )

    def _publish(self, outcome: SearchOutcome) -> None:
        if self.on_outcome is not None:
            self.on_outcome(outcome)

    def _message(self, key: str, **kwargs) -> str:
        return self._messages.gettext(key, locale=self.locale, **kwargs)


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "SearchOrchestrator"]
