"""Search bar controller: text, suggestions and published search state."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Sequence

from servicefinder.domain.models import SearchOutcome, SearchPhase, SearchResult, SearchState
from servicefinder.logging import logger
from servicefinder.services.catalog import ServiceCatalog
from servicefinder.services.history import SearchHistory
from servicefinder.services.orchestrator import SearchOrchestrator
from servicefinder.services.seeds import POPULAR_SERVICES
from servicefinder.services.suggestions import DEFAULT_MAX_SUGGESTIONS

ResultsCallback = Callable[[list[SearchResult]], None]
StateCallback = Callable[[SearchState], None]
VisibilityCallback = Callable[[bool], None]


class SearchBarController:
    """Turn UI events into ``SearchState`` updates.

    Each event replaces the immutable state once, so the host never sees one
    field lag another. Suggestions are scored synchronously on every change;
    searches go through the orchestrator. Results callbacks fire only after
    the state of the event that produced them is in place.

    ``popular_services`` is display data for the host's quick-search chips;
    a tapped chip comes back through ``quick_search``.
    """

    def __init__(
        self,
        catalog: ServiceCatalog,
        orchestrator: SearchOrchestrator,
        *,
        on_results: ResultsCallback | None = None,
        on_state: StateCallback | None = None,
        on_suggestions_visibility: VisibilityCallback | None = None,
        history: SearchHistory | None = None,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
        popular_services: Sequence[str] = POPULAR_SERVICES,
        initial_query: str = "",
    ) -> None:
        self._catalog = catalog
        self._orchestrator = orchestrator
        self._on_results = on_results
        self._on_state = on_state
        self._on_visibility = on_suggestions_visibility
        self.history = history or SearchHistory()
        self.max_suggestions = max_suggestions
        self.popular_services = tuple(popular_services)

        self._state = SearchState(query=initial_query)
        self._pending: dict[str, Any] | None = None
        self._queued_results: list[list[SearchResult]] = []

        orchestrator.on_dispatch = self._handle_dispatch
        orchestrator.on_outcome = self._handle_outcome

    @property
    def state(self) -> SearchState:
        return self._state

    def change_text(self, text: str) -> None:
        with self._event():
            suggestions = tuple(self._catalog.suggest(text, limit=self.max_suggestions))
            self._update(
                query=text,
                filtered_suggestions=suggestions,
                show_suggestions=self._suggestions_visible(text, suggestions, self._state.is_focused),
            )
            self._orchestrator.schedule(text)

    def select_suggestion(self, suggestion: str) -> None:
        logger.info("suggestion_selected", suggestion=suggestion)
        with self._event():
            self._update(query=suggestion, show_suggestions=False)
            self._orchestrator.dispatch(suggestion)

    def quick_search(self, service: str) -> None:
        """Search a popular-service chip or a recent search."""

        with self._event():
            self._update(query=service, filtered_suggestions=(), show_suggestions=False)
            self._orchestrator.dispatch(service)

    def submit(self) -> None:
        with self._event():
            self._update(show_suggestions=False)
            self._orchestrator.dispatch(self._state.query)

    def clear(self) -> None:
        with self._event():
            self._orchestrator.invalidate()
            self._update(
                query="",
                filtered_suggestions=(),
                show_suggestions=False,
                is_loading=False,
                error=None,
            )
        self._emit_results([])

    def focus(self) -> None:
        with self._event():
            state = self._state
            self._update(
                is_focused=True,
                show_suggestions=self._suggestions_visible(
                    state.query, state.filtered_suggestions, True
                ),
            )

    def blur(self) -> None:
        with self._event():
            self._update(is_focused=False, show_suggestions=False)

    async def drain(self) -> None:
        await self._orchestrator.drain()

    async def aclose(self) -> None:
        await self._orchestrator.aclose()

    def _handle_dispatch(self, term: str, sequence: int) -> None:
        with self._event():
            self._update(is_loading=True, error=None)

    def _handle_outcome(self, outcome: SearchOutcome) -> None:
        with self._event():
            changes: dict[str, Any] = {"is_loading": False, "error": outcome.message}
            if outcome.term:
                changes["last_search_term"] = outcome.term
                if outcome.phase is not SearchPhase.FAILED:
                    self.history.record(outcome.term)
            self._update(**changes)
        self._emit_results(list(outcome.results))

    @staticmethod
    def _suggestions_visible(query: str, suggestions: Sequence[str], focused: bool) -> bool:
        return bool(suggestions) and bool(query.strip()) and focused

    @contextmanager
    def _event(self) -> Iterator[None]:
        # Nested events (synchronous callbacks) fold into the outer one.
        if self._pending is not None:
            yield
            return
        self._pending = {}
        try:
            yield
        finally:
            changes, self._pending = self._pending, None
            self._apply(changes)
            queued, self._queued_results = self._queued_results, []
            for results in queued:
                self._emit_results(results)

    def _update(self, **changes: Any) -> None:
        if self._pending is None:
            self._apply(changes)
        else:
            self._pending.update(changes)

    def _apply(self, changes: dict[str, Any]) -> None:
        if not changes:
            return
        previous = self._state
        state = previous.model_copy(update=changes)
        if state == previous:
            return
        self._state = state
        if self._on_visibility is not None and state.show_suggestions != previous.show_suggestions:
            self._on_visibility(state.show_suggestions)
        if self._on_state is not None:
            self._on_state(state)

    def _emit_results(self, results: list[SearchResult]) -> None:
        # Results raised inside an event wait until its state is applied.
        if self._pending is not None:
            self._queued_results.append(results)
            return
        if self._on_results is not None:
            self._on_results(results)


__all__ = ["SearchBarController"]
