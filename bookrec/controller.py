"""
Recommendation Session Controller

Keeps the published recommendation list in step with the user's library.
Subscribes to the library and catalog providers; on every change it compares a
fully serialized library snapshot plus the catalog version with the last ones it
computed from and, when they differ, re-derives the valid interaction set, runs
the pipeline and publishes the result to output subscribers. The catalog itself
is fetched only when its version moves, so library edits never copy it.

State machine:
    IDLE (no valid interactions) -> COMPUTING -> PUBLISHED(list)
    COMPUTING -> PUBLISHED([]) when the catalog is empty or a pass fails

Lifecycle: start() clears any cached state and computes once, every input change
recomputes, dispose() unsubscribes and clears. Nothing is persisted, so a new
controller always starts from an empty, uncached state.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .models.config import RecommendationConfig, resolve_config
from .models.scoring import ScoredBook
from .models.session import RecommendationSnapshot, SessionState
from .services.providers import CatalogProvider, LibraryProvider, Unsubscribe
from .stages.orchestrator import create_recommendation_batch, select_valid_interacted_books
from .utils.normalize import interaction_hash, serialize_snapshot

logger = logging.getLogger(__name__)

OutputListener = Callable[[Tuple[ScoredBook, ...]], None]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecommendationController:
    """Owns the recommendation state for one user session."""

    def __init__(
        self,
        library: LibraryProvider,
        catalog: CatalogProvider,
        config: Optional[RecommendationConfig] = None,
        rng: Optional[np.random.Generator] = None,
        batch_size: Optional[int] = None,
    ):
        self.config = resolve_config(config)
        self.batch_size = batch_size if batch_size is not None else self.config.batch_size
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        self._library = library
        self._catalog = catalog
        self._rng = rng if rng is not None else np.random.default_rng()

        self._state = SessionState.IDLE
        self._snapshot = RecommendationSnapshot()
        self._last_input_key: Optional[str] = None
        self._catalog_version: Optional[int] = None
        self._catalog_books: List[Dict[str, Any]] = []
        self._input_unsubscribers: List[Unsubscribe] = []
        self._output_listeners: List[OutputListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "RecommendationController":
        """Clear cached state, subscribe to both providers, and compute once."""
        self.invalidate()
        if not self._input_unsubscribers:
            self._input_unsubscribers = [
                self._library.subscribe(self._on_input_change),
                self._catalog.subscribe(self._on_input_change),
            ]
        self.refresh(force=True)
        return self

    def invalidate(self) -> None:
        """Drop the cached snapshot and published list; the next refresh recomputes."""
        self._last_input_key = None
        self._catalog_version = None
        self._catalog_books = []
        self._snapshot = RecommendationSnapshot()
        self._state = SessionState.IDLE

    def dispose(self) -> None:
        """Unsubscribe from providers and output listeners, and clear state."""
        for unsubscribe in self._input_unsubscribers:
            unsubscribe()
        self._input_unsubscribers = []
        self._output_listeners = []
        self.invalidate()

    @property
    def is_started(self) -> bool:
        return bool(self._input_unsubscribers)

    def __enter__(self) -> "RecommendationController":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def snapshot(self) -> RecommendationSnapshot:
        return self._snapshot

    @property
    def recommendations(self) -> Tuple[ScoredBook, ...]:
        return self._snapshot.books

    @property
    def interaction_hash(self) -> str:
        """Diagnostic fingerprint of the interaction set behind the current list."""
        return self._snapshot.interaction_hash

    def subscribe(self, listener: OutputListener) -> Unsubscribe:
        """Call listener with every newly published list; returns a callable that removes it."""
        self._output_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._output_listeners:
                self._output_listeners.remove(listener)

        return unsubscribe

    def set_batch_size(self, batch_size: int) -> Tuple[ScoredBook, ...]:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        return self.refresh()

    # ------------------------------------------------------------------
    # Recomputation
    # ------------------------------------------------------------------

    def _on_input_change(self) -> None:
        self.refresh()

    def refresh(self, force: bool = False) -> Tuple[ScoredBook, ...]:
        """
        Recompute when the inputs changed (or always, with force).

        Never raises for data problems: a failed pass is logged and publishes an
        empty list so stale reasons are not shown against a new library.
        """
        previous_hash = self._snapshot.interaction_hash
        try:
            library = self._library.get_library() or {}
            catalog_version = self._catalog.version

            input_key = serialize_snapshot(
                {"library": library, "catalog_version": catalog_version, "batch_size": self.batch_size}
            )
            if not force and input_key == self._last_input_key:
                logger.debug("[recs] inputs unchanged, keeping %d recommendations", len(self.recommendations))
                return self.recommendations
            self._last_input_key = input_key
            self._state = SessionState.COMPUTING

            catalog = self._current_catalog(catalog_version, force)

            interacted = select_valid_interacted_books(library, self.config)
            digest = interaction_hash(interacted)
            if digest == previous_hash and previous_hash:
                logger.debug("[recs] interaction hash unchanged but inputs differ; recomputing")

            if not interacted:
                logger.info("[recs] no valid interactions; idle")
                self._publish(
                    RecommendationSnapshot(interaction_hash=digest, computed_at=_now()),
                    SessionState.IDLE,
                )
                return self.recommendations

            if not catalog:
                logger.info("[recs] catalog empty; publishing no recommendations")
                self._publish(
                    RecommendationSnapshot(
                        interaction_hash=digest,
                        valid_interactions=len(interacted),
                        computed_at=_now(),
                    ),
                    SessionState.PUBLISHED,
                )
                return self.recommendations

            batch, valid_count, ranked_count = create_recommendation_batch(
                library, catalog, self.config, rng=self._rng, batch_size=self.batch_size
            )
            logger.info(
                "[recs] %d valid interactions, %d candidates ranked, published %d (hash=%s)",
                valid_count, ranked_count, len(batch), digest,
            )
            self._publish(
                RecommendationSnapshot(
                    books=tuple(batch),
                    interaction_hash=digest,
                    valid_interactions=valid_count,
                    candidates_ranked=ranked_count,
                    computed_at=_now(),
                ),
                SessionState.PUBLISHED,
            )
        except Exception as e:
            logger.exception("[recs] recomputation failed; clearing recommendations")
            self._publish(
                RecommendationSnapshot(computed_at=_now(), last_error=str(e)),
                SessionState.PUBLISHED,
            )
        return self.recommendations

    def _current_catalog(self, version: int, force: bool) -> List[Dict[str, Any]]:
        """Catalog books, refetched only when the provider's version moved (or on force)."""
        if force or version != self._catalog_version:
            self._catalog_books = self._catalog.get_books() or []
            self._catalog_version = version
            logger.debug("[recs] catalog v%d loaded, %d books", version, len(self._catalog_books))
        return self._catalog_books

    def _publish(self, snapshot: RecommendationSnapshot, state: SessionState) -> None:
        self._snapshot = snapshot
        self._state = state
        for listener in list(self._output_listeners):
            try:
                listener(snapshot.books)
            except Exception:
                logger.exception("[recs] output listener failed")
