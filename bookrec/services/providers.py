"""
Provider abstractions.

The engine reads two inputs from collaborators: the user's library
(isbn -> entry) and the candidate catalog. Both notify subscribers on change.
Implementations: UserLibrary (in-memory store), StaticCatalog (fixture-backed).
"""

from typing import Any, Callable, Dict, List, Protocol

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]


class LibraryProvider(Protocol):
    """Protocol for the user library. rating only set when rated, review only when reviewed."""

    def get_library(self) -> Dict[str, Dict[str, Any]]:
        """Current isbn -> entry mapping (a copy; callers may not mutate the store through it)."""
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Call listener after every change; returns a callable that removes it."""
        ...


class CatalogProvider(Protocol):
    """Protocol for the full candidate catalog."""

    @property
    def version(self) -> int:
        """Bumped on every change; equal versions mean get_books() returns equal data."""
        ...

    def get_books(self) -> List[Dict[str, Any]]:
        """All catalog entries."""
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Call listener when the catalog is replaced; returns a callable that removes it."""
        ...


class ListenerRegistry:
    """Listener bookkeeping shared by the in-memory providers."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def __len__(self) -> int:
        return len(self._listeners)
