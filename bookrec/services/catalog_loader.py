"""
Catalog Loader

Loads the candidate catalog from a JSON fixture. The file holds either a list
of books or an object with a "books" list (plus optional metadata).

Usage:
    loader = CatalogLoader(Path("fixtures/catalog.json"))
    catalog = loader.load()
    print(f"Loaded {len(catalog.books)} books")

    provider = StaticCatalog(catalog.raw_books)
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..models.book import CandidateBook, ensure_candidates
from ..utils.normalize import normalize_isbn
from .providers import Listener, ListenerRegistry, Unsubscribe

logger = logging.getLogger(__name__)


@dataclass
class LoadedCatalog:
    """A loaded catalog with its books and lookups."""
    path: Optional[Path]
    raw_books: List[Dict[str, Any]]
    books: List[CandidateBook]
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Derived lookup: normalized isbn -> book
    book_by_isbn: Dict[str, CandidateBook] = field(default_factory=dict)

    def __post_init__(self):
        for book in self.books:
            key = normalize_isbn(book.isbn)
            if key and key not in self.book_by_isbn:
                self.book_by_isbn[key] = book

    def get_book(self, isbn: str) -> Optional[CandidateBook]:
        """Get a book by ISBN (dashes and case ignored)."""
        return self.book_by_isbn.get(normalize_isbn(isbn))


class CatalogLoader:
    """Reads catalog fixtures from disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> LoadedCatalog:
        """
        Load and validate the catalog file.

        Raises:
            FileNotFoundError: the file does not exist
            ValueError: the file is not valid JSON or has no book list
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in catalog {self.path}: {e}") from e

        metadata: Dict[str, Any] = {}
        if isinstance(data, dict):
            metadata = {k: v for k, v in data.items() if k != "books"}
            data = data.get("books")
        if not isinstance(data, list):
            raise ValueError(f"Catalog {self.path} must be a list of books or an object with a 'books' list")

        raw_books = [b for b in data if isinstance(b, dict)]
        books = ensure_candidates(raw_books)
        if len(books) < len(data):
            logger.warning("[catalog] %s: skipped %d invalid entries", self.path.name, len(data) - len(books))
        logger.info("[catalog] loaded %d books from %s", len(books), self.path)

        return LoadedCatalog(path=self.path, raw_books=raw_books, books=books, metadata=metadata)


class StaticCatalog:
    """In-memory CatalogProvider. set_books() replaces the catalog, bumps version and notifies."""

    def __init__(self, books: Optional[List[Dict[str, Any]]] = None):
        self._books: List[Dict[str, Any]] = list(books or [])
        self._version = 0
        self._listeners = ListenerRegistry()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticCatalog":
        return cls(CatalogLoader(path).load().raw_books)

    @property
    def version(self) -> int:
        return self._version

    def get_books(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._books)

    def set_books(self, books: List[Dict[str, Any]]) -> None:
        self._books = list(books)
        self._version += 1
        self._listeners.notify()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._listeners.subscribe(listener)

    def __len__(self) -> int:
        return len(self._books)
