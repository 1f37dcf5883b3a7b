"""
User Library store.

In-memory isbn -> entry mapping of the user's interactions (saved, favorite,
rated, reviewed). Implements LibraryProvider for the session controller.

Usage:
    library = UserLibrary()
    library.favorite_book({"isbn": "A", "title": "The Hobbit", "genre": "fantasy"})
    library.rate_book({"isbn": "B", "title": "Emma", "genre": "romance"}, 4)
    unsubscribe = library.subscribe(lambda: print("changed"))

Mutators copy only the catalog fields the engine matches on, keep any other
interaction state already on the entry, and drop an entry once its last
interaction flag is cleared.
"""

import copy
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..models.book import CandidateBook, InteractedBook, has_valid_interaction, is_blocked
from ..models.config import RecommendationConfig, resolve_config
from .providers import ListenerRegistry, Unsubscribe, Listener

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 5
NO_RATING_LABEL = "—"

BOOK_FIELDS = ("isbn", "title", "author", "genre", "genres")

BookLike = Union[Mapping[str, Any], CandidateBook]


def rating_label(rating: Optional[float]) -> str:
    """Star string for a rating: full stars, a half rounded up, then empty stars to 5."""
    if not rating:
        return NO_RATING_LABEL
    full = math.floor(rating)
    half = rating % 1 >= 0.5
    empty = MAX_RATING - full - (1 if half else 0)
    return "★" * full + ("★" if half else "") + "☆" * max(empty, 0)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _book_fields(book: BookLike) -> Dict[str, Any]:
    data = book.model_dump() if isinstance(book, CandidateBook) else dict(book)
    isbn = data.get("isbn")
    if not isbn:
        raise ValueError("Book must have an isbn")
    fields = {key: data.get(key) for key in BOOK_FIELDS}
    fields["isbn"] = str(isbn)
    return fields


def _entry_is_valid(entry: Mapping[str, Any]) -> bool:
    try:
        return has_valid_interaction(InteractedBook.model_validate(dict(entry)))
    except ValidationError:
        return False


class UserLibrary:
    """In-memory user library; the single owner of interaction state."""

    def __init__(
        self,
        entries: Optional[Mapping[str, Mapping[str, Any]]] = None,
        config: Optional[RecommendationConfig] = None,
    ):
        self.config = resolve_config(config)
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._listeners = ListenerRegistry()
        if entries:
            self.load(entries, notify=False)

    # ------------------------------------------------------------------
    # Provider interface
    # ------------------------------------------------------------------

    def get_library(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._entries)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._listeners.subscribe(listener)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, raw: Mapping[str, Mapping[str, Any]], notify: bool = True) -> int:
        """
        Replace contents from a raw isbn -> entry mapping.

        Normalizes invalid states (rated without a positive rating, reviewed
        without text), then drops blocked entries and entries left without any
        valid interaction. Returns how many entries were dropped or changed.
        """
        cleaned: Dict[str, Dict[str, Any]] = {}
        changes = 0
        for isbn, book in raw.items():
            if not isinstance(book, Mapping):
                changes += 1
                continue
            entry = dict(book)
            entry.setdefault("isbn", isbn)

            try:
                candidate = CandidateBook.model_validate(entry)
            except ValidationError:
                logger.warning("[library] dropping malformed entry isbn=%s", isbn)
                changes += 1
                continue
            if is_blocked(candidate, self.config):
                logger.info("[library] dropping blocked entry isbn=%s title=%s", isbn, entry.get("title"))
                changes += 1
                continue

            normalized = self._normalize_entry(entry)
            if not _entry_is_valid(normalized):
                logger.debug("[library] dropping entry without valid status isbn=%s", isbn)
                changes += 1
                continue
            if normalized != entry:
                changes += 1
            cleaned[str(isbn)] = normalized

        self._entries = cleaned
        if notify:
            self._listeners.notify()
        return changes

    @staticmethod
    def _normalize_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(entry)
        rating = normalized.get("rating")
        if normalized.get("rated") is True and (
            not isinstance(rating, (int, float)) or isinstance(rating, bool) or rating <= 0
        ):
            normalized["rated"] = False
            normalized["rating"] = None
            normalized["rating_label"] = NO_RATING_LABEL
        review = normalized.get("review")
        if normalized.get("reviewed") is True and (not isinstance(review, str) or not review.strip()):
            normalized["reviewed"] = False
            normalized["review"] = None
        return normalized

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def _upsert(self, book: BookLike, **status: Any) -> bool:
        fields = _book_fields(book)
        isbn = fields["isbn"]
        existing = self._entries.get(isbn, {})
        self._entries[isbn] = {**existing, **fields, **status}
        self._listeners.notify()
        return True

    def _clear(self, isbn: str, **status: Any) -> bool:
        entry = self._entries.get(isbn)
        if entry is None:
            return False
        updated = {**entry, **status}
        if _entry_is_valid(updated):
            self._entries[isbn] = updated
        else:
            logger.debug("[library] removing entry with no remaining status isbn=%s", isbn)
            del self._entries[isbn]
        self._listeners.notify()
        return True

    def save_book(self, book: BookLike) -> bool:
        return self._upsert(book, saved=True, saved_at=_now())

    def unsave_book(self, isbn: str) -> bool:
        return self._clear(isbn, saved=False)

    def favorite_book(self, book: BookLike) -> bool:
        return self._upsert(book, favorite=True, favorited_at=_now())

    def unfavorite_book(self, isbn: str) -> bool:
        return self._clear(isbn, favorite=False)

    def rate_book(self, book: BookLike, rating: float) -> bool:
        """Set the user's own rating (not the catalog average); must be in (0, 5]."""
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise ValueError(f"Rating must be a number, got {rating!r}")
        if not MIN_RATING < rating <= MAX_RATING:
            raise ValueError(f"Rating must be in ({MIN_RATING}, {MAX_RATING}], got {rating}")
        return self._upsert(
            book,
            rated=True,
            rating=rating,
            rating_label=rating_label(rating),
            rated_at=_now(),
        )

    def unrate_book(self, isbn: str) -> bool:
        return self._clear(isbn, rated=False, rating=None, rating_label=NO_RATING_LABEL)

    def review_book(self, book: BookLike, review: str) -> bool:
        if not isinstance(review, str) or not review.strip():
            raise ValueError("Review text must not be empty")
        return self._upsert(book, reviewed=True, review=review, reviewed_at=_now())

    def unreview_book(self, isbn: str) -> bool:
        return self._clear(isbn, reviewed=False, review=None)

    def remove_book(self, isbn: str) -> bool:
        if isbn not in self._entries:
            return False
        del self._entries[isbn]
        self._listeners.notify()
        return True

    def clear(self) -> None:
        if not self._entries:
            return
        self._entries = {}
        self._listeners.notify()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_book_status(self, isbn: str) -> Dict[str, Any]:
        """The entry for isbn, or a default all-false status."""
        if isbn and isbn in self._entries:
            return copy.deepcopy(self._entries[isbn])
        return {
            "saved": False,
            "favorite": False,
            "rated": False,
            "reviewed": False,
            "rating": None,
            "rating_label": NO_RATING_LABEL,
        }

    def get_all_books(self) -> List[Dict[str, Any]]:
        """Entries with at least one valid interaction."""
        return [copy.deepcopy(e) for e in self._entries.values() if _entry_is_valid(e)]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, isbn: object) -> bool:
        return isbn in self._entries
