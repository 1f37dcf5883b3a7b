"""
Book models: typed representation of library entries and catalog candidates.

InteractedBook is a catalog book annotated with the user's relationship to it
(saved, favorite, rated, reviewed). CandidateBook is a catalog entry the engine
may recommend. Both are built from provider dicts via model_validate(d) or the
ensure_* helpers, which drop malformed entries instead of failing the batch.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .config import RecommendationConfig

logger = logging.getLogger(__name__)


class CandidateBook(BaseModel):
    """
    Catalog entry used as a recommendation candidate.

    All fields are optional to support partial data from catalog APIs;
    entries without an isbn are never scored.
    """

    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    isbn: Optional[str] = None
    title: Optional[str] = ""
    author: Optional[str] = None
    genre: Optional[str] = None
    genres: Optional[List[str]] = None


class InteractedBook(CandidateBook):
    """
    A library entry: catalog fields plus interaction flags.

    rating is only meaningful when rated is True, review only when reviewed is True.
    The library provider guarantees this; the engine does not re-validate deeply.
    """

    saved: bool = False
    favorite: bool = False
    rated: bool = False
    reviewed: bool = False
    rating: Optional[float] = None
    review: Optional[str] = None

    @field_validator("saved", "favorite", "rated", "reviewed", mode="before")
    @classmethod
    def _missing_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def has_rating(self) -> bool:
        """True if the book is rated with a positive rating."""
        return self.rated and self.rating is not None and self.rating > 0

    @property
    def has_review(self) -> bool:
        """True if the book is reviewed with non-blank text."""
        return self.reviewed and bool(self.review and self.review.strip())


def has_valid_interaction(book: InteractedBook) -> bool:
    """saved OR favorite OR rated with rating > 0 OR reviewed with non-empty text."""
    if not book.isbn:
        return False
    return book.saved or book.favorite or book.has_rating or book.has_review


def has_matchable_attributes(book: CandidateBook) -> bool:
    """A book needs a genre or an author to contribute to scoring."""
    return bool((book.genre or "").strip() or (book.author or "").strip())


def is_blocked(book: CandidateBook, config: RecommendationConfig) -> bool:
    """True for known-bad entries listed in config.blocked_isbns / blocked_titles."""
    if book.isbn and book.isbn in config.blocked_isbns:
        return True
    title = book.title or ""
    return any(blocked in title for blocked in config.blocked_titles)


def is_valid_interacted_book(book: InteractedBook, config: RecommendationConfig) -> bool:
    """Valid interaction, at least one matchable attribute, and not blocked."""
    return (
        has_valid_interaction(book)
        and has_matchable_attributes(book)
        and not is_blocked(book, config)
    )


def _coerce(model: type, items: Iterable[Any], kind: str) -> List[Any]:
    books = []
    for idx, item in enumerate(items):
        if isinstance(item, model):
            books.append(item)
            continue
        if not isinstance(item, dict):
            logger.warning("[coerce] skipping %s #%d: not a mapping (%s)", kind, idx, type(item).__name__)
            continue
        try:
            books.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "[coerce] skipping malformed %s #%d isbn=%s: %d validation error(s)",
                kind, idx, item.get("isbn"), e.error_count(),
            )
    return books


def ensure_interacted_books(
    items: Union[Iterable[Union[Dict[str, Any], InteractedBook]], Dict[str, Any]],
) -> List[InteractedBook]:
    """
    Convert library entries to InteractedBook models, skipping malformed ones.

    Accepts a list of entries or the provider's isbn -> entry mapping.
    """
    if isinstance(items, dict):
        items = items.values()
    return _coerce(InteractedBook, items, "library entry")


def ensure_candidates(
    items: Iterable[Union[Dict[str, Any], CandidateBook]],
) -> List[CandidateBook]:
    """Convert catalog entries to CandidateBook models, skipping malformed ones."""
    return _coerce(CandidateBook, items, "catalog entry")
