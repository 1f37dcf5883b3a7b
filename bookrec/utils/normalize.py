"""
Normalization helpers: ISBN keys, match text, and change-detection strings.
"""

import json
import re
from typing import Any, Iterable, Optional

from ..models.book import InteractedBook

_WHITESPACE = re.compile(r"\s+")


def normalize_isbn(isbn: Optional[str]) -> str:
    """Exclusion key: dashes stripped, lowercased."""
    if not isbn:
        return ""
    return isbn.replace("-", "").strip().lower()


def normalize_text(value: Optional[str]) -> str:
    """Case- and whitespace-insensitive form used for genre/author matching."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip().lower()


def _interaction_token(book: InteractedBook) -> str:
    rating = f"{book.rating:.1f}" if book.has_rating else ""
    return "{}:{}{}{}{}".format(
        book.isbn,
        "s" if book.saved else "",
        "f" if book.favorite else "",
        rating,
        "v" if book.reviewed else "",
    )


def interaction_hash(books: Iterable[InteractedBook]) -> str:
    """
    Best-effort fingerprint of an interaction set.

    Sorted, comma-joined "{isbn}:{s}{f}{rating}{v}" tokens. Cheap to compare and
    readable in logs; the controller's authoritative change check is the full
    serialized library snapshot.
    """
    return ",".join(sorted(_interaction_token(b) for b in books))


def serialize_snapshot(data: Any) -> str:
    """Canonical JSON (sorted keys) for value-equality comparison of provider state."""
    return json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
