"""
Scoring model: ScoredBook, recommendation reasons, and the engagement multiplier.

Contains:
- Reason / ReasonType: human-readable explanation attached to a scored candidate
- SimilarityScore: output of the Similarity Scorer for one candidate
- ScoredBook: a candidate with its score and reasons (new record, catalog entry untouched)
- interaction_multiplier: how strongly one library entry counts
"""

from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict

from .book import CandidateBook, InteractedBook
from .config import DEFAULT_CONFIG, RecommendationConfig


class ReasonType(str, Enum):
    """What a reason matched on."""

    GENRE = "genre"
    AUTHOR = "author"


class Reason(BaseModel):
    """One explanation line; unique per candidate by (type, value)."""

    model_config = ConfigDict(frozen=True)

    type: ReasonType
    value: str
    message: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.type.value, self.value)


class SimilarityScore(BaseModel):
    """Accumulated score and deduplicated reasons for one candidate."""

    model_config = ConfigDict(frozen=True)

    score: float = 0.0
    reasons: Tuple[Reason, ...] = ()


class ScoredBook(BaseModel):
    """A candidate book with its recommendation score and reasons."""

    model_config = ConfigDict(frozen=True)

    book: CandidateBook
    score: float
    reasons: Tuple[Reason, ...] = ()

    @property
    def isbn(self) -> str:
        return self.book.isbn or ""

    @property
    def title(self) -> str:
        return self.book.title or ""

    def to_dict(self) -> Dict[str, Any]:
        """Flat dict for JSON output: book fields plus score and reasons."""
        data = self.book.model_dump()
        data["score"] = self.score
        data["recommendation_reasons"] = [r.model_dump(mode="json") for r in self.reasons]
        return data


def interaction_multiplier(
    book: InteractedBook,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> float:
    """
    Weight of one valid library entry; the strongest signal wins.

    reviewed (non-empty text) > rated (rating > 0) > favorite > saved.
    Ratings scale linearly around rating_pivot: with defaults 2 stars -> 1.0,
    5 stars -> 2.5, anything below 1.4 stars floors at rating_floor (0.3).
    """
    if book.has_review:
        return config.review_multiplier
    if book.has_rating:
        return max(
            config.rating_floor,
            (book.rating - config.rating_pivot) * config.rating_slope + 1.0,
        )
    if book.favorite:
        return config.favorite_multiplier
    if book.saved:
        return config.saved_multiplier
    return 0.0
