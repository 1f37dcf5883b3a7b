"""Data models for the recommendation engine."""

from .book import (
    CandidateBook,
    InteractedBook,
    ensure_candidates,
    ensure_interacted_books,
    has_matchable_attributes,
    has_valid_interaction,
    is_blocked,
    is_valid_interacted_book,
)
from .config import DEFAULT_CONFIG, RecommendationConfig, resolve_config
from .scoring import Reason, ReasonType, ScoredBook, SimilarityScore, interaction_multiplier
from .session import RecommendationSnapshot, SessionState

__all__ = [
    "DEFAULT_CONFIG",
    "CandidateBook",
    "InteractedBook",
    "Reason",
    "ReasonType",
    "RecommendationConfig",
    "RecommendationSnapshot",
    "ScoredBook",
    "SessionState",
    "SimilarityScore",
    "ensure_candidates",
    "ensure_interacted_books",
    "has_matchable_attributes",
    "has_valid_interaction",
    "interaction_multiplier",
    "is_blocked",
    "is_valid_interacted_book",
    "resolve_config",
]
