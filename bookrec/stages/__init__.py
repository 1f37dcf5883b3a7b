"""Pipeline stages: similarity scoring, candidate ranking, tiered selection, orchestration."""

from .candidate_pool import rank_candidates
from .orchestrator import create_recommendation_batch, select_valid_interacted_books
from .similarity import score_candidate
from .tiered_selection import select_tiered

__all__ = [
    "score_candidate",
    "rank_candidates",
    "select_tiered",
    "create_recommendation_batch",
    "select_valid_interacted_books",
]
