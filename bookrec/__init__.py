"""
bookrec: personalized book recommendations

Turns a user's library interactions (saved, favorited, rated, reviewed) into a
ranked, diversified batch of catalog books the user has not touched yet.

Single entry point for the package:
- models/: RecommendationConfig, InteractedBook, CandidateBook, ScoredBook, Reason
- stages/: similarity (scorer), candidate_pool (filter & ranker),
  tiered_selection (diversity), orchestrator
- services/: UserLibrary store, catalog loader
- controller: RecommendationController (change detection and publication)
"""

from .controller import RecommendationController
from .models.book import CandidateBook, InteractedBook
from .models.config import DEFAULT_CONFIG, RecommendationConfig, resolve_config
from .models.scoring import Reason, ReasonType, ScoredBook, SimilarityScore
from .models.session import RecommendationSnapshot, SessionState
from .services.catalog_loader import CatalogLoader, StaticCatalog
from .services.library_store import UserLibrary
from .stages.candidate_pool import rank_candidates
from .stages.orchestrator import create_recommendation_batch, select_valid_interacted_books
from .stages.similarity import score_candidate
from .stages.tiered_selection import select_tiered
from .utils.normalize import interaction_hash

__version__ = "0.1.0"

__all__ = [
    "RecommendationConfig",
    "DEFAULT_CONFIG",
    "resolve_config",
    "CandidateBook",
    "InteractedBook",
    "Reason",
    "ReasonType",
    "ScoredBook",
    "SimilarityScore",
    "RecommendationSnapshot",
    "SessionState",
    "RecommendationController",
    "UserLibrary",
    "CatalogLoader",
    "StaticCatalog",
    "score_candidate",
    "rank_candidates",
    "select_tiered",
    "create_recommendation_batch",
    "select_valid_interacted_books",
    "interaction_hash",
]
