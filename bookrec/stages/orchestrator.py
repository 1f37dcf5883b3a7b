"""
Pipeline orchestrator: runs the Candidate Filter & Ranker then the Tiered
Diversity Selector to produce one recommendation batch.

The main entry point is create_recommendation_batch, which returns the batch
plus counts the session controller reports (valid interactions, candidates ranked).
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from ..models.book import (
    CandidateBook,
    InteractedBook,
    ensure_candidates,
    ensure_interacted_books,
    is_valid_interacted_book,
)
from ..models.config import RecommendationConfig, resolve_config
from ..models.scoring import ScoredBook
from .candidate_pool import rank_candidates
from .tiered_selection import select_tiered

LibraryInput = Union[Dict[str, Any], Iterable[Union[Dict[str, Any], InteractedBook]]]


def select_valid_interacted_books(
    library: LibraryInput,
    config: Optional[RecommendationConfig] = None,
) -> List[InteractedBook]:
    """
    Library entries that can drive recommendations.

    Valid interaction, a genre or author to match on, and not a blocked entry.
    Accepts the provider's isbn -> entry mapping or a list of entries.
    """
    config = resolve_config(config)
    return [b for b in ensure_interacted_books(library) if is_valid_interacted_book(b, config)]


def create_recommendation_batch(
    library: LibraryInput,
    catalog: Iterable[Union[Dict[str, Any], CandidateBook]],
    config: Optional[RecommendationConfig] = None,
    rng: Optional[np.random.Generator] = None,
    batch_size: Optional[int] = None,
) -> Tuple[List[ScoredBook], int, int]:
    """
    Create a recommendation batch (rank -> tiered selection).

    Returns:
        batch: Selected ScoredBooks, tier-major order
        valid_interactions: Number of library entries used as signals
        candidates_ranked: Number of candidates at or above the score threshold
    """
    config = resolve_config(config)
    batch_size = batch_size if batch_size is not None else config.batch_size

    # Normalize inputs to models (providers pass dicts)
    entries = ensure_interacted_books(library)
    interacted = [b for b in entries if is_valid_interacted_book(b, config)]
    candidates = ensure_candidates(catalog)

    if not interacted or not candidates:
        return [], len(interacted), 0

    # Every library entry is excluded, including ones too sparse to score with
    excluded = [b.isbn for b in entries if b.isbn]
    if isinstance(library, dict):
        excluded.extend(str(key) for key in library.keys())

    ranked = rank_candidates(interacted, candidates, config, excluded_isbns=excluded)
    batch = select_tiered(ranked, batch_size, rng=rng, tier_count=config.tier_count)
    return batch, len(interacted), len(ranked)
