"""
Candidate Filter & Ranker

Removes books the user already interacted with, scores every remaining
candidate, drops those below the relevance threshold, and sorts by score.
Exclusion is by normalized ISBN, so a book the user has touched never comes
back as a recommendation.

The public entry point is rank_candidates.
"""

from typing import Iterable, List, Optional, Sequence, Set

from ..models.book import CandidateBook, InteractedBook, has_valid_interaction
from ..models.config import DEFAULT_CONFIG, RecommendationConfig
from ..models.scoring import ScoredBook
from ..utils.normalize import normalize_isbn
from .similarity import score_candidate


def _excluded_isbns(interacted_books: Sequence[InteractedBook]) -> Set[str]:
    """Normalized ISBNs of every library entry."""
    return {normalize_isbn(b.isbn) for b in interacted_books if b.isbn}


def _filter_eligible_candidates(
    candidates: Sequence[CandidateBook],
    excluded: Set[str],
) -> List[CandidateBook]:
    """Candidates with an ISBN that is neither excluded nor a repeat of an earlier catalog entry."""
    eligible = []
    seen: Set[str] = set()
    for book in candidates:
        key = normalize_isbn(book.isbn)
        if not key or key in excluded or key in seen:
            continue
        seen.add(key)
        eligible.append(book)
    return eligible


def _score_all(
    interacted_books: Sequence[InteractedBook],
    candidates: Sequence[CandidateBook],
    config: RecommendationConfig,
) -> List[ScoredBook]:
    """Score each candidate into a new ScoredBook; catalog entries are not modified."""
    scored = []
    for book in candidates:
        result = score_candidate(interacted_books, book, config)
        scored.append(ScoredBook(book=book, score=result.score, reasons=result.reasons))
    return scored


def rank_candidates(
    interacted_books: Sequence[InteractedBook],
    candidates: Sequence[CandidateBook],
    config: RecommendationConfig = DEFAULT_CONFIG,
    min_score_threshold: Optional[float] = None,
    excluded_isbns: Iterable[str] = (),
) -> List[ScoredBook]:
    """
    Rank catalog candidates for one user.

    Drops candidates scoring strictly below min_score_threshold
    (config.min_score_threshold when None). Sort is stable, so equal scores keep
    catalog order. Empty when there are no valid interactions or no candidates;
    there is no popularity fallback.

    excluded_isbns: extra library ISBNs to exclude, e.g. entries that are not
    scoring signals but must still never be recommended back.
    """
    threshold = config.min_score_threshold if min_score_threshold is None else min_score_threshold

    if not candidates or not any(has_valid_interaction(b) for b in interacted_books):
        return []

    excluded = _excluded_isbns(interacted_books)
    excluded.update(normalize_isbn(isbn) for isbn in excluded_isbns if isbn)
    eligible = _filter_eligible_candidates(candidates, excluded)
    scored = [s for s in _score_all(interacted_books, eligible, config) if s.score >= threshold]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored
