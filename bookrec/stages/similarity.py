"""
Similarity Scorer: how relevant one candidate is to the user's library.

For every valid library entry, matches on primary genre, author, and shared
`genres` tags add weight * interaction_multiplier to a single running total.
Reasons are collected globally per candidate, so a genre or author yields at
most one reason line no matter how many library entries matched it.
Deterministic: no randomness here.

The public entry point is score_candidate.
"""

from typing import Dict, List, Sequence, Set, Tuple

from ..models.book import CandidateBook, InteractedBook, has_valid_interaction
from ..models.config import DEFAULT_CONFIG, RecommendationConfig
from ..models.scoring import Reason, ReasonType, SimilarityScore, interaction_multiplier
from ..utils.normalize import normalize_text

REVIEWED_SUFFIX = " (reviewed)"


def _user_genre_set(books: Sequence[InteractedBook]) -> Set[str]:
    """Normalized primary genres and genre tags across the whole library."""
    genres = set()
    for book in books:
        if book.genre:
            genres.add(normalize_text(book.genre))
        for tag in book.genres or []:
            genres.add(normalize_text(tag))
    genres.discard("")
    return genres


def _shared_genres(book: InteractedBook, candidate: CandidateBook) -> List[str]:
    """Candidate genre tags also present (exact string) in the library entry's tags."""
    if not book.genres or not candidate.genres:
        return []
    owned = set(book.genres)
    return [g for g in dict.fromkeys(candidate.genres) if g in owned]


def _add_reason(
    reasons: Dict[Tuple[str, str], Reason],
    reason_type: ReasonType,
    value: str,
    message: str,
) -> None:
    """Keep the first reason per (type, value)."""
    key = (reason_type.value, value)
    if key not in reasons:
        reasons[key] = Reason(type=reason_type, value=value, message=message)


def score_candidate(
    interacted_books: Sequence[InteractedBook],
    candidate: CandidateBook,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> SimilarityScore:
    """
    Score one candidate against the user's library.

    Returns a zero score when there are no library entries, no valid
    interactions, or the candidate has no ISBN.
    """
    if not interacted_books or not candidate.isbn:
        return SimilarityScore()

    valid = [b for b in interacted_books if has_valid_interaction(b)]
    if not valid:
        return SimilarityScore()

    user_genres = _user_genre_set(valid)
    candidate_genre = normalize_text(candidate.genre)
    candidate_author = normalize_text(candidate.author)

    score = 0.0
    reasons: Dict[Tuple[str, str], Reason] = {}

    for book in valid:
        multiplier = interaction_multiplier(book, config)
        suffix = REVIEWED_SUFFIX if book.has_review else ""

        genre = normalize_text(book.genre)
        if genre and genre == candidate_genre and genre in user_genres:
            score += config.genre_match_weight * multiplier
            _add_reason(
                reasons, ReasonType.GENRE, genre,
                f"Similar to your {book.genre.strip()} books{suffix}",
            )

        author = normalize_text(book.author)
        if author and author == candidate_author:
            score += config.author_match_weight * multiplier
            _add_reason(
                reasons, ReasonType.AUTHOR, author,
                f'Same author as "{book.title or ""}"{suffix}',
            )

        for shared in _shared_genres(book, candidate):
            score += config.shared_genre_weight * multiplier
            value = normalize_text(shared)
            _add_reason(
                reasons, ReasonType.GENRE, value,
                f"Similar to your {shared.strip()} books{suffix}",
            )

    return SimilarityScore(score=score, reasons=tuple(reasons.values()))
