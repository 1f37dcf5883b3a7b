"""
Engine configuration: scoring weights, engagement multipliers, selection and filters.

RecommendationConfig defaults are defined here. Callers may pass a dict
(e.g. loaded from a JSON config file); from_dict() merges it with these defaults.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class RecommendationConfig(BaseModel):
    """Configuration for the recommendation engine."""

    # -------------------------------------------------------------------------
    # Candidate Filter & Ranker
    # -------------------------------------------------------------------------

    # Candidates scoring strictly below this are dropped as noise
    # (e.g. a lone author match from a weakly engaged book).
    min_score_threshold: float = 1.0

    # -------------------------------------------------------------------------
    # Tiered Diversity Selector
    # -------------------------------------------------------------------------

    # Max number of books in one published batch.
    batch_size: int = 750

    # Number of contiguous relevance tiers the ranked list is split into.
    # Each tier is shuffled independently; output is tier-major.
    tier_count: int = 3

    # -------------------------------------------------------------------------
    # Similarity Scorer: per-match weights
    # score += weight * interaction_multiplier
    # -------------------------------------------------------------------------

    # Primary genre of an interacted book equals the candidate's genre.
    genre_match_weight: float = 2.0
    # Normalized author names are equal.
    author_match_weight: float = 1.0
    # Per genre shared between the two `genres` arrays.
    shared_genre_weight: float = 2.0

    # -------------------------------------------------------------------------
    # Engagement multipliers (strongest signal wins: review > rating > favorite > saved)
    # rated: max(rating_floor, (rating - rating_pivot) * rating_slope + 1.0)
    # -------------------------------------------------------------------------

    review_multiplier: float = 2.0
    favorite_multiplier: float = 1.5
    saved_multiplier: float = 1.0

    # Rating that maps to a neutral multiplier of 1.0. 5 stars -> 2.5.
    rating_pivot: float = 2.0
    # Multiplier gained per star above the pivot.
    rating_slope: float = 0.5
    # Low ratings still count, but never below this.
    rating_floor: float = 0.3

    # -------------------------------------------------------------------------
    # Filters: known-bad library entries never used as interaction signals
    # -------------------------------------------------------------------------

    blocked_isbns: List[str] = Field(default_factory=list)
    # Substring match against the entry title.
    blocked_titles: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_ranges(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.tier_count < 1:
            raise ValueError(f"tier_count must be at least 1, got {self.tier_count}")
        weights = {
            "genre_match_weight": self.genre_match_weight,
            "author_match_weight": self.author_match_weight,
            "shared_genre_weight": self.shared_genre_weight,
            "review_multiplier": self.review_multiplier,
            "favorite_multiplier": self.favorite_multiplier,
            "saved_multiplier": self.saved_multiplier,
            "rating_slope": self.rating_slope,
        }
        negative = [name for name, value in weights.items() if value < 0]
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")
        if not 0 < self.rating_floor <= 1.0:
            raise ValueError(f"rating_floor must be in (0, 1], got {self.rating_floor}")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RecommendationConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "scoring" in config_dict:
            sc = config_dict["scoring"]
            if "genre" in sc:
                flat["genre_match_weight"] = sc["genre"]
            if "author" in sc:
                flat["author_match_weight"] = sc["author"]
            if "shared_genre" in sc:
                flat["shared_genre_weight"] = sc["shared_genre"]
            if "min_score" in sc:
                flat["min_score_threshold"] = sc["min_score"]
        if "engagement_weights" in config_dict:
            ew = config_dict["engagement_weights"]
            for key in ("review", "favorite", "saved"):
                if key in ew:
                    flat[f"{key}_multiplier"] = ew[key]
            if "rating" in ew:
                rating = ew["rating"]
                flat["rating_pivot"] = rating.get("pivot", 2.0)
                flat["rating_slope"] = rating.get("slope", 0.5)
                flat["rating_floor"] = rating.get("floor", 0.3)
        if "selection" in config_dict:
            sel = config_dict["selection"]
            if "batch_size" in sel:
                flat["batch_size"] = sel["batch_size"]
            if "tiers" in sel:
                flat["tier_count"] = sel["tiers"]
        if "filters" in config_dict:
            flt = config_dict["filters"]
            if "isbns" in flt:
                flat["blocked_isbns"] = flt["isbns"]
            if "titles" in flt:
                flat["blocked_titles"] = flt["titles"]
        allowed = set(cls.model_fields)
        # Flat keys win over grouped sections
        flat.update({k: v for k, v in config_dict.items() if k in allowed})
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RecommendationConfig()


def resolve_config(config: Optional["RecommendationConfig"]) -> "RecommendationConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
