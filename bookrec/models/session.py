"""
Session model: controller state and the published recommendation snapshot.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .scoring import ScoredBook


class SessionState(str, Enum):
    """Idle (no valid interactions) -> Computing -> Published(list)."""

    IDLE = "idle"
    COMPUTING = "computing"
    PUBLISHED = "published"


class RecommendationSnapshot(BaseModel):
    """One published batch. Read-only after publication."""

    model_config = ConfigDict(frozen=True)

    books: Tuple[ScoredBook, ...] = ()
    interaction_hash: str = ""
    valid_interactions: int = 0
    candidates_ranked: int = 0
    computed_at: str = ""
    last_error: Optional[str] = None
