"""
Tiered diversity: blend a bounded batch across relevance tiers.

Strict top-N by raw score clusters on one dominant genre or author. Instead the
ranked list is split into contiguous tiers (top, middle, bottom third by default),
each tier is shuffled on its own, and an equal share is taken from every tier.
Output is tier-major, so earlier positions still skew toward higher relevance
while varying between calls.
"""

from typing import List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def split_tiers(ranked: Sequence[T], tier_count: int = 3) -> List[List[T]]:
    """
    Contiguous tiers by rank position.

    Every tier gets len // tier_count items; the remainder falls into the last tier.
    """
    chunk = len(ranked) // tier_count
    tiers = [list(ranked[i * chunk:(i + 1) * chunk]) for i in range(tier_count - 1)]
    tiers.append(list(ranked[(tier_count - 1) * chunk:]))
    return tiers


def shuffle_tier(tier: Sequence[T], rng: np.random.Generator) -> List[T]:
    """Uniform random permutation of one tier (input not mutated)."""
    return [tier[i] for i in rng.permutation(len(tier))]


def tier_quotas(tier_sizes: Sequence[int], batch_size: int) -> List[int]:
    """
    How many items to take from each tier.

    Each tier first contributes up to batch_size // tier_count. Any shortfall up to
    min(batch_size, total) is backfilled from unused items in ascending tier order,
    so a higher tier is exhausted before a lower one over-contributes.
    """
    per_tier = batch_size // len(tier_sizes)
    quotas = [min(per_tier, size) for size in tier_sizes]
    remaining = min(batch_size, sum(tier_sizes)) - sum(quotas)
    for idx, size in enumerate(tier_sizes):
        if remaining <= 0:
            break
        extra = min(remaining, size - quotas[idx])
        quotas[idx] += extra
        remaining -= extra
    return quotas


def select_tiered(
    ranked: Sequence[T],
    batch_size: int = 750,
    rng: Optional[np.random.Generator] = None,
    tier_count: int = 3,
) -> List[T]:
    """
    Select up to batch_size items from a score-sorted list with tiered shuffling.

    Args:
        ranked: Candidates sorted by score (desc). Not mutated.
        batch_size: Max number of items returned.
        rng: Random generator for the per-tier shuffles; a fresh unseeded one when None.
        tier_count: Number of contiguous relevance tiers.

    Returns:
        min(batch_size, len(ranked)) items, all of tier 0's picks first, then tier 1's, ...
    """
    if not ranked or batch_size <= 0:
        return []
    rng = rng if rng is not None else np.random.default_rng()

    tiers = [shuffle_tier(t, rng) for t in split_tiers(ranked, tier_count)]
    quotas = tier_quotas([len(t) for t in tiers], batch_size)

    selected: List[T] = []
    for tier, quota in zip(tiers, quotas):
        selected.extend(tier[:quota])
    return selected
