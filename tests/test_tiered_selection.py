"""
Tiered Diversity Selector Tests

Tests tier splitting, per-tier quotas with backfill, and the selection bound.

Test Scenarios:
---------------
1. Tier split: contiguous chunks, remainder in the last tier
2. Quotas: equal share per tier, shortfall backfilled from higher tiers first
3. Output: min(batch_size, n) items, tier-major, each tier a permutation of its slice
4. Seeded generators give identical batches; the input list is never mutated

Run:
----
    pytest tests/test_tiered_selection.py -v
"""

import numpy as np
import pytest

from bookrec.stages.tiered_selection import select_tiered, shuffle_tier, split_tiers, tier_quotas


class TestSplitTiers:

    def test_even_split(self):
        assert split_tiers(list(range(9))) == [[0, 1, 2], [3, 4, 5], [6, 7, 8]]

    def test_remainder_goes_to_last_tier(self):
        tiers = split_tiers(list(range(10)))
        assert [len(t) for t in tiers] == [3, 3, 4]
        assert tiers[2] == [6, 7, 8, 9]

    def test_fewer_items_than_tiers(self):
        assert split_tiers(["a", "b"]) == [[], [], ["a", "b"]]

    def test_single_tier(self):
        assert split_tiers([1, 2, 3], tier_count=1) == [[1, 2, 3]]

    def test_empty(self):
        assert split_tiers([]) == [[], [], []]


class TestTierQuotas:

    @pytest.mark.parametrize(
        "sizes, batch_size, expected",
        [
            ([3, 3, 4], 750, [3, 3, 4]),
            ([100, 100, 100], 10, [4, 3, 3]),
            ([100, 100, 100], 9, [3, 3, 3]),
            ([1, 5, 10], 12, [1, 5, 6]),
            ([0, 0, 2], 750, [0, 0, 2]),
            ([250, 250, 250], 750, [250, 250, 250]),
            ([100, 100, 100], 1, [1, 0, 0]),
        ],
    )
    def test_quotas(self, sizes, batch_size, expected):
        assert tier_quotas(sizes, batch_size) == expected

    def test_quotas_never_exceed_tier_size(self):
        sizes = [2, 40, 7]
        quotas = tier_quotas(sizes, 30)
        assert all(q <= s for q, s in zip(quotas, sizes))
        assert sum(quotas) == 30


class TestSelectTiered:

    def test_returns_everything_below_batch_size(self, rng):
        ranked = list(range(10))
        selected = select_tiered(ranked, batch_size=750, rng=rng)
        assert sorted(selected) == ranked

    def test_bounded_by_batch_size(self, rng):
        ranked = list(range(2000))
        selected = select_tiered(ranked, batch_size=750, rng=rng)

        assert len(selected) == 750
        assert len(set(selected)) == 750

    def test_tier_major_order(self, rng):
        ranked = list(range(30))
        selected = select_tiered(ranked, batch_size=9, rng=rng)

        # 3 from each tier of 10, tier 0 first
        assert len(selected) == 9
        assert all(0 <= x < 10 for x in selected[:3])
        assert all(10 <= x < 20 for x in selected[3:6])
        assert all(20 <= x < 30 for x in selected[6:])

    def test_backfilled_items_stay_in_their_tier_section(self, rng):
        ranked = list(range(300))
        selected = select_tiered(ranked, batch_size=10, rng=rng)

        assert len(selected) == 10
        assert all(x < 100 for x in selected[:4])
        assert all(100 <= x < 200 for x in selected[4:7])
        assert all(x >= 200 for x in selected[7:])

    def test_each_tier_is_a_permutation(self, rng):
        ranked = list(range(12))
        selected = select_tiered(ranked, batch_size=750, rng=rng)

        assert sorted(selected[:4]) == [0, 1, 2, 3]
        assert sorted(selected[4:8]) == [4, 5, 6, 7]
        assert sorted(selected[8:]) == [8, 9, 10, 11]

    def test_seeded_generators_reproduce(self):
        ranked = list(range(100))
        a = select_tiered(ranked, batch_size=30, rng=np.random.default_rng(7))
        b = select_tiered(ranked, batch_size=30, rng=np.random.default_rng(7))
        assert a == b

    def test_input_not_mutated(self, rng):
        ranked = list(range(50))
        select_tiered(ranked, batch_size=20, rng=rng)
        assert ranked == list(range(50))

    def test_empty_input(self, rng):
        assert select_tiered([], batch_size=750, rng=rng) == []

    def test_default_generator(self):
        assert sorted(select_tiered([1, 2, 3])) == [1, 2, 3]

    def test_single_tier_is_plain_shuffle(self, rng):
        ranked = list(range(20))
        selected = select_tiered(ranked, batch_size=5, rng=rng, tier_count=1)
        assert len(selected) == 5
        assert len(set(selected)) == 5


class TestShuffleTier:

    def test_permutation_does_not_mutate(self, rng):
        tier = ["a", "b", "c", "d"]
        shuffled = shuffle_tier(tier, rng)
        assert sorted(shuffled) == tier
        assert tier == ["a", "b", "c", "d"]
