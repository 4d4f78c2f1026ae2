"""Tests for weighted distributions and default synthesis."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from flowgen.distribution import (
    DEFAULT_FANOUT,
    DEFAULT_RATE,
    DEFAULT_SERVICE,
    MAX_WEIGHT_TOTAL,
    WeightedDistribution,
    WeightedEntry,
    synthesize_default,
)


def _dist(*pairs: tuple[int, int], name: str = "fanout") -> WeightedDistribution:
    entries = tuple(WeightedEntry(v, w) for v, w in pairs)
    return WeightedDistribution(name=name, entries=entries)


class TestWeightedDistribution:
    def test_weight_total_is_sum_of_weights(self) -> None:
        dist = _dist((1, 30), (4, 70))
        assert dist.weight_total == 100
        assert dist.weight_total == sum(dist.weights)

    def test_entries_keep_insertion_order(self) -> None:
        dist = _dist((8, 1), (2, 1), (4, 1))
        assert dist.values == [8, 2, 4]
        assert [e.value for e in dist] == [8, 2, 4]
        assert len(dist) == 3

    def test_entries_coerced_to_tuple(self) -> None:
        dist = WeightedDistribution(
            name="rate", entries=[WeightedEntry(0, 1)]  # type: ignore[arg-type]
        )
        assert isinstance(dist.entries, tuple)

    def test_empty_distribution_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least one entry"):
            WeightedDistribution(name="service", entries=())

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            WeightedEntry(value=1, weight=-1)

    def test_single_weight_above_int64_rejected(self) -> None:
        with pytest.raises(ValueError, match="weights sum to"):
            _dist((1, MAX_WEIGHT_TOTAL + 1))

    def test_weight_sum_above_int64_rejected_not_wrapped(self) -> None:
        with pytest.raises(ValueError, match=f"above {MAX_WEIGHT_TOTAL}"):
            _dist((1, MAX_WEIGHT_TOTAL), (2, 1))

    def test_weight_sum_at_int64_limit(self) -> None:
        dist = _dist((1, MAX_WEIGHT_TOTAL - 5), (2, 5))
        assert dist.weight_total == MAX_WEIGHT_TOTAL
        assert dist.cumulative_weights() == [MAX_WEIGHT_TOTAL - 5, MAX_WEIGHT_TOTAL]
        assert dist.select(MAX_WEIGHT_TOTAL - 1).value == 2

    def test_cumulative_weights(self) -> None:
        dist = _dist((1, 30), (4, 70))
        assert dist.cumulative_weights() == [30, 100]

    def test_select_interval_boundaries(self) -> None:
        dist = _dist((1, 30), (4, 70))
        assert dist.select(0).value == 1
        assert dist.select(29).value == 1
        assert dist.select(30).value == 4
        assert dist.select(99).value == 4

    def test_select_skips_zero_weight_entries(self) -> None:
        dist = _dist((1, 0), (2, 10), (3, 0), (4, 5))
        selected = {dist.select(d).value for d in range(dist.weight_total)}
        assert selected == {2, 4}
        assert dist.select(10).value == 4

    @pytest.mark.parametrize("draw", [-1, 100, 1000])
    def test_select_out_of_range(self, draw: int) -> None:
        dist = _dist((1, 30), (4, 70))
        with pytest.raises(ValueError, match="outside"):
            dist.select(draw)

    def test_sample_is_deterministic_for_seed(self) -> None:
        dist = _dist((1, 30), (4, 70))
        rng1, rng2 = random.Random(11), random.Random(11)
        first = [dist.sample(rng1).value for _ in range(50)]
        second = [dist.sample(rng2).value for _ in range(50)]
        assert first == second

    def test_sample_follows_weights(self) -> None:
        dist = _dist((1, 90), (2, 10))
        rng = random.Random(1234)
        counts = Counter(dist.sample(rng).value for _ in range(10_000))
        assert set(counts) == {1, 2}
        assert 0.85 < counts[1] / 10_000 < 0.95

    def test_indices_distinguish_duplicate_values(self) -> None:
        dist = _dist((0, 50), (0, 50), name="service")
        assert dist.select_index(49) == 0
        assert dist.select_index(50) == 1
        rng = random.Random(5)
        counts = Counter(dist.sample_index(rng) for _ in range(1000))
        assert set(counts) == {0, 1}
        assert sum(counts.values()) == 1000

    def test_sample_matches_sample_index(self) -> None:
        dist = _dist((1, 30), (4, 70))
        rng1, rng2 = random.Random(3), random.Random(3)
        for _ in range(20):
            assert dist.sample(rng1) is dist.entries[dist.sample_index(rng2)]

    def test_sample_zero_total_rejected(self) -> None:
        dist = _dist((1, 0))
        with pytest.raises(ValueError, match="zero total weight"):
            dist.sample(random.Random(0))

    def test_equality_ignores_cached_cumulative(self) -> None:
        assert _dist((1, 30), (4, 70)) == _dist((1, 30), (4, 70))
        assert _dist((1, 30), (4, 70)) != _dist((4, 70), (1, 30))

    def test_is_immutable(self) -> None:
        dist = _dist((1, 100))
        with pytest.raises(AttributeError):
            dist.weight_total = 5  # type: ignore[misc]

    def test_to_dict(self) -> None:
        assert _dist((1, 30), (4, 70)).to_dict() == {
            "entries": [{"value": 1, "weight": 30}, {"value": 4, "weight": 70}],
            "weight_total": 100,
        }


class TestSynthesizeDefault:
    def test_empty_gets_default(self) -> None:
        assert synthesize_default([], DEFAULT_FANOUT) == (WeightedEntry(1, 100),)

    def test_non_empty_unchanged(self) -> None:
        entries = [WeightedEntry(2, 5), WeightedEntry(3, 5)]
        assert synthesize_default(entries, DEFAULT_FANOUT) == tuple(entries)

    def test_accepts_generator(self) -> None:
        gen = (e for e in [WeightedEntry(46, 1)])
        assert synthesize_default(gen, DEFAULT_SERVICE) == (WeightedEntry(46, 1),)

    def test_default_values(self) -> None:
        assert DEFAULT_FANOUT == WeightedEntry(1, 100)
        assert DEFAULT_SERVICE == WeightedEntry(0, 100)
        assert DEFAULT_RATE == WeightedEntry(0, 100)

    def test_default_distribution_total(self) -> None:
        dist = WeightedDistribution(
            name="rate", entries=synthesize_default((), DEFAULT_RATE)
        )
        assert dist.weight_total == 100
        assert dist.select(0) == DEFAULT_RATE
