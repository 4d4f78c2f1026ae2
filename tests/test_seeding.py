"""Tests for random seed establishment."""

from __future__ import annotations

from unittest.mock import patch

from flowgen.seeding import make_rng, resolve_seed


def test_explicit_seed_is_kept() -> None:
    assert resolve_seed(1234) == 1234


def test_zero_and_none_derive_from_time() -> None:
    with patch("flowgen.seeding.time.time_ns", return_value=1_700_000_000_123_456_789):
        assert resolve_seed(0) == 1_700_000_000_123_456
        assert resolve_seed(None) == 1_700_000_000_123_456


def test_make_rng_is_reproducible() -> None:
    a = make_rng(99)
    b = make_rng(99)
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]
