"""Weighted discrete distributions for per-request parameters.

A distribution is an ordered table of ``(value, weight)`` entries. Sampling
draws a uniform integer in ``[0, weight_total)`` and picks the entry whose
cumulative-weight interval contains the draw, so interval boundaries follow
insertion order:

    fanout 1 30   ->  [0, 30)
    fanout 4 70   ->  [30, 100)

The same structure backs the fan-out degree, the service class (DSCP) and the
per-flow sending-rate cap.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Iterator

import numpy as np


@dataclass(frozen=True)
class WeightedEntry:
    """Single ``(value, weight)`` row of a weighted distribution."""

    value: int
    weight: int

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"weight must be non-negative, got {self.weight}")


# Entries used when a category is absent from the configuration file
DEFAULT_FANOUT = WeightedEntry(value=1, weight=100)  # one target per request
DEFAULT_SERVICE = WeightedEntry(value=0, weight=100)  # unmarked traffic class
DEFAULT_RATE = WeightedEntry(value=0, weight=100)  # no per-flow rate cap

# Cumulative sums are kept as int64
MAX_WEIGHT_TOTAL = int(np.iinfo(np.int64).max)


@dataclass(frozen=True)
class WeightedDistribution:
    """Ordered weighted table with cumulative bookkeeping.

    ``weight_total`` and the cumulative boundaries are derived from
    ``entries`` at construction and cannot drift from them afterwards.

    Attributes:
        name: Category name used in log and error messages.
        entries: Entries in insertion (file) order.
        weight_total: Sum of all entry weights.
    """

    name: str
    entries: tuple[WeightedEntry, ...]
    weight_total: int = field(init=False)
    _cumulative: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        if not entries:
            raise ValueError(f"{self.name} distribution must have at least one entry")
        total = sum(e.weight for e in entries)
        if total > MAX_WEIGHT_TOTAL:
            raise ValueError(
                f"{self.name} weights sum to {total}, above {MAX_WEIGHT_TOTAL}"
            )
        weights = np.fromiter((e.weight for e in entries), dtype=np.int64)
        cumulative = np.cumsum(weights)
        cumulative.setflags(write=False)
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "weight_total", int(cumulative[-1]))
        object.__setattr__(self, "_cumulative", cumulative)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[WeightedEntry]:
        return iter(self.entries)

    @property
    def values(self) -> list[int]:
        return [e.value for e in self.entries]

    @property
    def weights(self) -> list[int]:
        return [e.weight for e in self.entries]

    def cumulative_weights(self) -> list[int]:
        """Return running weight sums in insertion order.

        The last element equals ``weight_total``.
        """
        return [int(x) for x in self._cumulative]

    def select_index(self, draw: int) -> int:
        """Return the index of the entry whose cumulative interval contains ``draw``.

        Entry ``i`` owns the half-open interval
        ``[cumulative[i-1], cumulative[i])``; zero-weight entries own an empty
        interval and are never returned.

        Args:
            draw: Integer in ``[0, weight_total)``.

        Returns:
            Index into ``entries`` of the selected entry.

        Raises:
            ValueError: If ``draw`` is outside ``[0, weight_total)``.
        """
        if not 0 <= draw < self.weight_total:
            raise ValueError(
                f"draw {draw} outside [0, {self.weight_total}) for {self.name}"
            )
        return int(np.searchsorted(self._cumulative, draw, side="right"))

    def select(self, draw: int) -> WeightedEntry:
        """Return the entry whose cumulative interval contains ``draw``."""
        return self.entries[self.select_index(draw)]

    def sample_index(self, rng: random.Random) -> int:
        """Draw one entry index with probability proportional to its weight."""
        if self.weight_total <= 0:
            raise ValueError(f"{self.name} distribution has zero total weight")
        return self.select_index(rng.randrange(self.weight_total))

    def sample(self, rng: random.Random) -> WeightedEntry:
        return self.entries[self.sample_index(rng)]

    def to_dict(self) -> dict[str, object]:
        return {
            "entries": [{"value": e.value, "weight": e.weight} for e in self.entries],
            "weight_total": self.weight_total,
        }


def synthesize_default(
    entries: Iterable[WeightedEntry], default: WeightedEntry
) -> tuple[WeightedEntry, ...]:
    """Return ``entries`` unchanged, or ``(default,)`` when there are none.

    Args:
        entries: Entries extracted from the configuration file.
        default: Single entry standing for "no effect" in this category.

    Returns:
        Final entry tuple with at least one element.
    """
    final = tuple(entries)
    if final:
        return final
    return (default,)
