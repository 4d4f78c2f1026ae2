"""Random seed establishment for a client run."""

from __future__ import annotations

import random as _random
import time

from flowgen.log_config import get_logger

logger = get_logger(__name__)


def resolve_seed(seed: int | None = None) -> int:
    """Return the seed to use for this run.

    A seed of ``0`` or ``None`` means "derive from the current time" and is
    replaced by the wall clock in microseconds.

    Args:
        seed: Seed requested on the command line, if any.

    Returns:
        Non-zero seed value.
    """
    if seed:
        logger.debug(f"Using random seed {seed}")
        return int(seed)
    derived = time.time_ns() // 1000
    logger.debug(f"Derived random seed {derived} from system time")
    return derived


def make_rng(seed: int | None = None) -> _random.Random:
    """Create the run's random generator, seeded once."""
    return _random.Random(resolve_seed(seed))
