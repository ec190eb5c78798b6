"""
Latency Calculator

Draws nested span timings. A child's window always sits inside the window
handed down by its parent.
"""

import random
from typing import Tuple

# Ceiling for the root span of a generated trace, in milliseconds
MAX_TRACE_DURATION_MS = 1200

# Below this budget a duration is no longer halved
MIN_SPLIT_DURATION_MS = 10


def random_duration(max_millis: int, rng: random.Random) -> int:
    """
    Draw a duration from the upper half of ``max_millis``.

    Small budgets are returned unchanged so that deep call chains stop
    shrinking instead of collapsing to zero.
    """
    if max_millis < MIN_SPLIT_DURATION_MS:
        return max_millis
    half = max_millis // 2
    return rng.randrange(half) + half


def span_window(offset_millis: int, budget_millis: int, rng: random.Random) -> Tuple[int, int]:
    """
    Place a span inside the window ``[offset_millis, offset_millis + budget_millis]``.

    Returns:
        Tuple of (start offset, duration) in milliseconds
    """
    duration = random_duration(budget_millis, rng)
    offset = offset_millis + random_duration(budget_millis - duration, rng)
    return offset, duration
