from __future__ import annotations

import time
from datetime import datetime, timezone


def perf_now() -> float:
    """Monotonic timer for stage and run durations."""

    return time.perf_counter()


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since `start` (from perf_now())."""

    return round((time.perf_counter() - start) * 1000, 2)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
