"""Per-stage latency tracking for a single pipeline run."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class Timer:
    """Simple context timer."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0


class StageTimings:
    """Collects elapsed milliseconds per named stage of one request."""

    def __init__(self) -> None:
        self._timings: dict[str, float] = {}

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        with Timer() as timer:
            yield
        self._timings[name] = timer.elapsed_ms
        logger.debug("stage=%s latency_ms=%.2f", name, timer.elapsed_ms)

    def as_dict(self) -> dict[str, float]:
        return dict(self._timings)

    @property
    def total_ms(self) -> float:
        return sum(self._timings.values())
