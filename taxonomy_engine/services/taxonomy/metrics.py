"""Per-operation timings and a bounded error ledger for the taxonomy service."""

import threading
import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger

from taxonomy_engine.models.common import BaseEntity

ERRORS_PER_CONTEXT = 100


@dataclass
class OperationStats(BaseEntity):
    """Durations in seconds."""

    count: int = 0
    total: float = 0.0
    min: float = 0.0
    max: float = 0.0

    @property
    def average(self) -> float:
        return self.total / self.count if self.count else 0.0

    def add(self, duration: float) -> None:
        self.min = duration if self.count == 0 else min(self.min, duration)
        self.max = max(self.max, duration)
        self.total += duration
        self.count += 1

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "average": self.average}


class PerformanceTracker:
    """Timings per operation name plus the latest errors per context."""

    def __init__(self, timer: Callable[[], float] = time.perf_counter):
        self._timer = timer
        self._lock = threading.Lock()
        self._stats: dict[str, OperationStats] = {}
        self._errors: dict[str, deque] = {}

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Time the block; failed runs are timed too."""
        start = self._timer()
        try:
            yield
        finally:
            self.record(operation, self._timer() - start)

    def record(self, operation: str, duration: float) -> None:
        with self._lock:
            self._stats.setdefault(operation, OperationStats()).add(duration)

    def log_error(self, context: str, message: str) -> None:
        with self._lock:
            ledger = self._errors.setdefault(context, deque(maxlen=ERRORS_PER_CONTEXT))
            ledger.append({"time": datetime.now().isoformat(timespec="seconds"), "message": message})
        logger.debug("{}: {}", context, message)

    def metrics(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {name: stats.to_dict() for name, stats in sorted(self._stats.items())}

    def errors(self, context: str | None = None) -> dict[str, list[dict[str, str]]]:
        with self._lock:
            if context is not None:
                return {context: list(self._errors.get(context, ()))}
            return {name: list(entries) for name, entries in sorted(self._errors.items())}

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()
            self._errors.clear()
