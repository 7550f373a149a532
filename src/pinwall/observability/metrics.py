"""
Pinwall Metrics Store.

In-process metrics collection for observability without external dependencies.
Tracks:
- Pin operation latencies (per operation, percentiles)
- Outcome counts per operation (ok, not_found, forbidden, ...)
- Tag catalog writes (recorded / failed)

Thread-safe via locks. Singleton pattern for global access.
"""

from __future__ import annotations

import statistics
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any


@dataclass
class OperationMetrics:
    """Metrics for a single pin operation."""

    latencies_ms: list[float] = field(default_factory=list)
    outcome_counts: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    call_count: int = 0
    last_called: datetime | None = None

    # Keep last N latencies to avoid unbounded memory
    MAX_LATENCIES = 1000

    def record(self, outcome: str, ms: float) -> None:
        self.latencies_ms.append(ms)
        if len(self.latencies_ms) > self.MAX_LATENCIES:
            self.latencies_ms = self.latencies_ms[-self.MAX_LATENCIES :]
        self.outcome_counts[outcome] += 1
        self.call_count += 1
        self.last_called = datetime.now(timezone.utc)

    def get_percentiles(self) -> dict[str, float]:
        if not self.latencies_ms:
            return {}
        sorted_latencies = sorted(self.latencies_ms)
        n = len(sorted_latencies)
        return {
            "p50_ms": sorted_latencies[int(n * 0.5)],
            "p90_ms": sorted_latencies[int(n * 0.9)],
            "p99_ms": sorted_latencies[int(n * 0.99)] if n > 1 else sorted_latencies[-1],
            "mean_ms": statistics.mean(sorted_latencies),
            "max_ms": max(sorted_latencies),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "call_count": self.call_count,
            "last_called": self.last_called.isoformat() if self.last_called else None,
            **self.get_percentiles(),
            "outcomes": dict(self.outcome_counts),
        }


class MetricsStore:
    """
    Central metrics store for Pinwall observability.

    Thread-safe singleton for collecting metrics across the application.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._operations: dict[str, OperationMetrics] = defaultdict(OperationMetrics)
        self._tag_catalog: dict[str, int] = defaultdict(int)
        self._started_at = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Pin operations
    # -------------------------------------------------------------------------

    def record_operation(self, operation: str, outcome: str, ms: float) -> None:
        """Record one pin operation with its outcome kind and latency."""
        with self._lock:
            self._operations[operation].record(outcome, ms)

    # -------------------------------------------------------------------------
    # Tag catalog
    # -------------------------------------------------------------------------

    def record_tag_catalog(self, success: bool) -> None:
        """Record the result of a detached tag catalog write."""
        with self._lock:
            self._tag_catalog["recorded" if success else "failed"] += 1

    # -------------------------------------------------------------------------
    # Summary / Export
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of all metrics.

        Returns a dict suitable for JSON serialization and /metrics endpoint.
        """
        with self._lock:
            now = datetime.now(timezone.utc)
            uptime_seconds = (now - self._started_at).total_seconds()

            return {
                "uptime_seconds": round(uptime_seconds, 1),
                "collected_at": now.isoformat(),
                "operations": {name: metrics.to_dict() for name, metrics in self._operations.items()},
                "tag_catalog": {
                    "recorded": self._tag_catalog.get("recorded", 0),
                    "failed": self._tag_catalog.get("failed", 0),
                },
            }

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        with self._lock:
            self._operations.clear()
            self._tag_catalog.clear()
            self._started_at = datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Singleton accessor
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_metrics_store() -> MetricsStore:
    """Get the global MetricsStore singleton."""
    return MetricsStore()
