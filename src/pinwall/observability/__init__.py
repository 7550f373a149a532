"""
Pinwall Observability Module.

Provides in-process metrics collection for pin operations and tag catalog writes.
"""

from pinwall.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
