"""Pinwall Core - shared infrastructure (storage client, background tasks)."""

from pinwall.core.background import BackgroundTaskRegistry, get_background_tasks

__all__ = ["BackgroundTaskRegistry", "get_background_tasks"]
