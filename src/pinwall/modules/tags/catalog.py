"""
Pinwall Tags - Catalog.

Append-only log of tag texts used anywhere on the board. Pin routes write
to it without waiting for the result; nothing in the pin flow reads it.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache

from supabase import Client

from pinwall.config import get_settings
from pinwall.core.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


class TagCatalog(ABC):
    """Append-only tag log."""

    @abstractmethod
    async def record(self, tag: str) -> None:
        """Append ``tag`` to the catalog."""
        ...


class InMemoryTagCatalog(TagCatalog):
    """Process-local catalog, for development and tests."""

    def __init__(self):
        self.entries: list[dict[str, str]] = []

    async def record(self, tag: str) -> None:
        self.entries.append(
            {"tag": tag, "created_at": datetime.now(timezone.utc).isoformat()}
        )

    @property
    def tags(self) -> list[str]:
        return [entry["tag"] for entry in self.entries]


class SupabaseTagCatalog(TagCatalog):
    """
    Catalog stored in Supabase.

    IMMUTABLE: Only INSERT operations allowed.
    """

    def __init__(self, client: Client | None = None):
        self._client = client or get_supabase_client()
        self._table_name = get_settings().supabase.tags_table

    @property
    def table(self):
        return self._client.table(self._table_name)

    async def record(self, tag: str) -> None:
        await asyncio.to_thread(self.table.insert({"tag": tag}).execute)
        logger.debug(f"Recorded tag '{tag}' in {self._table_name}")


@lru_cache(maxsize=1)
def _memory_catalog() -> InMemoryTagCatalog:
    return InMemoryTagCatalog()


def get_tag_catalog() -> TagCatalog:
    """Catalog for the configured storage backend."""
    if get_settings().storage_backend == "supabase":
        return SupabaseTagCatalog()
    return _memory_catalog()
