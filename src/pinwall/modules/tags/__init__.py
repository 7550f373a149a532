"""Pinwall Tags Module - system-wide tag catalog."""

from pinwall.modules.tags.catalog import (
    InMemoryTagCatalog,
    SupabaseTagCatalog,
    TagCatalog,
    get_tag_catalog,
)

__all__ = ["TagCatalog", "InMemoryTagCatalog", "SupabaseTagCatalog", "get_tag_catalog"]
