"""
Pinwall Pins - Repository.

Storage contract for pin documents plus two adapters:

- InMemoryPinRepository: dict-backed, used for development and tests
- SupabasePinRepository: ``pins`` table in Supabase

Stored row shape (both adapters)::

    {
        "id": str,
        "image_link": str,
        "image_description": str,
        "owner_id": str,
        "saved_by": [{"user_id", "display_name", "service"}],
        "comments": [{"id", "user_id", "comment", "created_at"}],
        "tags": [{"id", "tag"}],
    }

Updates are partial: ``set`` replaces one list field, ``push`` appends one
entry to it. Neither is conditional; callers that read before writing get
no protection against concurrent writers.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Literal
from uuid import uuid4

from supabase import Client

from pinwall.config import get_settings
from pinwall.core.supabase_client import get_supabase_client
from pinwall.modules.pins.schemas import Pin, PinComment, PinTag, UserRef

logger = logging.getLogger(__name__)

PinListField = Literal["saved_by", "comments", "tags"]
ExpandField = Literal["owner", "saved_by", "comments"]

LIST_FIELDS: tuple[str, ...] = ("saved_by", "comments", "tags")
DEFAULT_EXPAND: tuple[ExpandField, ...] = ("owner", "saved_by", "comments")


@dataclass(frozen=True)
class PinChange:
    """A single partial update to one list field of a pin."""

    op: Literal["set", "push"]
    field: PinListField
    value: Any

    def __post_init__(self):
        if self.field not in LIST_FIELDS:
            raise ValueError(f"Unsupported pin field: {self.field}")
        if self.op == "set" and not isinstance(self.value, list):
            raise ValueError("set expects the full list value")
        if self.op == "push" and not isinstance(self.value, dict):
            raise ValueError("push expects a single entry")

    @classmethod
    def set_field(cls, field: PinListField, value: list[dict[str, Any]]) -> PinChange:
        return cls("set", field, value)

    @classmethod
    def push_item(cls, field: PinListField, item: dict[str, Any]) -> PinChange:
        return cls("push", field, item)


def stamp_entry(field: str, item: dict[str, Any]) -> dict[str, Any]:
    """Assign the generated keys a pushed list entry is stored with."""
    stamped = dict(item)
    stamped.setdefault("id", uuid4().hex)
    if field == "comments":
        stamped.setdefault("created_at", datetime.now(timezone.utc).isoformat())
    return stamped


def build_pin(
    row: dict[str, Any],
    users: dict[str, dict[str, Any]] | None = None,
    expand: Iterable[str] = (),
) -> Pin:
    """
    Convert a stored row into a Pin.

    ``users`` maps user id -> {"display_name", "service"}; it is consulted
    only for the fields named in ``expand``.
    """
    users = users or {}
    expand = set(expand)

    def ref(user_id: str, stored: dict[str, Any] | None = None, expanded: bool = False) -> UserRef:
        data = {"user_id": user_id}
        if stored:
            data["display_name"] = stored.get("display_name")
            data["service"] = stored.get("service")
        if expanded and user_id in users:
            data["display_name"] = users[user_id].get("display_name")
            data["service"] = users[user_id].get("service")
        return UserRef(**data)

    return Pin(
        id=str(row["id"]),
        image_link=row.get("image_link") or "",
        image_description=row.get("image_description") or "",
        owner=ref(str(row["owner_id"]), expanded="owner" in expand),
        saved_by=[
            ref(str(s["user_id"]), stored=s, expanded="saved_by" in expand)
            for s in row.get("saved_by") or []
        ],
        comments=[
            PinComment(
                id=str(c["id"]),
                user=ref(str(c["user_id"]), expanded="comments" in expand),
                comment=c["comment"],
                created_at=c.get("created_at"),
            )
            for c in row.get("comments") or []
        ],
        tags=[PinTag(id=str(t["id"]), tag=t["tag"]) for t in row.get("tags") or []],
    )


def referenced_user_ids(row: dict[str, Any], expand: Iterable[str]) -> list[str]:
    """User ids an expansion of ``row`` needs to resolve, in first-seen order."""
    expand = set(expand)
    ids: list[str] = []
    if "owner" in expand:
        ids.append(str(row["owner_id"]))
    if "saved_by" in expand:
        ids.extend(str(s["user_id"]) for s in row.get("saved_by") or [])
    if "comments" in expand:
        ids.extend(str(c["user_id"]) for c in row.get("comments") or [])
    return list(dict.fromkeys(ids))


class PinRepository(ABC):
    """Abstract pin store."""

    @abstractmethod
    async def find_by_id(self, pin_id: str) -> Pin | None:
        """Return the pin, or None if it does not exist."""
        ...

    @abstractmethod
    async def update_by_id(
        self,
        pin_id: str,
        change: PinChange,
        expand: Iterable[ExpandField] = DEFAULT_EXPAND,
    ) -> Pin | None:
        """Apply ``change`` and return the updated pin, or None if it is gone."""
        ...


# =============================================================================
# In-memory adapter
# =============================================================================


class InMemoryPinRepository(PinRepository):
    """Dict-backed pin store. Rows are copied in and out."""

    def __init__(
        self,
        rows: Iterable[dict[str, Any]] = (),
        users: dict[str, dict[str, Any]] | None = None,
    ):
        self._rows: dict[str, dict[str, Any]] = {}
        self._users: dict[str, dict[str, Any]] = copy.deepcopy(users or {})
        for row in rows:
            self.add(row)

    def add(self, row: dict[str, Any]) -> None:
        """Insert or replace a stored row."""
        stored = copy.deepcopy(row)
        for field in LIST_FIELDS:
            stored.setdefault(field, [])
        self._rows[str(stored["id"])] = stored

    def register_user(self, user_id: str, display_name: str | None, service: str | None = None) -> None:
        self._users[user_id] = {"display_name": display_name, "service": service}

    def get_row(self, pin_id: str) -> dict[str, Any] | None:
        row = self._rows.get(pin_id)
        return copy.deepcopy(row) if row is not None else None

    async def find_by_id(self, pin_id: str) -> Pin | None:
        row = self._rows.get(pin_id)
        if row is None:
            return None
        return build_pin(copy.deepcopy(row))

    async def update_by_id(
        self,
        pin_id: str,
        change: PinChange,
        expand: Iterable[ExpandField] = DEFAULT_EXPAND,
    ) -> Pin | None:
        row = self._rows.get(pin_id)
        if row is None:
            return None

        if change.op == "set":
            row[change.field] = copy.deepcopy(change.value)
        else:
            row[change.field].append(stamp_entry(change.field, copy.deepcopy(change.value)))

        return build_pin(copy.deepcopy(row), self._users, expand)


# =============================================================================
# Supabase adapter
# =============================================================================


class SupabasePinRepository(PinRepository):
    """
    Pin store backed by Supabase.

    Schema expectation:
    - pins(id text primary key, image_link text, image_description text,
      owner_id text references users(id), saved_by jsonb, comments jsonb,
      tags jsonb)
    - users(id text primary key, display_name text, service text)
    - function append_pin_item(pin_id text, field text, item jsonb)
      returns setof pins: appends ``item`` to the named jsonb array and
      returns the updated row (no row when the pin does not exist)
    """

    def __init__(self, client: Client | None = None):
        self._client = client or get_supabase_client()
        settings = get_settings()
        self._table_name = settings.supabase.pins_table
        self._users_table_name = settings.supabase.users_table

    @property
    def table(self):
        return self._client.table(self._table_name)

    @property
    def users_table(self):
        return self._client.table(self._users_table_name)

    async def find_by_id(self, pin_id: str) -> Pin | None:
        query = self.table.select("*").eq("id", pin_id).maybe_single()
        response = await asyncio.to_thread(query.execute)
        if response is None or not response.data:
            return None
        return build_pin(response.data)

    async def update_by_id(
        self,
        pin_id: str,
        change: PinChange,
        expand: Iterable[ExpandField] = DEFAULT_EXPAND,
    ) -> Pin | None:
        if change.op == "set":
            query = self.table.update({change.field: change.value}).eq("id", pin_id)
        else:
            query = self._client.rpc(
                "append_pin_item",
                {
                    "pin_id": pin_id,
                    "field": change.field,
                    "item": stamp_entry(change.field, change.value),
                },
            )
        response = await asyncio.to_thread(query.execute)

        row = self._first_row(response.data)
        if row is None:
            logger.info(f"Pin {pin_id} returned no row after {change.op} {change.field}")
            return None

        expand = tuple(expand)
        return build_pin(row, await self._load_users(referenced_user_ids(row, expand)), expand)

    async def _load_users(self, user_ids: list[str]) -> dict[str, dict[str, Any]]:
        if not user_ids:
            return {}
        query = self.users_table.select("id, display_name, service").in_("id", user_ids)
        response = await asyncio.to_thread(query.execute)
        return {
            str(u["id"]): {"display_name": u.get("display_name"), "service": u.get("service")}
            for u in response.data or []
        }

    @staticmethod
    def _first_row(data: Any) -> dict[str, Any] | None:
        if isinstance(data, list):
            return data[0] if data else None
        return data or None


@lru_cache(maxsize=1)
def _memory_repository() -> InMemoryPinRepository:
    return InMemoryPinRepository()


def get_pin_repository() -> PinRepository:
    """Repository for the configured storage backend."""
    if get_settings().storage_backend == "supabase":
        return SupabasePinRepository()
    return _memory_repository()
