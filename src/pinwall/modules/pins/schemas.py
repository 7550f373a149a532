"""
Pinwall Pins - Schemas.

Pydantic models for stored pins, the user-relative pin view, and the
tagged outcome returned by pin interactions.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Stored Pin
# =============================================================================


class UserRef(BaseModel):
    """User reference as held by a pin (owner, saver, comment author)."""

    user_id: str
    display_name: str | None = None
    service: str | None = None


class PinComment(BaseModel):
    """Comment entry. Append-only."""

    id: str
    user: UserRef
    comment: str
    created_at: datetime | None = None


class PinTag(BaseModel):
    """Tag entry attached to a single pin."""

    id: str
    tag: str


class Pin(BaseModel):
    """Pin document as returned by the pin repository."""

    id: str
    image_link: str
    image_description: str = ""
    owner: UserRef
    saved_by: list[UserRef] = Field(default_factory=list)
    comments: list[PinComment] = Field(default_factory=list)
    tags: list[PinTag] = Field(default_factory=list)

    def saved_by_user(self, user_id: str) -> bool:
        return any(saver.user_id == user_id for saver in self.saved_by)


# =============================================================================
# Pin View (response)
# =============================================================================


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserView(CamelModel):
    name: str | None = None
    user_id: str
    service: str | None = None


class CommentView(CamelModel):
    id: str
    user_id: str
    display_name: str | None = None
    comment: str
    created_at: datetime | None = None


class TagView(CamelModel):
    id: str
    tag: str


class PinView(CamelModel):
    """Pin as seen by one requester."""

    id: str
    image_link: str
    image_description: str
    owner: UserView
    saved_by: list[UserView]
    owns: bool
    has_saved: bool
    comments: list[CommentView]
    tags: list[TagView]


# =============================================================================
# Requests
# =============================================================================


class CommentCreate(BaseModel):
    """Add a comment to a pin."""

    comment: str = Field(..., description="Comment text")


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeKind(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UPDATE_FAILED = "update_failed"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class PinOutcome:
    """
    Result of a pin interaction.

    Exactly one of the following holds:
    - kind is OK and ``view`` is set
    - kind is TRANSPORT_ERROR and ``error`` holds the storage exception
    - kind is NOT_FOUND, FORBIDDEN or UPDATE_FAILED and there is no payload
    """

    kind: OutcomeKind
    view: PinView | None = None
    error: Exception | None = None

    @classmethod
    def ok(cls, view: PinView) -> "PinOutcome":
        return cls(OutcomeKind.OK, view=view)

    @classmethod
    def no_body(cls, kind: OutcomeKind) -> "PinOutcome":
        if kind in (OutcomeKind.OK, OutcomeKind.TRANSPORT_ERROR):
            raise ValueError(f"{kind.value} outcome carries a payload")
        return cls(kind)

    @classmethod
    def transport_error(cls, error: Exception) -> "PinOutcome":
        return cls(OutcomeKind.TRANSPORT_ERROR, error=error)

    @property
    def is_ok(self) -> bool:
        return self.kind is OutcomeKind.OK
