"""
Pinwall Pins - View shaping.

Turns a stored Pin into the view a specific requester receives: ownership
and saved flags computed against the requester, and user references
re-keyed to the response shape.
"""

from pinwall.auth.schemas import User
from pinwall.modules.pins.schemas import (
    CommentView,
    Pin,
    PinComment,
    PinTag,
    PinView,
    TagView,
    UserRef,
    UserView,
)


def _user_view(ref: UserRef) -> UserView:
    return UserView(name=ref.display_name, user_id=ref.user_id, service=ref.service)


def _comment_view(comment: PinComment) -> CommentView:
    return CommentView(
        id=comment.id,
        user_id=comment.user.user_id,
        display_name=comment.user.display_name,
        comment=comment.comment,
        created_at=comment.created_at,
    )


def _tag_view(tag: PinTag) -> TagView:
    return TagView(id=tag.id, tag=tag.tag)


def shape_pin(pin: Pin, requester: User) -> PinView:
    """Build the requester-relative view of ``pin``. Does not modify ``pin``."""
    return PinView(
        id=pin.id,
        image_link=pin.image_link,
        image_description=pin.image_description,
        owner=_user_view(pin.owner),
        saved_by=[_user_view(saver) for saver in pin.saved_by],
        owns=pin.owner.user_id == requester.user_id,
        has_saved=pin.saved_by_user(requester.user_id),
        comments=[_comment_view(c) for c in pin.comments],
        tags=[_tag_view(t) for t in pin.tags],
    )
