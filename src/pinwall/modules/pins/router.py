"""
Pinwall Pins - Router.

API endpoints for pin interactions.

Failed interactions answer with an empty body; the status tells them apart.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, Response

from pinwall.auth import User, get_current_user
from pinwall.deps import require_comments, require_pins, require_tags
from pinwall.modules.pins.schemas import CommentCreate, OutcomeKind, PinOutcome, PinView
from pinwall.modules.pins.service import PinsService
from pinwall.schemas import ErrorResponse

router = APIRouter(
    prefix="/pins",
    tags=["pins"],
    responses={
        401: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)

NO_BODY_STATUS = {
    OutcomeKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OutcomeKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    OutcomeKind.UPDATE_FAILED: status.HTTP_409_CONFLICT,
}


def get_service() -> PinsService:
    """Get pins service instance."""
    return PinsService()


def to_response(outcome: PinOutcome) -> Response:
    """Map a service outcome to an HTTP response."""
    if outcome.is_ok:
        return JSONResponse(content=outcome.view.model_dump(mode="json", by_alias=True))
    if outcome.kind is OutcomeKind.TRANSPORT_ERROR:
        error = outcome.error
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"name": type(error).__name__, "message": str(error)},
        )
    return Response(status_code=NO_BODY_STATUS[outcome.kind])


@router.put("/{pin_id}/save", response_model=PinView, dependencies=[require_pins])
async def pin_image(
    pin_id: str,
    user: User = Depends(get_current_user),
    service: PinsService = Depends(get_service),
):
    """Save a pin to the requester's collection."""
    return to_response(await service.pin(pin_id, user))


@router.put("/{pin_id}/unsave", response_model=PinView, dependencies=[require_pins])
async def unpin_image(
    pin_id: str,
    user: User = Depends(get_current_user),
    service: PinsService = Depends(get_service),
):
    """Remove a pin from the requester's collection."""
    return to_response(await service.unpin(pin_id, user))


@router.put("/{pin_id}/comments", response_model=PinView, dependencies=[require_comments])
async def add_comment(
    pin_id: str,
    request: CommentCreate,
    user: User = Depends(get_current_user),
    service: PinsService = Depends(get_service),
):
    """Comment on a pin."""
    return to_response(await service.add_comment(pin_id, user, request.comment))


@router.put("/{pin_id}/tags", response_model=PinView, dependencies=[require_tags])
async def update_tags(
    pin_id: str,
    tag: str | None = Query(default=None),
    delete_id: str | None = Query(default=None, alias="deleteId"),
    user: User = Depends(get_current_user),
    service: PinsService = Depends(get_service),
):
    """Add a tag or remove one by id. Owner only."""
    return to_response(
        await service.update_tags(pin_id, user, tag=tag, delete_id=delete_id)
    )
