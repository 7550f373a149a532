"""
Pinwall Pins - Service.

Business logic for pin interactions: save/unsave, comments, and tags.

Every public method returns a PinOutcome instead of raising. Storage
errors become TRANSPORT_ERROR outcomes carrying the original exception.

Save, unsave and tag removal read the pin, compute the new list locally and
write it back with ``set``. The read and the write are separate storage
calls, so two concurrent saves by the same user can both pass the
duplicate check.
"""

import logging
import time
from collections.abc import Awaitable
from typing import Literal

from pinwall.auth.schemas import User
from pinwall.core.background import BackgroundTaskRegistry, get_background_tasks
from pinwall.exceptions import ValidationException
from pinwall.modules.pins.repository import (
    DEFAULT_EXPAND,
    PinChange,
    PinRepository,
    get_pin_repository,
)
from pinwall.modules.pins.schemas import OutcomeKind, Pin, PinOutcome
from pinwall.modules.pins.shaper import shape_pin
from pinwall.modules.tags.catalog import TagCatalog, get_tag_catalog
from pinwall.observability.metrics import MetricsStore, get_metrics_store

logger = logging.getLogger(__name__)

ToggleAction = Literal["save", "unsave"]


class PinsService:
    """Service for pin interactions."""

    def __init__(
        self,
        repository: PinRepository | None = None,
        tag_catalog: TagCatalog | None = None,
        background: BackgroundTaskRegistry | None = None,
        metrics: MetricsStore | None = None,
    ):
        self.repository = repository or get_pin_repository()
        self.tag_catalog = tag_catalog or get_tag_catalog()
        self.background = background or get_background_tasks()
        self.metrics = metrics or get_metrics_store()

    # -------------------------------------------------------------------------
    # Save / unsave
    # -------------------------------------------------------------------------

    async def pin(self, pin_id: str, user: User) -> PinOutcome:
        """Add the user to the pin's savers."""
        return await self.pin_toggle(pin_id, user, "save")

    async def unpin(self, pin_id: str, user: User) -> PinOutcome:
        """Remove the user from the pin's savers."""
        return await self.pin_toggle(pin_id, user, "unsave")

    async def pin_toggle(self, pin_id: str, user: User, action: ToggleAction) -> PinOutcome:
        operation = "pin" if action == "save" else "unpin"
        return await self._run(operation, pin_id, self._toggle(pin_id, user, action))

    async def _toggle(self, pin_id: str, user: User, action: ToggleAction) -> PinOutcome:
        pin = await self.repository.find_by_id(pin_id)
        if pin is None:
            return PinOutcome.no_body(OutcomeKind.NOT_FOUND)

        savers = [saver.model_dump() for saver in pin.saved_by]
        if action == "save":
            # Already saved is reported the same way as a missing pin
            if pin.saved_by_user(user.user_id):
                logger.info(f"User {user.user_id} already saved pin {pin_id}")
                return PinOutcome.no_body(OutcomeKind.NOT_FOUND)
            savers.append(user.identity())
        else:
            savers = [s for s in savers if s["user_id"] != user.user_id]

        updated = await self.repository.update_by_id(
            pin_id, PinChange.set_field("saved_by", savers), DEFAULT_EXPAND
        )
        return self._shaped(updated, user)

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def add_comment(self, pin_id: str, user: User, comment: str) -> PinOutcome:
        """Append a comment by the user. Any authenticated user may comment."""
        if not comment:
            raise ValidationException("Comment must not be empty")
        return await self._run("add_comment", pin_id, self._add_comment(pin_id, user, comment))

    async def _add_comment(self, pin_id: str, user: User, comment: str) -> PinOutcome:
        updated = await self.repository.update_by_id(
            pin_id,
            PinChange.push_item("comments", {"user_id": user.user_id, "comment": comment}),
            DEFAULT_EXPAND,
        )
        return self._shaped(updated, user)

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def update_tags(
        self,
        pin_id: str,
        user: User,
        *,
        tag: str | None = None,
        delete_id: str | None = None,
    ) -> PinOutcome:
        """
        Add a tag (``tag``) or remove one by id (``delete_id``).

        Only the pin owner may change its tags. Once the pin update succeeds,
        a new tag is also recorded in the tag catalog in the background.
        """
        if (tag is None) == (delete_id is None):
            raise ValidationException("Provide exactly one of 'tag' or 'deleteId'")
        if tag == "" or delete_id == "":
            raise ValidationException("'tag' and 'deleteId' must not be empty")
        return await self._run(
            "update_tags", pin_id, self._update_tags(pin_id, user, tag, delete_id)
        )

    async def _update_tags(
        self,
        pin_id: str,
        user: User,
        tag: str | None,
        delete_id: str | None,
    ) -> PinOutcome:
        pin = await self.repository.find_by_id(pin_id)
        if pin is None:
            return PinOutcome.no_body(OutcomeKind.NOT_FOUND)

        if pin.owner.user_id != user.user_id:
            logger.warning(f"User {user.user_id} tried to edit tags of pin {pin_id} owned by {pin.owner.user_id}")
            return PinOutcome.no_body(OutcomeKind.FORBIDDEN)

        if tag is not None:
            change = PinChange.push_item("tags", {"tag": tag})
        else:
            remaining = [t.model_dump() for t in pin.tags if t.id != delete_id]
            change = PinChange.set_field("tags", remaining)

        updated = await self.repository.update_by_id(pin_id, change, DEFAULT_EXPAND)
        if updated is not None and tag is not None:
            self._record_tag(tag)
        return self._shaped(updated, user)

    def _record_tag(self, tag: str) -> None:
        """Write ``tag`` to the catalog without joining the write."""

        async def write() -> None:
            try:
                await self.tag_catalog.record(tag)
            except Exception as e:
                self.metrics.record_tag_catalog(success=False)
                logger.warning(f"Tag catalog write failed for '{tag}': {type(e).__name__}: {e}")
                return
            self.metrics.record_tag_catalog(success=True)

        self.background.spawn(write(), name=f"tag-catalog:{tag}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _shaped(self, updated: Pin | None, user: User) -> PinOutcome:
        if updated is None:
            return PinOutcome.no_body(OutcomeKind.UPDATE_FAILED)
        return PinOutcome.ok(shape_pin(updated, user))

    async def _run(self, operation: str, pin_id: str, work: Awaitable[PinOutcome]) -> PinOutcome:
        """Await ``work``, turning storage errors into outcomes and recording metrics."""
        started = time.perf_counter()
        try:
            outcome = await work
        except Exception as e:
            logger.exception(f"{operation} on pin {pin_id} failed in storage: {e}")
            outcome = PinOutcome.transport_error(e)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.metrics.record_operation(operation, outcome.kind.value, elapsed_ms)
        if not outcome.is_ok and outcome.kind is not OutcomeKind.TRANSPORT_ERROR:
            logger.info(f"{operation} on pin {pin_id} -> {outcome.kind.value}")
        return outcome
