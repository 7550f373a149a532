"""Shared fixtures for pin interaction tests."""

import pytest

from pinwall.auth.schemas import User
from pinwall.core.background import BackgroundTaskRegistry
from pinwall.modules.pins.repository import InMemoryPinRepository
from pinwall.modules.pins.service import PinsService
from pinwall.modules.tags.catalog import InMemoryTagCatalog
from pinwall.observability.metrics import MetricsStore

USERS = {
    "u-me": {"display_name": "tester-twitter", "service": "twitter"},
    "u-other": {"display_name": "tester-another", "service": "other-service"},
    "u-google": {"display_name": "tester-google", "service": "google"},
}


def pin_rows():
    return [
        {
            "id": "1",
            "image_link": "https://stub-1",
            "image_description": "description-1",
            "owner_id": "u-me",
            "saved_by": [],
            "comments": [],
            "tags": [{"id": "t-1", "tag": "sunset"}, {"id": "t-2", "tag": "beach"}],
        },
        {
            "id": "2",
            "image_link": "https://stub-2",
            "image_description": "description-2",
            "owner_id": "u-google",
            "saved_by": [{"user_id": "u-me", "display_name": "tester-twitter", "service": "twitter"}],
            "comments": [],
            "tags": [],
        },
        {
            "id": "3",
            "image_link": "https://stub-3",
            "image_description": "description-3",
            "owner_id": "u-other",
            "saved_by": [{"user_id": "u-other", "display_name": "tester-another", "service": "other-service"}],
            "comments": [
                {
                    "id": "comment-1",
                    "user_id": "u-google",
                    "comment": "unit tests",
                    "created_at": "2024-05-01T12:00:00+00:00",
                }
            ],
            "tags": [],
        },
    ]


class RecordingPinRepository(InMemoryPinRepository):
    """In-memory repository that records every call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.find_calls = []
        self.update_calls = []

    async def find_by_id(self, pin_id):
        self.find_calls.append(pin_id)
        return await super().find_by_id(pin_id)

    async def update_by_id(self, pin_id, change, expand=("owner", "saved_by", "comments")):
        self.update_calls.append((pin_id, change, tuple(expand)))
        return await super().update_by_id(pin_id, change, expand)


class VanishingPinRepository(RecordingPinRepository):
    """Pin exists on read but the update returns nothing (deleted in between)."""

    async def update_by_id(self, pin_id, change, expand=("owner", "saved_by", "comments")):
        self.update_calls.append((pin_id, change, tuple(expand)))
        return None


class BrokenPinRepository(RecordingPinRepository):
    """Every storage call is rejected."""

    async def find_by_id(self, pin_id):
        self.find_calls.append(pin_id)
        raise ConnectionError("Mocked rejection")

    async def update_by_id(self, pin_id, change, expand=("owner", "saved_by", "comments")):
        self.update_calls.append((pin_id, change, tuple(expand)))
        raise ConnectionError("Mocked rejection")


class RejectedUpdatePinRepository(RecordingPinRepository):
    """Reads succeed but every update is rejected."""

    async def update_by_id(self, pin_id, change, expand=("owner", "saved_by", "comments")):
        self.update_calls.append((pin_id, change, tuple(expand)))
        raise ConnectionError("Mocked rejection")


class FailingTagCatalog(InMemoryTagCatalog):
    """Catalog whose writes always fail."""

    async def record(self, tag):
        raise RuntimeError("catalog unavailable")


@pytest.fixture
def me():
    return User(user_id="u-me", display_name="tester-twitter", service="twitter")


@pytest.fixture
def other():
    return User(user_id="u-other", display_name="tester-another", service="other-service")


@pytest.fixture
def repository():
    return RecordingPinRepository(pin_rows(), users=USERS)


@pytest.fixture
def catalog():
    return InMemoryTagCatalog()


@pytest.fixture
def registry():
    return BackgroundTaskRegistry()


@pytest.fixture
def metrics():
    return MetricsStore()


@pytest.fixture
def service(repository, catalog, registry, metrics):
    return PinsService(
        repository=repository,
        tag_catalog=catalog,
        background=registry,
        metrics=metrics,
    )
