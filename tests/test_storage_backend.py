"""
Tests for storage backend selection and the Supabase client.
"""

from unittest.mock import MagicMock

import pytest

from pinwall.config import Settings, get_settings
from pinwall.core import supabase_client
from pinwall.exceptions import StorageNotConfiguredException
from pinwall.modules.pins import repository as pins_repository
from pinwall.modules.pins.repository import (
    InMemoryPinRepository,
    SupabasePinRepository,
    get_pin_repository,
)
from pinwall.modules.tags import catalog as tags_catalog
from pinwall.modules.tags.catalog import InMemoryTagCatalog, SupabaseTagCatalog, get_tag_catalog


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(pins_repository, "get_supabase_client", lambda: client)
    monkeypatch.setattr(tags_catalog, "get_supabase_client", lambda: client)
    return client


class TestBackendSelection:
    """STORAGE_BACKEND picks the adapters."""

    def test_memory_by_default(self, fake_client):
        assert isinstance(get_pin_repository(), InMemoryPinRepository)
        assert isinstance(get_tag_catalog(), InMemoryTagCatalog)

    def test_memory_adapters_are_shared(self):
        assert get_pin_repository() is get_pin_repository()
        assert get_tag_catalog() is get_tag_catalog()

    def test_supabase_backend(self, monkeypatch, fake_client):
        monkeypatch.setenv("STORAGE_BACKEND", "supabase")
        get_settings.cache_clear()

        repository = get_pin_repository()
        catalog = get_tag_catalog()

        assert isinstance(repository, SupabasePinRepository)
        assert isinstance(catalog, SupabaseTagCatalog)
        assert repository._client is fake_client
        assert catalog._client is fake_client

    @pytest.mark.asyncio
    async def test_supabase_catalog_writes_through_shared_client(self, monkeypatch, fake_client):
        monkeypatch.setenv("STORAGE_BACKEND", "supabase")
        get_settings.cache_clear()

        await get_tag_catalog().record("landscape")

        fake_client.table.assert_called_with("saved_tags")
        fake_client.table.return_value.insert.assert_called_once_with({"tag": "landscape"})


class TestSupabaseClient:
    """Client construction from settings."""

    def test_creates_client_from_settings(self, monkeypatch):
        create_client = MagicMock()
        monkeypatch.setattr(supabase_client, "create_client", create_client)
        monkeypatch.setenv("SUPABASE_URL", "https://pins.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

        client = supabase_client.create_supabase_client(Settings())

        assert client is create_client.return_value
        create_client.assert_called_once_with(
            supabase_url="https://pins.supabase.co",
            supabase_key="service-key",
        )

    def test_demo_credentials_allowed_outside_production(self, monkeypatch):
        create_client = MagicMock()
        monkeypatch.setattr(supabase_client, "create_client", create_client)

        supabase_client.create_supabase_client(Settings())

        create_client.assert_called_once()

    def test_demo_credentials_rejected_in_production(self, monkeypatch):
        create_client = MagicMock()
        monkeypatch.setattr(supabase_client, "create_client", create_client)
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("SUPABASE_URL", "https://pins.supabase.co")

        with pytest.raises(StorageNotConfiguredException) as exc_info:
            supabase_client.create_supabase_client(Settings())

        assert exc_info.value.code == "STORAGE_NOT_CONFIGURED"
        assert exc_info.value.status_code == 503
        create_client.assert_not_called()

    def test_shared_client_is_cached(self, monkeypatch):
        create_client = MagicMock()
        monkeypatch.setattr(supabase_client, "create_client", create_client)
        supabase_client.get_supabase_client.cache_clear()
        try:
            first = supabase_client.get_supabase_client()
            second = supabase_client.get_supabase_client()
        finally:
            supabase_client.get_supabase_client.cache_clear()

        assert first is second
        create_client.assert_called_once()
