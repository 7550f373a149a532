"""
Pinwall Core - Supabase Client.

Builds the client shared by the Supabase pin repository and tag catalog.
The demo credentials in the default settings are only accepted outside
production.
"""

import logging
from functools import lru_cache
from urllib.parse import urlparse

from supabase import Client, create_client

from pinwall.config import Settings, get_settings
from pinwall.exceptions import StorageNotConfiguredException

logger = logging.getLogger(__name__)


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client from settings.

    Raises StorageNotConfiguredException when production runs on the demo
    URL or service role key.
    """
    supabase = settings.supabase
    if settings.is_production and supabase.uses_demo_credentials:
        raise StorageNotConfiguredException(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in production"
        )
    if supabase.uses_demo_credentials:
        logger.warning("Supabase client is using demo credentials")

    logger.info(
        f"Connecting to Supabase at {urlparse(supabase.url).netloc} "
        f"[pins={supabase.pins_table}] [tags={supabase.tags_table}]"
    )
    return create_client(
        supabase_url=supabase.url,
        supabase_key=supabase.service_role_key,
    )


@lru_cache
def get_supabase_client() -> Client:
    """Shared client for the configured settings. Cached for the process."""
    return create_supabase_client(get_settings())
