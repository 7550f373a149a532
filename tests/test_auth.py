"""Access token issuing and validation."""

from datetime import datetime, timedelta, timezone

import pytest

from pinwall.auth import create_access_token, decode_access_token
from pinwall.config import Settings
from pinwall.exceptions import UnauthorizedException


def test_token_round_trip_carries_identity():
    settings = Settings()

    token, expires_in = create_access_token(
        settings=settings, user_id="u-me", display_name="tester-twitter", service="twitter"
    )
    claims = decode_access_token(token, settings)

    assert expires_in == settings.auth.access_token_ttl_seconds
    assert claims.sub == "u-me"
    assert claims.name == "tester-twitter"
    assert claims.service == "twitter"


def test_expired_token_rejected():
    settings = Settings()
    issued = datetime.now(timezone.utc) - timedelta(days=1)

    token, _ = create_access_token(settings=settings, user_id="u-me", now=issued)

    with pytest.raises(UnauthorizedException):
        decode_access_token(token, settings)


def test_wrong_secret_rejected(monkeypatch):
    token, _ = create_access_token(settings=Settings(), user_id="u-me")

    monkeypatch.setenv("AUTH_JWT_SECRET", "another-secret")
    with pytest.raises(UnauthorizedException):
        decode_access_token(token, Settings())


def test_user_id_required():
    with pytest.raises(ValueError):
        create_access_token(settings=Settings(), user_id="  ")
