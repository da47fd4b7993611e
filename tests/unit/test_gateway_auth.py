"""Tests for bearer-token verification."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from config.settings import settings
from src.p2p_common.errors import UnauthenticatedError
from src.p2p_gateway.auth.dependencies import get_current_user_id
from src.p2p_gateway.auth.jwt_handler import create_access_token, decode_token


def _token(secret: str | None = None, **claims: object) -> str:
    now = datetime.now(UTC)
    payload = {"sub": "u1", "type": "access", "iat": now, "exp": now + timedelta(minutes=5)}
    payload.update(claims)
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm="HS256")


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestDecodeToken:
    def test_roundtrip(self) -> None:
        payload = decode_token(create_access_token("user-42"))
        assert payload["sub"] == "user-42"
        assert payload["type"] == "access"

    def test_wrong_signature(self) -> None:
        with pytest.raises(UnauthenticatedError):
            decode_token(_token(secret="someone-else"))

    def test_expired(self) -> None:
        past = datetime.now(UTC) - timedelta(hours=1)
        with pytest.raises(UnauthenticatedError):
            decode_token(_token(iat=past - timedelta(minutes=5), exp=past))

    def test_refresh_token_rejected(self) -> None:
        with pytest.raises(UnauthenticatedError):
            decode_token(_token(type="refresh"))

    def test_garbage(self) -> None:
        with pytest.raises(UnauthenticatedError):
            decode_token("not-a-jwt")


class TestCurrentUser:
    async def test_returns_subject(self) -> None:
        assert await get_current_user_id(_bearer(create_access_token("u7"))) == "u7"

    async def test_missing_header(self) -> None:
        with pytest.raises(UnauthenticatedError):
            await get_current_user_id(None)

    async def test_empty_subject(self) -> None:
        with pytest.raises(UnauthenticatedError):
            await get_current_user_id(_bearer(_token(sub="")))
