"""Unit tests for JWT handler and the bearer identity dependency."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from config.settings import settings
from src.em_common.errors import InvalidCredentialsError
from src.em_gateway.auth.dependencies import get_current_identity
from src.em_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("seller-1")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "seller-1"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    token = create_access_token("buyer-1")
    assert decode_token(token)["sub"] == "buyer-1"


def test_expired_token_raises_credentials_error() -> None:
    token = create_access_token("buyer-1", expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_raises_credentials_error() -> None:
    token = jwt.encode({"sub": "buyer-1", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_token_rejected() -> None:
    token = jwt.encode(
        {"sub": "buyer-1", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256"
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_token_without_subject_rejected() -> None:
    token = jwt.encode({"type": "access"}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


@pytest.mark.asyncio
async def test_dependency_returns_identity() -> None:
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("owner"))
    assert await get_current_identity(creds) == "owner"


@pytest.mark.asyncio
async def test_dependency_without_credentials_is_401() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_current_identity(None)
    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


@pytest.mark.asyncio
async def test_dependency_with_garbage_token_is_401() -> None:
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="not-a-jwt")
    with pytest.raises(HTTPException) as exc_info:
        await get_current_identity(creds)
    assert exc_info.value.status_code == 401
