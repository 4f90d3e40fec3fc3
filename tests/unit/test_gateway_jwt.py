"""Unit tests for JWT handler."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.mm_common.errors import InvalidCredentialsError
from src.mm_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("12345", is_admin=True, is_default_password=True)
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "12345"
    assert payload["type"] == "access"
    assert payload["is_admin"] is True
    assert payload["is_default_password"] is True


def test_defaults_are_non_admin() -> None:
    payload = jwt.get_unverified_claims(create_access_token("12345"))
    assert payload["is_admin"] is False
    assert payload["is_default_password"] is False


def test_decode_valid_token() -> None:
    payload = decode_token(create_access_token("54321"))
    assert payload["sub"] == "54321"


def test_tampered_token_raises() -> None:
    token = create_access_token("12345")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token[:-4] + "AAAA")


def test_wrong_secret_raises() -> None:
    forged = jwt.encode(
        {"sub": "00000", "type": "access", "exp": datetime.now(UTC) + timedelta(minutes=5)},
        "not-the-secret",
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(forged)


def test_expired_token_raises() -> None:
    expired = jwt.encode(
        {"sub": "12345", "type": "access", "exp": datetime.now(UTC) - timedelta(seconds=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(expired)


def test_non_access_type_raises() -> None:
    other = jwt.encode(
        {"sub": "12345", "type": "refresh", "exp": datetime.now(UTC) + timedelta(minutes=5)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(other)


def test_garbage_raises() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.jwt")
