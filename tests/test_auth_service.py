"""
Unit tests for auth service (passwords, tokens, register/login)
"""

from datetime import timedelta

import pytest
from jose import jwt

from config.config import JWT_SECRET, JWT_ALGORITHM
from src.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from src.services.auth_service import (
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    login_user,
    register_user,
    verify_password,
    verify_session,
)


def test_hash_and_verify_password(password_hash):
    assert password_hash != "secret123"
    assert verify_password("secret123", password_hash)
    assert not verify_password("wrong-password", password_hash)


def test_hash_is_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_password_with_garbage_hash():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


def test_token_claims():
    token = create_access_token(42, "volga_fan")
    payload = decode_access_token(token)

    assert payload["userId"] == 42
    assert payload["username"] == "volga_fan"
    assert "exp" in payload


def test_expired_token_rejected():
    token = create_access_token(1, "old", expires_delta=timedelta(seconds=-10))

    with pytest.raises(AuthError, match="Token expired"):
        decode_access_token(token)


def test_bad_signature_rejected():
    token = jwt.encode({"userId": 1, "username": "x"}, "another-secret", algorithm=JWT_ALGORITHM)

    with pytest.raises(AuthError, match="Invalid token"):
        decode_access_token(token)


def test_token_without_user_id_rejected():
    token = jwt.encode({"username": "x"}, JWT_SECRET, algorithm=JWT_ALGORITHM)

    with pytest.raises(AuthError):
        decode_access_token(token)


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def") == "abc.def"
    assert extract_bearer_token("bearer abc") == "abc"

    with pytest.raises(AuthError, match="Token not provided"):
        extract_bearer_token(None)

    with pytest.raises(AuthError):
        extract_bearer_token("Basic dXNlcjpwYXNz")

    with pytest.raises(AuthError):
        extract_bearer_token("Bearer ")


@pytest.mark.asyncio
async def test_register_user(db_session):
    user, token = await register_user(
        db_session,
        username="tourist",
        email="tourist@example.com",
        password="secret123",
        full_name="Турист",
    )

    assert user.id is not None
    assert user.points == 0
    assert user.level == 1
    assert user.is_premium is False
    assert user.password_hash != "secret123"
    assert decode_access_token(token)["userId"] == user.id


@pytest.mark.asyncio
async def test_register_duplicate_username_or_email(db_session, make_user):
    await make_user("tourist")

    with pytest.raises(ConflictError):
        await register_user(db_session, "tourist", "other@example.com", "secret123")

    with pytest.raises(ConflictError):
        await register_user(db_session, "other", "tourist@example.com", "secret123")


@pytest.mark.asyncio
async def test_login_by_username_and_email(db_session, make_user):
    created = await make_user("walker")

    user, token = await login_user(db_session, "walker", "secret123")
    assert user.id == created.id

    user, _ = await login_user(db_session, "walker@example.com", "secret123")
    assert user.id == created.id


@pytest.mark.asyncio
async def test_login_failures_share_message(db_session, make_user):
    await make_user("walker")

    with pytest.raises(ValidationError) as wrong_password:
        await login_user(db_session, "walker", "bad-password")

    with pytest.raises(ValidationError) as unknown_user:
        await login_user(db_session, "nobody", "secret123")

    assert wrong_password.value.message == unknown_user.value.message == "Invalid credentials"
    assert wrong_password.value.status_code == 400


@pytest.mark.asyncio
async def test_verify_session(db_session, make_user):
    user = await make_user("walker")

    resolved = await verify_session(db_session, create_access_token(user.id, user.username))
    assert resolved.id == user.id

    with pytest.raises(NotFoundError):
        await verify_session(db_session, create_access_token(9999, "ghost"))
