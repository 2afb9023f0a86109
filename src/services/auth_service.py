# coding: utf-8
"""
Auth Service - registration, login and session tokens

- Passwords: salted bcrypt hashes
- Sessions: HS256 JWT {userId, username, exp}, 7 days by default
"""

from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional, Tuple

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRE_DAYS
from src.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from src.database.crud import create_user, get_user_by_id, get_user_by_login, user_exists
from src.database.models import User

BCRYPT_ROUNDS = 10

INVALID_CREDENTIALS = "Invalid credentials"
USER_ALREADY_EXISTS = "User with this username or email already exists"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(
    user_id: int,
    username: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed session token

    Args:
        user_id: User ID (stored as "userId" claim)
        username: Username claim
        expires_delta: Lifetime (default JWT_EXPIRE_DAYS)

    Returns:
        Encoded JWT
    """
    expire = datetime.now(UTC) + (expires_delta or timedelta(days=JWT_EXPIRE_DAYS))
    payload = {
        "userId": user_id,
        "username": username,
        "exp": expire,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate session token

    Raises:
        AuthError: if the token is malformed, badly signed or expired
    """
    if not token:
        raise AuthError("Token not provided")

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Invalid token")

    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise AuthError("Invalid token")

    return payload


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Parse an "Authorization: Bearer <token>" header

    Raises:
        AuthError: if the header is absent or not a bearer header
    """
    if not authorization:
        raise AuthError("Token not provided")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid authorization header. Expected: 'Bearer <token>'")

    return token.strip()


async def verify_session(session: AsyncSession, token: str) -> User:
    """
    Resolve a session token to a user

    Raises:
        AuthError: invalid/expired token
        NotFoundError: user no longer exists
    """
    payload = decode_access_token(token)

    user = await get_user_by_id(session, payload["userId"])
    if not user:
        raise NotFoundError("User not found")

    return user


async def register_user(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    full_name: Optional[str] = None,
) -> Tuple[User, str]:
    """
    Register new user

    Returns:
        Tuple of (User, token)

    Raises:
        ConflictError: username or email already taken
    """
    if await user_exists(session, username, email):
        raise ConflictError(USER_ALREADY_EXISTS)

    try:
        user = await create_user(
            session,
            username=username,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
        )
    except IntegrityError:
        # Lost a race against a concurrent registration
        await session.rollback()
        raise ConflictError(USER_ALREADY_EXISTS)

    logger.info(f"User registered: id={user.id} (@{user.username})")
    return user, create_access_token(user.id, user.username)


async def login_user(session: AsyncSession, login: str, password: str) -> Tuple[User, str]:
    """
    Authenticate by username or email

    Raises:
        ValidationError: same generic message for unknown user and bad password
    """
    user = await get_user_by_login(session, login)

    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for '{login}'")
        raise ValidationError(INVALID_CREDENTIALS)

    logger.info(f"User logged in: id={user.id} (@{user.username})")
    return user, create_access_token(user.id, user.username)
