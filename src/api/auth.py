# coding: utf-8
"""
Authentication API

- POST /auth/register - create account, returns session token
- POST /auth/login    - username or email + password
- GET  /auth/me       - current user

Session: "Authorization: Bearer <jwt>"
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.sentry import set_user_context
from src.core.exceptions import AuthError, NotFoundError
from src.database.engine import get_session
from src.database.models import User
from src.services.auth_service import (
    extract_bearer_token,
    login_user,
    register_user,
    verify_session,
)
from src.utils.serializers import user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])


# ===========================
# DEPENDENCIES
# ===========================


async def get_current_user(
    authorization: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_session),
) -> User:
    """
    FastAPI Dependency для получения текущего пользователя.

    Raises:
        AuthError: header missing/malformed, token invalid or expired
        NotFoundError: token user no longer exists

    Usage:
        @router.get("/profile")
        async def get_profile(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = extract_bearer_token(authorization)
    user = await verify_session(session, token)

    set_user_context(user.id, user.username)
    return user


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """
    Current user if a valid session is presented, else None (guest)
    """
    if not authorization:
        return None

    try:
        return await verify_session(session, extract_bearer_token(authorization))
    except (AuthError, NotFoundError):
        return None


# ===========================
# REQUEST MODELS
# ===========================


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)


class LoginRequest(BaseModel):
    login: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


# ===========================
# ENDPOINTS
# ===========================


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    user, token = await register_user(
        session,
        username=request.username,
        email=str(request.email),
        password=request.password,
        full_name=request.full_name,
    )
    return {
        "message": "User registered successfully",
        "token": token,
        "user": user_to_dict(user),
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    user, token = await login_user(session, request.login, request.password)
    return {
        "message": "Login successful",
        "token": token,
        "user": user_to_dict(user),
    }


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"user": user_to_dict(user)}
