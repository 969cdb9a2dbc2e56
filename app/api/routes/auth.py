"""
Authentication endpoints.

The session token travels in an httpOnly, SameSite=strict cookie.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.config import get_settings
from app.database import get_db
from app.models import User
from app.schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from app.services import accounts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """Create an account. Role defaults to MEMBER."""
    user = await accounts.register_user(db, payload)
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Verify credentials and set the session cookie."""
    settings = get_settings()
    user, token = await accounts.authenticate(db, payload.email, payload.password)

    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.token_max_age_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return LoginResponse(message="Login successful", user_id=user.id)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
) -> MessageResponse:
    settings = get_settings()
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    logger.info(f"User #{user.id} logged out")
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    """Return the resolved identity (without the password hash)."""
    return MeResponse(user=UserResponse.model_validate(user))
