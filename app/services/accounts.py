"""
Account Service

Registration, credential checks and session-token resolution.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, UnauthenticatedError
from app.core.security import hash_password, issue_token, verify_password, verify_token
from app.database import commit
from app.models import User
from app.schemas import RegisterRequest

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, payload: RegisterRequest) -> User:
    """
    Create an account with a bcrypt-hashed password.

    Raises:
        ConflictError: If the email is already registered
    """
    email = payload.email.lower()
    if await get_user_by_email(db, email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        name=payload.name,
        email=email,
        password=hash_password(payload.password),
        role=payload.role,
        country=payload.country,
    )
    db.add(user)
    # A concurrent registration with the same email fails on the unique index
    await commit(db, "User")

    logger.info(f"Registered user #{user.id} ({user.role.value}/{user.country.value})")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> tuple[User, str]:
    """
    Verify credentials and issue a session token.

    Returns:
        The user and a signed token bound to their id
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login attempt")
        raise UnauthenticatedError("Invalid email or password")

    token = issue_token(user.id, user.role.value)
    logger.info(f"User #{user.id} logged in")
    return user, token


async def resolve_token(db: AsyncSession, token: Optional[str]) -> User:
    """
    Resolve a session token to a user.

    Every failure (no token, bad token, deleted user) is reported as
    UnauthenticatedError.
    """
    if not token:
        raise UnauthenticatedError("Unauthorized")

    claims = verify_token(token)
    if claims is None:
        raise UnauthenticatedError("Unauthorized")

    user = await db.get(User, claims.user_id)
    if user is None:
        logger.debug(f"Token refers to missing user #{claims.user_id}")
        raise UnauthenticatedError("Unauthorized")

    return user
