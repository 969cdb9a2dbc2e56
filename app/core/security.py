"""
Credential Service

Password hashing with bcrypt and session token issuance/verification with
signed JWTs (python-jose).

The identity claim is always ``sub`` (the user id as a string). Tokens
without it are rejected.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from app.core.config import get_settings

logger = logging.getLogger(__name__)

IDENTITY_CLAIM = "sub"


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a session token."""
    user_id: int
    role: str
    expires_at: datetime


# =============================================================================
# PASSWORDS
# =============================================================================

def _encode(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    settings = get_settings()
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


@lru_cache()
def _dummy_hash() -> bytes:
    return hash_password("not-a-real-password").encode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Check ``password`` against a stored bcrypt hash.

    A malformed hash is reported as a mismatch, after running a full bcrypt
    comparison against a dummy hash so both failures cost the same.
    """
    candidate = _encode(password)
    try:
        return bcrypt.checkpw(candidate, hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        bcrypt.checkpw(candidate, _dummy_hash())
        return False


# =============================================================================
# TOKENS
# =============================================================================

def issue_token(user_id: int, role: str, now: Optional[datetime] = None) -> str:
    """
    Issue a signed session token.

    Args:
        user_id: Identity the token is bound to
        role: Role at issuance time (informational; the user row is authoritative)
        now: Issuance time, defaults to the current UTC time

    Returns:
        Encoded JWT string
    """
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    claims = {
        IDENTITY_CLAIM: str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=settings.token_expire_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[TokenClaims]:
    """
    Validate signature and expiry of a session token.

    Returns:
        TokenClaims on success, None for any malformed, expired or
        wrongly-signed token. Never raises.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

    try:
        user_id = int(payload[IDENTITY_CLAIM])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError):
        logger.debug("Token rejected: missing or malformed claims")
        return None

    return TokenClaims(
        user_id=user_id,
        role=str(payload.get("role", "")),
        expires_at=expires_at,
    )
