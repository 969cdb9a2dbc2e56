from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import get_settings
from app.core.security import (
    IDENTITY_CLAIM,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)


def test_hash_is_salted_and_not_plaintext():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != "password123"
    assert first != second
    assert verify_password("password123", first)
    assert verify_password("password123", second)


def test_verify_rejects_wrong_password():
    hashed = hash_password("password123")
    assert not verify_password("password124", hashed)


def test_verify_treats_malformed_hash_as_mismatch():
    assert verify_password("password123", "not-a-bcrypt-hash") is False


def test_token_round_trip_recovers_identity():
    token = issue_token(42, "MANAGER")

    claims = verify_token(token)

    assert claims is not None
    assert claims.user_id == 42
    assert claims.role == "MANAGER"


def test_token_expires_after_configured_days():
    issued = datetime.now(timezone.utc)
    claims = verify_token(issue_token(1, "MEMBER", now=issued))

    expected = issued + timedelta(days=get_settings().token_expire_days)
    assert abs((claims.expires_at - expected).total_seconds()) < 2


def test_identity_claim_is_sub():
    settings = get_settings()
    payload = jwt.decode(issue_token(7, "ADMIN"), settings.jwt_secret,
                         algorithms=[settings.jwt_algorithm])
    assert payload[IDENTITY_CLAIM] == "7"
    assert "userId" not in payload


def test_expired_token_is_invalid():
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    assert verify_token(issue_token(1, "MEMBER", now=issued)) is None


def test_token_signed_with_other_secret_is_invalid():
    settings = get_settings()
    forged = jwt.encode(
        {IDENTITY_CLAIM: "1", "role": "ADMIN",
         "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        "another-secret",
        algorithm=settings.jwt_algorithm,
    )
    assert verify_token(forged) is None


def test_garbage_and_claimless_tokens_are_invalid():
    settings = get_settings()
    no_sub = jwt.encode(
        {"userId": "1", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    assert verify_token("definitely.not.a-token") is None
    assert verify_token("") is None
    assert verify_token(no_sub) is None
