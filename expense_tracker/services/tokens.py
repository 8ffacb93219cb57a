from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from jose import JWTError, jwt

from expense_tracker import config

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class InvalidTokenError(Exception):
    """Token is malformed, expired, badly signed or of the wrong type"""
    pass


def _issue_token(user_id: UUID, token_type: str, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Distinguishes tokens minted for the same user within the same second
        "jti": uuid4().hex,
    }
    return jwt.encode(claims, secret, algorithm=config.JWT_ALGORITHM)


def issue_access_token(user_id: UUID) -> str:
    return _issue_token(
        user_id,
        ACCESS_TOKEN_TYPE,
        config.ACCESS_TOKEN_SECRET,
        timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def issue_refresh_token(user_id: UUID) -> str:
    return _issue_token(
        user_id,
        REFRESH_TOKEN_TYPE,
        config.REFRESH_TOKEN_SECRET,
        timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def verify_token(token: str, secret: str, expected_type: Optional[str] = None) -> UUID:
    """Validate a token and return the user id it was issued for.

    Raises InvalidTokenError on a bad signature, malformed or expired token,
    a missing or non-UUID subject, or a type other than expected_type.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    if expected_type is not None and payload.get("type") != expected_type:
        raise InvalidTokenError(f"Expected a {expected_type} token")

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Token has no subject")
    try:
        return UUID(subject)
    except ValueError as e:
        raise InvalidTokenError("Token subject is not a user id") from e


def verify_access_token(token: str) -> UUID:
    return verify_token(token, config.ACCESS_TOKEN_SECRET, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> UUID:
    return verify_token(token, config.REFRESH_TOKEN_SECRET, REFRESH_TOKEN_TYPE)
