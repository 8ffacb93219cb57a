"""
Session lifecycle: login, logout and refresh-token rotation.

A user holds at most one refresh token at a time. Logging in or refreshing
overwrites it, so an older token (or another client's session) stops
working on its next refresh.
"""
from typing import Optional, Tuple

from fastapi import Response
from sqlalchemy.orm import Session

from expense_tracker import config
from expense_tracker.crud import crud_user
from expense_tracker.db.core import UserDB
from expense_tracker.logging_config import get_logger
from expense_tracker.services.tokens import (
    InvalidTokenError,
    issue_access_token,
    issue_refresh_token,
    verify_refresh_token,
)

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthenticationError(Exception):
    pass


def issue_token_pair(db: Session, user: UserDB) -> Tuple[str, str]:
    """Mint a new access/refresh pair and persist the refresh token"""
    access_token = issue_access_token(user.id)
    refresh_token = issue_refresh_token(user.id)
    crud_user.set_refresh_token(db, user, refresh_token)
    return access_token, refresh_token


def login(db: Session, email: str, password: str) -> Tuple[UserDB, str, str]:
    user = crud_user.authenticate_user(db, email=email, password=password)
    if not user:
        logger.warning(f"Failed login attempt for {email}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    access_token, refresh_token = issue_token_pair(db, user)
    logger.info(f"User {user.id} logged in")
    return user, access_token, refresh_token


def logout(db: Session, user: UserDB) -> None:
    crud_user.set_refresh_token(db, user, None)
    logger.info(f"User {user.id} logged out")


def refresh(db: Session, refresh_token: Optional[str]) -> Tuple[UserDB, str, str]:
    """Rotate the session: exchange the current refresh token for a new pair"""
    if not refresh_token:
        raise AuthenticationError("No refresh token provided")

    try:
        user_uuid = verify_refresh_token(refresh_token)
    except InvalidTokenError as e:
        logger.warning(f"Rejected refresh token: {e}")
        raise AuthenticationError("Invalid or expired refresh token") from e

    user = crud_user.read_db_user(db, user_uuid=user_uuid)
    if not user:
        raise AuthenticationError("User not found")

    if user.refresh_token != refresh_token:
        logger.warning(f"Stale refresh token presented for user {user.id}")
        raise AuthenticationError("Refresh token has been revoked")

    access_token, new_refresh_token = issue_token_pair(db, user)
    return user, access_token, new_refresh_token


# ===== COOKIE TRANSPORT =====

def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": config.COOKIE_SECURE,
        "samesite": config.COOKIE_SAMESITE,
        "path": "/",
    }


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    response.set_cookie(
        config.ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **_cookie_options(),
    )
    response.set_cookie(
        config.REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=config.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **_cookie_options(),
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (config.ACCESS_TOKEN_COOKIE, config.REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, **_cookie_options())
