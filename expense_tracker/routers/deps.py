from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from expense_tracker import config
from expense_tracker.crud import crud_user
from expense_tracker.db.core import UserDB, get_db
from expense_tracker.services.tokens import InvalidTokenError, verify_access_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_access_token(request: Request) -> Optional[str]:
    token = request.cookies.get(config.ACCESS_TOKEN_COOKIE)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> UserDB:
    """
    Resolve the authenticated user for a protected route.

    The access token comes from the accessToken cookie, or an
    Authorization: Bearer header when no cookie is sent. The user is
    looked up on every request.
    """
    token = _extract_access_token(request)
    if not token:
        raise _unauthorized("Unauthorized request, no access token provided")

    try:
        user_uuid = verify_access_token(token)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired access token")

    user = crud_user.read_db_user(db, user_uuid=user_uuid)
    if user is None:
        raise _unauthorized("User not found, authorization denied")

    request.state.user = user
    return user
