from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from expense_tracker import config
from expense_tracker.crud import crud_user
from expense_tracker.models import user as user_models
from expense_tracker.models.base import MessageResponse
from expense_tracker.db.core import UserDB, get_db, NotFoundError, ConflictError
from expense_tracker.routers.deps import get_current_user
from expense_tracker.services import auth

router = APIRouter(
    prefix="/user",
    tags=["user"],
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(user: user_models.UserCreate, db: Session = Depends(get_db)) -> user_models.UserResponse:
    """
    Create a new user. The profile picture is chosen from the gender.
    """
    try:
        db_user = crud_user.create_db_user(db=db, user_data=user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return user_models.UserResponse.model_validate(db_user)


@router.post("/login")
def login_user(user_login: user_models.UserLogin, response: Response,
               db: Session = Depends(get_db)) -> user_models.UserResponse:
    """
    Authenticate with email and password; sets accessToken and refreshToken cookies.
    """
    try:
        db_user, access_token, refresh_token = auth.login(db, user_login.email, user_login.password)
    except auth.AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    auth.set_auth_cookies(response, access_token, refresh_token)
    return user_models.UserResponse.model_validate(db_user)


@router.post("/logout")
def logout_user(response: Response, current_user: UserDB = Depends(get_current_user),
                db: Session = Depends(get_db)) -> MessageResponse:
    auth.logout(db, current_user)
    auth.clear_auth_cookies(response)
    return MessageResponse(message="User logged out successfully")


@router.get("/refresh-token")
def refresh_access_token(request: Request, response: Response, db: Session = Depends(get_db)) -> MessageResponse:
    """
    Exchange the refreshToken cookie for a new token pair.
    """
    try:
        _, access_token, refresh_token = auth.refresh(db, request.cookies.get(config.REFRESH_TOKEN_COOKIE))
    except auth.AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    auth.set_auth_cookies(response, access_token, refresh_token)
    return MessageResponse(message="Access token refreshed successfully")


@router.get("/info")
def get_user_info(current_user: UserDB = Depends(get_current_user)) -> user_models.UserResponse:
    return user_models.UserResponse.model_validate(current_user)


@router.put("/update")
def update_user(user: user_models.UserUpdate, current_user: UserDB = Depends(get_current_user),
                db: Session = Depends(get_db)) -> user_models.UserResponse:
    """
    Update the profile name and/or gender.
    """
    try:
        updated_user = crud_user.update_db_user(db=db, user_uuid=current_user.id, user_updates=user)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return user_models.UserResponse.model_validate(updated_user)


@router.put("/change-password")
def change_password(password_change: user_models.PasswordChange,
                    current_user: UserDB = Depends(get_current_user),
                    db: Session = Depends(get_db)) -> MessageResponse:
    try:
        crud_user.change_user_password(
            db=db,
            user=current_user,
            old_password=password_change.old_password,
            new_password=password_change.new_password,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return MessageResponse(message="Password changed successfully")
