from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional
from uuid import uuid4, UUID
from datetime import datetime
from functools import lru_cache
import bcrypt

from expense_tracker import config
from expense_tracker.db.core import UserDB, Gender, NotFoundError, ConflictError
from expense_tracker.models.user import UserCreate, UserUpdate
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROFILE_PICTURES = {
    Gender.MALE: "https://avatar.iran.liara.run/public/41",
    Gender.FEMALE: "https://avatar.iran.liara.run/public/54",
}
FALLBACK_PROFILE_PICTURE = "https://avatar.iran.liara.run/public/46"


# ===== PASSWORD HASHING UTILITIES =====

def hash_password(password: str) -> str:
    """Hash a password with a per-password bcrypt salt"""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password("not-a-real-password")


def default_profile_picture(gender: Gender) -> str:
    return DEFAULT_PROFILE_PICTURES.get(gender, FALLBACK_PROFILE_PICTURE)


# ===== DATABASE OPERATIONS =====

def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user in the database"""

    existing_user = db.query(UserDB).filter(
        or_(UserDB.email == user_data.email, UserDB.username == user_data.username)
    ).first()
    if existing_user:
        raise ConflictError("User with this email or username already exists")

    db_user = UserDB(
        id=uuid4(),
        email=user_data.email,
        username=user_data.username,
        name=user_data.name,
        gender=user_data.gender,
        profile_picture=default_profile_picture(user_data.gender),
        password_hash=hash_password(user_data.password),
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
    except IntegrityError:
        # Lost a race against a concurrent registration
        db.rollback()
        raise ConflictError("User with this email or username already exists")

    logger.info(f"Registered user {db_user.username} ({db_user.id})")
    return db_user


def read_db_user(db: Session, user_id: int = None, user_uuid: UUID = None,
                 email: str = None, username: str = None) -> Optional[UserDB]:
    """Read a user from the database by various identifiers"""

    query = db.query(UserDB)

    if user_id:
        return query.filter(UserDB.db_id == user_id).first()
    elif user_uuid:
        return query.filter(UserDB.id == user_uuid).first()
    elif email:
        return query.filter(UserDB.email == email.lower()).first()
    elif username:
        return query.filter(UserDB.username == username.lower()).first()
    else:
        raise ValueError("Must provide at least one identifier (user_id, user_uuid, email, or username)")


def update_db_user(db: Session, user_uuid: UUID, user_updates: UserUpdate) -> UserDB:
    """Update the mutable profile fields (name, gender) of a user"""

    db_user = read_db_user(db, user_uuid=user_uuid)
    if not db_user:
        raise NotFoundError(f"User with id {user_uuid} not found")

    update_data = user_updates.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(db_user, field, value)

    db_user.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(db_user)
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[UserDB]:
    """Authenticate a user by email and password.

    Returns None both for an unknown email and for a wrong password.
    """

    user = read_db_user(db, email=email)
    if not user:
        # Unknown emails pay the same bcrypt cost as wrong passwords
        verify_password(password, _dummy_password_hash())
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)

    return user


def set_refresh_token(db: Session, user: UserDB, refresh_token: Optional[str]) -> UserDB:
    """Persist the user's single current refresh token (None clears it)"""
    user.refresh_token = refresh_token
    db.commit()
    db.refresh(user)
    return user


def change_user_password(db: Session, user: UserDB, old_password: str, new_password: str) -> UserDB:
    """Change a user's password after verifying the old one"""

    if not verify_password(old_password, user.password_hash):
        raise ValueError("Invalid old password")

    user.password_hash = hash_password(new_password)
    user.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(user)
    return user
