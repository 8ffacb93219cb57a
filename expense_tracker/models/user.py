from pydantic import Field, model_validator, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
from typing_extensions import Self
import re

from expense_tracker.db.core import Gender
from expense_tracker.models.base import RequestModel, ResponseModel


# ===== USER PYDANTIC MODELS =====

def _check_password_length(v: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes long")
    return v


class UserCreate(RequestModel):
    username: str = Field(..., min_length=3, max_length=100, description="Username (3-100 characters)")
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="Plaintext password, hashed before storage")
    gender: Gender

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v):
            raise ValueError('Invalid email format')
        return v.lower().strip()

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not re.match(r'^[a-zA-Z0-9_-]+$', v):
            raise ValueError('Username can only contain letters, numbers, hyphens, and underscores')
        return v.lower().strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_length(v)


class UserLogin(RequestModel):
    email: str = Field(..., min_length=1, description="User's email")
    password: str = Field(..., min_length=1, description="User's password")

    @field_validator('email')
    @classmethod
    def validate_login_identifier(cls, v: str) -> str:
        return v.lower().strip()


class UserUpdate(RequestModel):
    """Update user profile - only name and gender are mutable"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None

    @model_validator(mode="after")
    def check_any_field(self) -> Self:
        if self.name is None and self.gender is None:
            raise ValueError("Provide at least one of name or gender")
        return self


class PasswordChange(RequestModel):
    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password_length(v)


class UserResponse(ResponseModel):
    """User data returned to client - no password hash or refresh token"""
    id: UUID
    username: str
    name: str
    email: str
    gender: Gender
    profile_picture: str
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
