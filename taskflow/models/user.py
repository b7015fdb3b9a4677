"""User entity model."""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated
from uuid import UUID, uuid4

from pydantic import AfterValidator, EmailStr, StringConstraints, field_validator
from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from taskflow.datetime_utils import utcnow
from taskflow.models.base import CamelModel

# At least one lowercase, one uppercase and one digit
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_MIN_LENGTH = 6


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """User database model."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=50)
    # Stored lower-cased so the unique index is case-insensitive
    email: str = Field(max_length=255, unique=True, index=True)
    hashed_password: str = Field(max_length=255)
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=Column(
            SAEnum(
                UserRole,
                native_enum=False,
                length=10,
                values_callable=lambda e: [m.value for m in e],
            ),
            nullable=False,
        ),
    )
    is_active: bool = Field(default=True, index=True)
    last_login: datetime | None = Field(default=None, sa_type=DateTime())
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime())


def normalize_email(email: str) -> str:
    return email.strip().lower()


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Email = Annotated[EmailStr, AfterValidator(normalize_email)]
RequiredSecret = Annotated[str, StringConstraints(min_length=1)]


def check_password_policy(password: str) -> str:
    """Raise ValueError when the password does not meet the policy."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not PASSWORD_PATTERN.match(password):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return password


class UserCreate(CamelModel):
    """Schema for user registration."""

    name: Name
    email: Email
    password: str

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class UserLogin(CamelModel):
    """Schema for user login."""

    email: Email
    password: RequiredSecret


class ProfileUpdate(CamelModel):
    """Schema for a user editing their own profile."""

    name: Name | None = None
    email: Email | None = None


class PasswordChange(CamelModel):
    """Schema for changing the current user's password."""

    current_password: RequiredSecret
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class UserResponse(CamelModel):
    """Public user profile (no password credential)."""

    id: UUID
    name: str
    email: str
    role: UserRole
    is_active: bool
    last_login: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthPayload(CamelModel):
    """Token plus profile returned by register/login."""

    token: str
    expires_at: datetime
    user: UserResponse
