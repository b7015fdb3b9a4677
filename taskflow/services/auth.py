"""Authentication service for accounts, passwords and JWTs."""

import asyncio
import logging
from datetime import datetime, timedelta
from uuid import UUID

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from taskflow.config import Settings
from taskflow.datetime_utils import utcnow
from taskflow.db.session import Store
from taskflow.errors import FieldError, NotFound, Unauthenticated, ValidationError
from taskflow.models.user import (
    AuthPayload,
    PasswordChange,
    ProfileUpdate,
    User,
    UserCreate,
    UserResponse,
    normalize_email,
)
from taskflow.services.scoping import Principal

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User already exists with this email"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def generate_jwt(user_id: UUID, settings: Settings) -> tuple[str, datetime]:
    """
    Generate a JWT token for the user.
    Returns (token, expires_at).
    """
    issued_at = utcnow()
    expires_at = issued_at + timedelta(hours=settings.JWT_EXPIRATION_HOURS)
    payload = {
        "sub": str(user_id),
        "exp": expires_at,
        "iat": issued_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def create_auth_payload(user: User, settings: Settings) -> AuthPayload:
    """Token plus public profile for a signed-in user."""
    token, expires_at = generate_jwt(user.id, settings)
    return AuthPayload(
        token=token,
        expires_at=expires_at,
        user=UserResponse.model_validate(user),
    )


async def get_user_by_email(store: Store, email: str) -> User | None:
    """Get a user by email address (case-insensitive)."""
    async with store.session() as session:
        return (
            await session.exec(select(User).where(User.email == normalize_email(email)))
        ).first()


async def get_user(store: Store, user_id: UUID) -> User:
    """Get a user by id, active or not.

    Raises:
        NotFound: If no such user exists
    """
    async with store.session() as session:
        user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def register_user(store: Store, user_data: UserCreate) -> User:
    """Create a new account.

    Raises:
        ValidationError: If the email is already registered
    """
    if await get_user_by_email(store, user_data.email) is not None:
        raise ValidationError.single("email", EMAIL_TAKEN)

    hashed = await asyncio.to_thread(hash_password, user_data.password)
    user = User(name=user_data.name, email=user_data.email, hashed_password=hashed)
    try:
        async with store.session() as session:
            session.add(user)
            await session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration
        raise ValidationError.single("email", EMAIL_TAKEN) from exc

    logger.info("User registered", extra={"user_id": str(user.id)})
    return user


async def authenticate_user(store: Store, email: str, password: str) -> User:
    """Check credentials and stamp the login time.

    Raises:
        Unauthenticated: On unknown email, wrong password or deactivated account
    """
    user = await get_user_by_email(store, email)
    if user is None:
        raise Unauthenticated("Invalid credentials")
    if not user.is_active:
        raise Unauthenticated("Account is deactivated")
    if not await asyncio.to_thread(verify_password, password, user.hashed_password):
        raise Unauthenticated("Invalid credentials")

    async with store.session() as session:
        user.last_login = utcnow()
        session.add(user)
        await session.commit()

    logger.info("User logged in", extra={"user_id": str(user.id)})
    return user


async def update_profile(store: Store, user_id: UUID, profile: ProfileUpdate) -> User:
    """Apply name/email changes to the user's own profile.

    Raises:
        ValidationError: If the new email belongs to another account
    """
    changes = profile.model_dump(exclude_unset=True, exclude_none=True)

    async with store.session() as session:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        new_email = changes.get("email")
        if new_email and new_email != user.email:
            taken = (
                await session.exec(select(User).where(User.email == new_email))
            ).first()
            if taken is not None:
                raise ValidationError.single("email", "Email is already taken")

        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        session.add(user)
        try:
            await session.commit()
        except IntegrityError as exc:
            raise ValidationError.single("email", "Email is already taken") from exc

    return user


async def change_password(store: Store, user_id: UUID, data: PasswordChange) -> None:
    """Replace the password after checking the current one.

    Raises:
        ValidationError: If the current password is wrong
    """
    async with store.session() as session:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        if not await asyncio.to_thread(verify_password, data.current_password, user.hashed_password):
            raise ValidationError([FieldError("currentPassword", "Current password is incorrect")])

        user.hashed_password = await asyncio.to_thread(hash_password, data.new_password)
        user.updated_at = utcnow()
        session.add(user)
        await session.commit()

    logger.info("Password changed", extra={"user_id": str(user_id)})


async def resolve_principal(store: Store, token: str, settings: Settings) -> Principal:
    """Turn a bearer token into the authenticated principal.

    Raises:
        Unauthenticated: If the token is invalid/expired or the user is gone or inactive
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        subject: str | None = payload.get("sub")
        if subject is None:
            raise Unauthenticated()
        user_id = UUID(subject)
    except (JWTError, ValueError) as exc:
        raise Unauthenticated() from exc

    async with store.session() as session:
        user = await session.get(User, user_id)

    if user is None or not user.is_active:
        raise Unauthenticated()
    return Principal(user_id=user.id, role=user.role, name=user.name, email=user.email)
