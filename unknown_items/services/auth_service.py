"""Authentication business logic."""
import secrets
import string
from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from unknown_items.core.exceptions import ValidationError
from unknown_items.core.security import create_access_token, create_refresh_token, get_password_hash, verify_password
from unknown_items.models.user import Profile, User
from unknown_items.schemas.user import ProfileResponse, UserCreate, UserResponse

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email).options(selectinload(User.profile)))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username).options(selectinload(User.profile)))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id).options(selectinload(User.profile)))
    return result.scalar_one_or_none()


async def find_registration_conflict(db: AsyncSession, email: str, username: str) -> str | None:
    """Message for an email or username already in use, email reported first."""
    result = await db.execute(select(User).where(or_(User.email == email, User.username == username)))
    existing = result.scalars().all()
    if any(u.email == email for u in existing):
        return "A user with this email already exists"
    if any(u.username == username for u in existing):
        return "This username is already taken"
    return None


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    """Create a user and its profile. Email and username collisions are reported separately."""
    conflict = await find_registration_conflict(db, data.email, data.username)
    if conflict:
        raise ValidationError(conflict)

    user = User(
        username=data.username,
        email=data.email,
        password_hash=get_password_hash(data.password),
    )
    user.profile = Profile(display_name=data.username, interests=[])
    try:
        async with db.begin_nested():
            db.add(user)
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email or username
        conflict = await find_registration_conflict(db, data.email, data.username)
        if conflict is None:
            raise
        raise ValidationError(conflict) from None
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def _random_suffix(length: int = 4) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


async def get_or_create_oauth_user(
    db: AsyncSession,
    email: str,
    name: str | None = None,
    image: str | None = None,
) -> User:
    """Find the local account for a verified external identity, creating it on first sign-in."""
    user = await get_user_by_email(db, email)
    if user:
        return user

    base = email.split("@")[0][:40]
    username = base
    while await get_user_by_username(db, username):
        username = f"{base}_{_random_suffix()}"

    user = User(email=email, username=username, email_verified=datetime.utcnow())
    user.profile = Profile(display_name=name or username, avatar=image, interests=[])
    db.add(user)
    await db.flush()
    return user


def user_to_response(user: User, include_email: bool = False) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email if include_email else None,
        role=user.role,
        created_at=user.created_at,
        profile=ProfileResponse.model_validate(user.profile) if user.profile else None,
    )


def create_tokens_for_user(user: User) -> tuple[str, str]:
    return create_access_token(user.id), create_refresh_token(user.id)
