"""Pydantic schemas for User and Profile."""
import re
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, HttpUrl, TypeAdapter, field_validator, model_validator

from unknown_items.models.enums import UserRole
from unknown_items.schemas.base import CamelModel

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
_url_adapter = TypeAdapter(HttpUrl)


class ProfileSummary(CamelModel):
    display_name: str | None = None
    avatar: str | None = None
    verified: bool = False


class AuthorPublic(CamelModel):
    """Thin author projection embedded in posts and comments."""
    id: UUID
    username: str
    profile: ProfileSummary | None = None


class ProfileResponse(CamelModel):
    display_name: str | None = None
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    interests: list[str] = []
    mystery_score: int = 0
    verified: bool = False
    avatar: str | None = None


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str

    @field_validator("username")
    @classmethod
    def username_charset(cls, value: str) -> str:
        if not USERNAME_PATTERN.match(value):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(CamelModel):
    id: UUID
    username: str
    email: str | None = None  # Only for the account owner
    role: UserRole = UserRole.USER
    created_at: datetime
    profile: ProfileResponse | None = None


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


class ProfileUpdate(CamelModel):
    display_name: str | None = Field(None, max_length=50)
    bio: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    website: str | None = None
    interests: list[str] | None = Field(None, max_length=10)

    @field_validator("website")
    @classmethod
    def website_url_or_empty(cls, value: str | None) -> str | None:
        if not value:
            return value
        return str(_url_adapter.validate_python(value))


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenRefresh(CamelModel):
    refresh_token: str


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class ProfilePost(CamelModel):
    id: UUID
    title: str
    content: str
    category: str
    mystery_status: str
    published: bool
    views_count: int = 0
    created_at: datetime
    likes_count: int = 0
    comments_count: int = 0


class ProfilePageResponse(CamelModel):
    id: UUID
    username: str
    role: UserRole = UserRole.USER
    created_at: datetime
    profile: ProfileResponse | None = None
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False
    is_own_profile: bool = False
    posts: list[ProfilePost] = []


class FollowToggleResponse(CamelModel):
    is_following: bool
    followers_count: int
