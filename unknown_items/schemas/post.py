"""Pydantic schemas for Post, Media and Tag."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from unknown_items.models.enums import Category, ContentType, MediaType, MysteryStatus
from unknown_items.schemas.base import CamelModel
from unknown_items.schemas.user import AuthorPublic


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: Category
    content_type: ContentType = ContentType.TEXT
    tags: list[str] | None = Field(None, max_length=10)
    media_ids: list[UUID] | None = None


class PostUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    category: Category | None = None
    mystery_status: MysteryStatus | None = None
    published: bool | None = None


class MediaResponse(CamelModel):
    id: UUID
    url: str
    type: MediaType
    thumbnail_url: str | None = None
    width: int | None = None
    height: int | None = None


class TagResponse(CamelModel):
    id: UUID
    name: str
    slug: str


class PostResponse(CamelModel):
    id: UUID
    title: str
    content: str
    content_type: ContentType
    category: Category
    mystery_status: MysteryStatus
    views_count: int = 0
    published: bool = True
    featured: bool = False
    author_id: UUID
    created_at: datetime
    updated_at: datetime | None = None
    author: AuthorPublic | None = None
    media: list[MediaResponse] = []
    tags: list[TagResponse] | None = None  # Only on the detail view
    likes_count: int = 0
    comments_count: int = 0
    bookmarks_count: int = 0
    is_liked: bool = False
    is_bookmarked: bool = False


class PostListResponse(CamelModel):
    posts: list[PostResponse]
    has_more: bool
    total: int
    page: int
    total_pages: int


class MessageResponse(CamelModel):
    message: str


class LikeToggleResponse(CamelModel):
    is_liked: bool
    likes_count: int


class BookmarkToggleResponse(CamelModel):
    is_bookmarked: bool
    bookmarks_count: int
