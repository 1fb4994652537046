"""Pydantic schemas for Comment."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from unknown_items.schemas.base import CamelModel
from unknown_items.schemas.user import AuthorPublic

COMMENT_MAX_LENGTH = 1000


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)
    parent_id: UUID | None = None


class CommentResponse(CamelModel):
    id: UUID
    post_id: UUID
    author_id: UUID
    parent_id: UUID | None = None
    content: str
    created_at: datetime
    author: AuthorPublic | None = None
    likes_count: int = 0
    is_liked: bool = False
    replies: list["CommentResponse"] = []
    replies_count: int = 0


class CommentListResponse(CamelModel):
    comments: list[CommentResponse]
    total: int
    page: int
    has_more: bool
