"""Toggleable engagement: post likes, comment likes, bookmarks and follows.

Every kind is a join table keyed by (user, target). The row's existence is the
state, and counts are always recomputed from the table after a toggle.
"""
import enum
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.core.exceptions import NotFoundError, ValidationError
from unknown_items.models.comment import Comment
from unknown_items.models.engagement import Bookmark, CommentLike, Follow, Like
from unknown_items.models.post import Post
from unknown_items.models.user import User

logger = logging.getLogger(__name__)


class EngagementKind(str, enum.Enum):
    POST_LIKE = "post_like"
    POST_BOOKMARK = "post_bookmark"
    COMMENT_LIKE = "comment_like"
    FOLLOW = "follow"


@dataclass(frozen=True)
class _JoinTable:
    model: type
    user_column: str
    target_column: str
    target_model: type
    not_found: str


_TABLES: dict[EngagementKind, _JoinTable] = {
    EngagementKind.POST_LIKE: _JoinTable(Like, "user_id", "post_id", Post, "Post not found"),
    EngagementKind.POST_BOOKMARK: _JoinTable(Bookmark, "user_id", "post_id", Post, "Post not found"),
    EngagementKind.COMMENT_LIKE: _JoinTable(CommentLike, "user_id", "comment_id", Comment, "Comment not found"),
    EngagementKind.FOLLOW: _JoinTable(Follow, "follower_id", "following_id", User, "User not found"),
}


@dataclass
class ToggleResult:
    is_active: bool
    active_count: int


async def count_engagements(db: AsyncSession, kind: EngagementKind, target_id: UUID) -> int:
    table = _TABLES[kind]
    target_col = getattr(table.model, table.target_column)
    result = await db.execute(select(func.count()).select_from(table.model).where(target_col == target_id))
    return result.scalar() or 0


async def has_engagement(db: AsyncSession, kind: EngagementKind, user_id: UUID, target_id: UUID) -> bool:
    table = _TABLES[kind]
    user_col = getattr(table.model, table.user_column)
    target_col = getattr(table.model, table.target_column)
    result = await db.execute(
        select(func.count()).select_from(table.model).where(user_col == user_id, target_col == target_id)
    )
    return bool(result.scalar())


async def toggle_engagement(
    db: AsyncSession,
    kind: EngagementKind,
    user_id: UUID,
    target_id: UUID,
) -> ToggleResult:
    """Flip the (user, target) row and return the new state with a fresh count."""
    table = _TABLES[kind]
    if kind is EngagementKind.FOLLOW and user_id == target_id:
        raise ValidationError("You cannot follow yourself")

    target = await db.get(table.target_model, target_id)
    if target is None:
        raise NotFoundError(table.not_found)

    if await has_engagement(db, kind, user_id, target_id):
        user_col = getattr(table.model, table.user_column)
        target_col = getattr(table.model, table.target_column)
        await db.execute(delete(table.model).where(user_col == user_id, target_col == target_id))
        is_active = False
    else:
        try:
            async with db.begin_nested():
                db.add(table.model(**{table.user_column: user_id, table.target_column: target_id}))
        except IntegrityError:
            # A concurrent request inserted the same row first; the pair is active either way.
            logger.info("Concurrent %s toggle for user=%s target=%s", kind.value, user_id, target_id)
        is_active = True

    active_count = await count_engagements(db, kind, target_id)
    return ToggleResult(is_active=is_active, active_count=active_count)


async def get_engaged_target_ids(
    db: AsyncSession,
    kind: EngagementKind,
    user_id: UUID | None,
    target_ids: list[UUID],
) -> set[UUID]:
    """Return the subset of target_ids the user has an engagement row for."""
    if user_id is None or not target_ids:
        return set()
    table = _TABLES[kind]
    user_col = getattr(table.model, table.user_column)
    target_col = getattr(table.model, table.target_column)
    result = await db.execute(select(target_col).where(user_col == user_id, target_col.in_(target_ids)))
    return {row[0] for row in result.all() if row[0]}
