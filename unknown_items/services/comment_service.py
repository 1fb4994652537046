"""Comment threads: root comments, replies, and paginated listing with a reply preview."""
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from unknown_items.core.exceptions import NotFoundError, ValidationError
from unknown_items.models.comment import Comment
from unknown_items.models.engagement import CommentLike
from unknown_items.models.post import Post
from unknown_items.models.user import User
from unknown_items.schemas.comment import COMMENT_MAX_LENGTH, CommentListResponse, CommentResponse
from unknown_items.services.engagement_service import EngagementKind, get_engaged_target_ids
from unknown_items.services.feed_service import author_to_public

# Replies loaded with each root comment; more need a separate fetch
REPLY_PREVIEW_LIMIT = 5


def comment_to_response(
    comment: Comment,
    likes_count: int = 0,
    is_liked: bool = False,
    replies: list[CommentResponse] | None = None,
    replies_count: int = 0,
) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        parent_id=comment.parent_id,
        content=comment.content,
        created_at=comment.created_at,
        author=author_to_public(comment.author),
        likes_count=likes_count,
        is_liked=is_liked,
        replies=replies or [],
        replies_count=replies_count,
    )


async def _ensure_post_exists(db: AsyncSession, post_id: UUID) -> None:
    result = await db.execute(select(Post.id).where(Post.id == post_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Post not found")


async def _like_counts(db: AsyncSession, comment_ids: list[UUID]) -> dict[UUID, int]:
    if not comment_ids:
        return {}
    result = await db.execute(
        select(CommentLike.comment_id, func.count())
        .where(CommentLike.comment_id.in_(comment_ids))
        .group_by(CommentLike.comment_id)
    )
    return {comment_id: count for comment_id, count in result.all()}


async def _reply_counts(db: AsyncSession, parent_ids: list[UUID]) -> dict[UUID, int]:
    if not parent_ids:
        return {}
    result = await db.execute(
        select(Comment.parent_id, func.count())
        .where(Comment.parent_id.in_(parent_ids))
        .group_by(Comment.parent_id)
    )
    return {parent_id: count for parent_id, count in result.all()}


async def _reply_previews(db: AsyncSession, root_ids: list[UUID]) -> dict[UUID, list[Comment]]:
    """Oldest REPLY_PREVIEW_LIMIT replies per root, in one windowed query."""
    if not root_ids:
        return {}
    ranked = (
        select(
            Comment.id.label("id"),
            func.row_number()
            .over(partition_by=Comment.parent_id, order_by=[Comment.created_at.asc(), Comment.id.asc()])
            .label("rn"),
        )
        .where(Comment.parent_id.in_(root_ids))
        .subquery()
    )
    result = await db.execute(
        select(Comment)
        .join(ranked, ranked.c.id == Comment.id)
        .where(ranked.c.rn <= REPLY_PREVIEW_LIMIT)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .options(selectinload(Comment.author).selectinload(User.profile))
    )
    previews: dict[UUID, list[Comment]] = {root_id: [] for root_id in root_ids}
    for reply in result.scalars().all():
        previews[reply.parent_id].append(reply)
    return previews


async def create_comment(
    db: AsyncSession,
    post_id: UUID,
    author_id: UUID,
    content: str,
    parent_id: UUID | None = None,
) -> CommentResponse:
    if not content or len(content) > COMMENT_MAX_LENGTH:
        raise ValidationError(
            "Invalid input",
            details=[{"loc": ["body", "content"], "msg": f"Comment must be 1-{COMMENT_MAX_LENGTH} characters"}],
        )
    await _ensure_post_exists(db, post_id)

    if parent_id is not None:
        parent = await db.get(Comment, parent_id)
        # A reply must stay on the parent's post
        if parent is None or parent.post_id != post_id:
            raise NotFoundError("Parent comment not found")

    comment = Comment(post_id=post_id, author_id=author_id, content=content, parent_id=parent_id)
    db.add(comment)
    await db.flush()

    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment.id)
        .options(selectinload(Comment.author).selectinload(User.profile))
        .execution_options(populate_existing=True)
    )
    return comment_to_response(result.scalar_one())


async def list_comments(
    db: AsyncSession,
    post_id: UUID,
    page: int = 1,
    page_size: int = 20,
    viewer_id: UUID | None = None,
) -> CommentListResponse:
    await _ensure_post_exists(db, post_id)
    page = max(page, 1)
    skip = (page - 1) * page_size
    roots_filter = (Comment.post_id == post_id, Comment.parent_id.is_(None))

    result = await db.execute(
        select(Comment)
        .where(*roots_filter)
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .offset(skip)
        .limit(page_size)
        .options(selectinload(Comment.author).selectinload(User.profile))
    )
    roots = list(result.scalars().all())
    total = (await db.execute(select(func.count(Comment.id)).where(*roots_filter))).scalar() or 0

    root_ids = [c.id for c in roots]
    previews = await _reply_previews(db, root_ids)
    reply_counts = await _reply_counts(db, root_ids)
    all_ids = root_ids + [r.id for replies in previews.values() for r in replies]
    like_counts = await _like_counts(db, all_ids)
    liked_ids = await get_engaged_target_ids(db, EngagementKind.COMMENT_LIKE, viewer_id, all_ids)

    comments = [
        comment_to_response(
            root,
            likes_count=like_counts.get(root.id, 0),
            is_liked=root.id in liked_ids,
            replies=[
                comment_to_response(reply, likes_count=like_counts.get(reply.id, 0), is_liked=reply.id in liked_ids)
                for reply in previews.get(root.id, [])
            ],
            replies_count=reply_counts.get(root.id, 0),
        )
        for root in roots
    ]
    return CommentListResponse(
        comments=comments,
        total=total,
        page=page,
        has_more=skip + len(comments) < total,
    )
