"""Post lifecycle: create with tags and media, read, patch, delete."""
import logging
import re
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from unknown_items.core.exceptions import ForbiddenError, NotFoundError
from unknown_items.models.post import Media, Post, PostTag, Tag
from unknown_items.models.user import User
from unknown_items.schemas.post import PostCreate, PostResponse, PostUpdate
from unknown_items.services.feed_service import (
    PostCounts,
    get_post_tags,
    get_viewer_flags,
    post_to_response,
    post_with_counts_query,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def slugify_tag(name: str) -> str:
    """"Internet Mystery" -> "internet-mystery"."""
    return _WHITESPACE.sub("-", name.strip().lower())


async def find_tag(db: AsyncSession, slug: str) -> Tag | None:
    result = await db.execute(select(Tag).where(Tag.slug == slug))
    return result.scalar_one_or_none()


async def _upsert_tag(db: AsyncSession, name: str, slug: str) -> Tag:
    tag = await find_tag(db, slug)
    if tag is None:
        try:
            async with db.begin_nested():
                tag = Tag(name=name, slug=slug, usage_count=1)
                db.add(tag)
            return tag
        except IntegrityError:
            # Another request created the slug first; fall through to the increment path
            tag = await find_tag(db, slug)
            if tag is None:
                raise
    tag.usage_count = (tag.usage_count or 0) + 1
    return tag


async def attach_tags(db: AsyncSession, post: Post, names: list[str]) -> list[Tag]:
    """Link tags by slug. Names that collapse to the same slug are linked once."""
    tags: list[Tag] = []
    seen: set[str] = set()
    for raw in names:
        name = raw.strip()
        slug = slugify_tag(name)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        tag = await _upsert_tag(db, name, slug)
        db.add(PostTag(post_id=post.id, tag_id=tag.id))
        tags.append(tag)
    await db.flush()
    return tags


async def create_post(db: AsyncSession, author_id: UUID, data: PostCreate) -> Post:
    """Insert a post, claim the author's unattached media and link its tags.

    Runs on the caller's session; nothing is committed here, so a failure in any
    step leaves the whole unit to be rolled back.
    """
    post = Post(
        author_id=author_id,
        title=data.title,
        content=data.content,
        category=data.category,
        content_type=data.content_type,
    )
    db.add(post)
    await db.flush()

    if data.media_ids:
        # Ids that are not the author's or already attached are skipped silently
        await db.execute(
            update(Media)
            .where(
                Media.id.in_(data.media_ids),
                Media.uploader_id == author_id,
                Media.post_id.is_(None),
            )
            .values(post_id=post.id)
            .execution_options(synchronize_session="fetch")
        )

    if data.tags:
        await attach_tags(db, post, data.tags)

    await db.flush()
    logger.info("Post created: %s by %s", post.id, author_id)
    return post


async def _get_post_for_owner(db: AsyncSession, post_id: UUID, caller: User, options: list | None = None) -> Post:
    post = await db.get(Post, post_id, options=options, populate_existing=True)
    if post is None:
        raise NotFoundError("Post not found")
    if post.author_id != caller.id and not caller.is_admin:
        raise ForbiddenError("Forbidden")
    return post


async def update_post(db: AsyncSession, post_id: UUID, caller: User, data: PostUpdate) -> Post:
    post = await _get_post_for_owner(db, post_id, caller)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)
    post.updated_at = datetime.utcnow()
    await db.flush()
    return post


async def delete_post(db: AsyncSession, post_id: UUID, caller: User) -> list[str]:
    """Hard-delete the post. Returns the URLs of its media files for storage cleanup."""
    post = await _get_post_for_owner(db, post_id, caller, options=[selectinload(Post.media)])
    media_urls = [m.url for m in post.media]
    # Media, tag links, likes, bookmarks and comments go with it through the ORM cascades
    await db.delete(post)
    await db.flush()
    logger.info("Post deleted: %s by %s", post_id, caller.id)
    return media_urls


async def get_post_detail(
    db: AsyncSession,
    post_id: UUID,
    viewer_id: UUID | None = None,
    count_view: bool = False,
) -> PostResponse:
    if count_view:
        await db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(views_count=Post.views_count + 1)
            .execution_options(synchronize_session=False)
        )
    result = await db.execute(
        post_with_counts_query().where(Post.id == post_id).execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Post not found")
    post, likes, comments, bookmarks = row
    liked_ids, bookmarked_ids = await get_viewer_flags(db, viewer_id, [post.id])
    tags = await get_post_tags(db, post.id)
    return post_to_response(
        post,
        PostCounts(likes=likes, comments=comments, bookmarks=bookmarks),
        is_liked=post.id in liked_ids,
        is_bookmarked=post.id in bookmarked_ids,
        tags=tags,
    )
