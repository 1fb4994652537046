"""Posts CRUD, feed, reactions and the comment thread of a post."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_current_user, get_current_user_optional, get_db
from unknown_items.core.config import settings
from unknown_items.core.exceptions import ValidationError
from unknown_items.models.user import User
from unknown_items.schemas.comment import CommentCreate, CommentListResponse, CommentResponse
from unknown_items.schemas.post import (
    BookmarkToggleResponse,
    LikeToggleResponse,
    MessageResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from unknown_items.services import comment_service, post_service
from unknown_items.services.category_service import category_from_slug
from unknown_items.services.engagement_service import EngagementKind, toggle_engagement
from unknown_items.services.feed_service import FeedSort, PostFilters, list_posts, normalize_status
from unknown_items.services.storage_service import get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _viewer_id(user: User | None) -> UUID | None:
    return user.id if user else None


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    data: PostCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, current_user.id, data)
    await db.commit()
    return await post_service.get_post_detail(db, post.id, viewer_id=current_user.id)


@router.get("", response_model=PostListResponse)
async def list_posts_endpoint(
    category: str | None = Query(None),
    sort: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    author_id: UUID | None = Query(None, alias="authorId"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.POSTS_PAGE_SIZE, ge=1, le=50),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    filters = PostFilters(author_id=author_id)
    if category:
        filters.category = category_from_slug(category)
        if filters.category is None:
            raise ValidationError(
                "Invalid input",
                details=[{"loc": ["query", "category"], "msg": f"Unknown category '{category}'"}],
            )
    if status_filter:
        filters.status = normalize_status(status_filter)
    return await list_posts(
        db,
        filters,
        sort=FeedSort.parse(sort),
        page=page,
        page_size=limit,
        viewer_id=_viewer_id(current_user),
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_post_detail(db, post_id, viewer_id=_viewer_id(current_user), count_view=True)
    await db.commit()
    return post


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post_endpoint(
    post_id: UUID,
    data: PostUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.update_post(db, post_id, current_user, data)
    await db.commit()
    return await post_service.get_post_detail(db, post_id, viewer_id=current_user.id)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post_endpoint(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    media_urls = await post_service.delete_post(db, post_id, current_user)
    await db.commit()
    storage = get_storage()
    for url in media_urls:
        storage.delete(url)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_engagement(db, EngagementKind.POST_LIKE, current_user.id, post_id)
    await db.commit()
    return LikeToggleResponse(is_liked=result.is_active, likes_count=result.active_count)


@router.post("/{post_id}/bookmark", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_engagement(db, EngagementKind.POST_BOOKMARK, current_user.id, post_id)
    await db.commit()
    return BookmarkToggleResponse(is_bookmarked=result.is_active, bookmarks_count=result.active_count)


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_post_comments(
    post_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.COMMENTS_PAGE_SIZE, ge=1, le=100),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.list_comments(
        db, post_id, page=page, page_size=limit, viewer_id=_viewer_id(current_user)
    )


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_post_comment(
    post_id: UUID,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.create_comment(
        db, post_id, current_user.id, data.content, parent_id=data.parent_id
    )
    await db.commit()
    logger.info("Comment %s on post %s by %s", comment.id, post_id, current_user.id)
    return comment
