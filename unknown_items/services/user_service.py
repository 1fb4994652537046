"""Profile pages, profile settings and follows."""
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.core.exceptions import NotFoundError
from unknown_items.models.engagement import Follow
from unknown_items.models.post import Post
from unknown_items.models.user import Profile, User
from unknown_items.schemas.user import ProfilePageResponse, ProfilePost, ProfileResponse, ProfileUpdate
from unknown_items.services.auth_service import get_user_by_username
from unknown_items.services.engagement_service import EngagementKind, get_engaged_target_ids
from unknown_items.services.feed_service import comments_count_col, likes_count_col

PROFILE_RECENT_POSTS = 10


async def _count(db: AsyncSession, stmt) -> int:
    return (await db.execute(stmt)).scalar() or 0


async def get_profile_page(db: AsyncSession, username: str, viewer_id: UUID | None = None) -> ProfilePageResponse:
    user = await get_user_by_username(db, username)
    if not user:
        raise NotFoundError("User not found")
    is_own_profile = viewer_id == user.id

    posts_filter = [Post.author_id == user.id]
    if not is_own_profile:
        posts_filter.append(Post.published.is_(True))

    result = await db.execute(
        select(Post, likes_count_col, comments_count_col)
        .where(*posts_filter)
        .order_by(desc(Post.created_at))
        .limit(PROFILE_RECENT_POSTS)
    )
    posts = [
        ProfilePost(
            id=post.id,
            title=post.title,
            content=post.content,
            category=post.category.value,
            mystery_status=post.mystery_status.value,
            published=post.published,
            views_count=post.views_count or 0,
            created_at=post.created_at,
            likes_count=likes,
            comments_count=comments,
        )
        for post, likes, comments in result.all()
    ]

    followed = await get_engaged_target_ids(db, EngagementKind.FOLLOW, viewer_id, [user.id])
    return ProfilePageResponse(
        id=user.id,
        username=user.username,
        role=user.role,
        created_at=user.created_at,
        profile=ProfileResponse.model_validate(user.profile) if user.profile else None,
        posts_count=await _count(db, select(func.count(Post.id)).where(*posts_filter)),
        followers_count=await _count(db, select(func.count()).select_from(Follow).where(Follow.following_id == user.id)),
        following_count=await _count(db, select(func.count()).select_from(Follow).where(Follow.follower_id == user.id)),
        is_following=user.id in followed,
        is_own_profile=is_own_profile,
        posts=posts,
    )


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    if user.profile is None:
        user.profile = Profile(display_name=user.username, interests=[])
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "interests" and value is None:
            value = []
        setattr(user.profile, field, value)
    await db.flush()
    return user
