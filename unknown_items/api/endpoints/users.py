"""User profiles and follows."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_current_user, get_current_user_optional, get_db
from unknown_items.core.exceptions import NotFoundError
from unknown_items.models.user import User
from unknown_items.schemas.user import FollowToggleResponse, ProfilePageResponse, ProfileUpdate, UserResponse
from unknown_items.services.auth_service import get_user_by_username, user_to_response
from unknown_items.services.engagement_service import EngagementKind, toggle_engagement
from unknown_items.services.user_service import get_profile_page, update_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


# /me routes must be registered before /{username}
@router.patch("/me/profile", response_model=UserResponse)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await update_profile(db, current_user, data)
    await db.commit()
    logger.info("Profile updated: %s", user.id)
    return user_to_response(user, include_email=True)


@router.get("/{username}", response_model=ProfilePageResponse)
async def get_user_profile(
    username: str,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await get_profile_page(db, username, viewer_id=current_user.id if current_user else None)


@router.post("/{username}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    target = await get_user_by_username(db, username)
    if not target:
        raise NotFoundError("User not found")
    result = await toggle_engagement(db, EngagementKind.FOLLOW, current_user.id, target.id)
    await db.commit()
    return FollowToggleResponse(is_following=result.is_active, followers_count=result.active_count)
