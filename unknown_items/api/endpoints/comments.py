"""Comment reactions."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_current_user, get_db
from unknown_items.models.user import User
from unknown_items.schemas.post import LikeToggleResponse
from unknown_items.services.engagement_service import EngagementKind, toggle_engagement

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
async def toggle_comment_like(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await toggle_engagement(db, EngagementKind.COMMENT_LIKE, current_user.id, comment_id)
    await db.commit()
    return LikeToggleResponse(is_liked=result.is_active, likes_count=result.active_count)
