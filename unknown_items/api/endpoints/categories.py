"""Category catalog."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_db
from unknown_items.schemas.category import CategoryResponse
from unknown_items.services.category_service import list_categories

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def get_categories(db: AsyncSession = Depends(get_db)):
    return await list_categories(db)
