"""API dependencies: auth, db session."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.core.security import ACCESS_TOKEN, token_subject
from unknown_items.db.session import get_db
from unknown_items.models.user import User
from unknown_items.services.auth_service import get_user_by_id

security = HTTPBearer(auto_error=False)


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    if not credentials:
        return None
    user_id = token_subject(credentials.credentials, ACCESS_TOKEN)
    if user_id is None:
        return None
    return await get_user_by_id(db, user_id)


async def get_current_user(
    user: User | None = Depends(get_current_user_optional),
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
