"""Auth endpoints: register, login, refresh."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from unknown_items.api.deps import get_current_user, get_db
from unknown_items.core.security import REFRESH_TOKEN, token_subject
from unknown_items.models.user import User
from unknown_items.schemas.user import LoginRequest, RegisterResponse, Token, TokenRefresh, UserCreate, UserResponse
from unknown_items.services.auth_service import (
    authenticate_user,
    create_tokens_for_user,
    get_user_by_id,
    register_user,
    user_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> Token:
    access_token, refresh_token = create_tokens_for_user(user)
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        user=user_to_response(user, include_email=True),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Register attempt: %s", data.username)
    user = await register_user(db, data)
    await db.commit()
    logger.info("Register success: %s %s", user.id, user.username)
    return RegisterResponse(
        message="User created successfully",
        user=user_to_response(user, include_email=True),
    )


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, data.email, data.password)
    if not user:
        logger.info("Login failed for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info("Login success: %s", user.id)
    return _token_response(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: TokenRefresh,
    db: AsyncSession = Depends(get_db),
):
    user_id = token_subject(body.refresh_token, REFRESH_TOKEN)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    user = await get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return user_to_response(current_user, include_email=True)
