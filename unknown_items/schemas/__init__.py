from unknown_items.schemas.user import (
    UserCreate,
    UserResponse,
    ProfileUpdate,
    Token,
    LoginRequest,
)
from unknown_items.schemas.post import PostCreate, PostUpdate, PostResponse, PostListResponse
from unknown_items.schemas.comment import CommentCreate, CommentResponse, CommentListResponse
