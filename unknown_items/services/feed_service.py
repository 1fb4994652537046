"""Feed assembly: filtered, sorted, offset-paginated lists of published posts."""
import enum
import math
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import Select, case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from unknown_items.core.exceptions import ValidationError
from unknown_items.models.comment import Comment
from unknown_items.models.engagement import Bookmark, Like
from unknown_items.models.enums import MYSTERY_STATUS_PRIORITY, Category, MysteryStatus
from unknown_items.models.post import Post, PostTag, Tag
from unknown_items.models.user import User
from unknown_items.schemas.post import MediaResponse, PostListResponse, PostResponse, TagResponse
from unknown_items.schemas.user import AuthorPublic
from unknown_items.services.engagement_service import EngagementKind, get_engaged_target_ids


class FeedSort(str, enum.Enum):
    RECENT = "recent"
    POPULAR = "popular"
    UNSOLVED = "unsolved"

    @classmethod
    def parse(cls, value: str | None) -> "FeedSort":
        """Unknown values fall back to the default ordering."""
        try:
            return cls((value or cls.RECENT.value).lower())
        except ValueError:
            return cls.RECENT


@dataclass
class PostFilters:
    category: Category | None = None
    author_id: UUID | None = None
    status: MysteryStatus | None = None


@dataclass
class PostCounts:
    likes: int = 0
    comments: int = 0
    bookmarks: int = 0


def normalize_status(value: str) -> MysteryStatus:
    """Accept "partially-solved", "PARTIALLY_SOLVED" and friends."""
    key = value.strip().upper().replace("-", "_")
    try:
        return MysteryStatus(key)
    except ValueError:
        raise ValidationError(
            "Invalid mystery status",
            details=[{"loc": ["query", "status"], "msg": f"Unknown status '{value}'"}],
        ) from None


def _count_for_post(model):
    return (
        select(func.count())
        .select_from(model)
        .where(model.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


likes_count_col = _count_for_post(Like).label("likes_count")
comments_count_col = _count_for_post(Comment).label("comments_count")
bookmarks_count_col = _count_for_post(Bookmark).label("bookmarks_count")

_status_priority = case(
    {status: priority for status, priority in MYSTERY_STATUS_PRIORITY.items()},
    value=Post.mystery_status,
    else_=len(MYSTERY_STATUS_PRIORITY),
)


def post_with_counts_query() -> Select:
    """Post rows with author, profile and media loaded plus the three engagement counts."""
    return select(Post, likes_count_col, comments_count_col, bookmarks_count_col).options(
        selectinload(Post.author).selectinload(User.profile),
        selectinload(Post.media),
    )


def _order_by(sort: FeedSort) -> list:
    if sort is FeedSort.POPULAR:
        return [desc(likes_count_col), desc(Post.views_count), desc(Post.created_at)]
    if sort is FeedSort.UNSOLVED:
        return [_status_priority.asc(), desc(Post.created_at)]
    return [desc(Post.created_at)]


def _filter_clauses(filters: PostFilters) -> list:
    clauses = [Post.published.is_(True)]
    if filters.category is not None:
        clauses.append(Post.category == filters.category)
    if filters.author_id is not None:
        clauses.append(Post.author_id == filters.author_id)
    if filters.status is not None:
        clauses.append(Post.mystery_status == filters.status)
    return clauses


def author_to_public(user: User | None) -> AuthorPublic | None:
    if user is None:
        return None
    return AuthorPublic.model_validate(user)


def post_to_response(
    post: Post,
    counts: PostCounts | None = None,
    is_liked: bool = False,
    is_bookmarked: bool = False,
    tags: list[Tag] | None = None,
) -> PostResponse:
    counts = counts or PostCounts()
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        content_type=post.content_type,
        category=post.category,
        mystery_status=post.mystery_status,
        views_count=post.views_count or 0,
        published=post.published,
        featured=post.featured,
        author_id=post.author_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=author_to_public(post.author),
        media=[MediaResponse.model_validate(m) for m in post.media],
        tags=[TagResponse.model_validate(t) for t in tags] if tags is not None else None,
        likes_count=counts.likes,
        comments_count=counts.comments,
        bookmarks_count=counts.bookmarks,
        is_liked=is_liked,
        is_bookmarked=is_bookmarked,
    )


async def get_viewer_flags(
    db: AsyncSession,
    viewer_id: UUID | None,
    post_ids: list[UUID],
) -> tuple[set[UUID], set[UUID]]:
    """Return (liked post ids, bookmarked post ids) for the viewer."""
    liked = await get_engaged_target_ids(db, EngagementKind.POST_LIKE, viewer_id, post_ids)
    bookmarked = await get_engaged_target_ids(db, EngagementKind.POST_BOOKMARK, viewer_id, post_ids)
    return liked, bookmarked


async def get_post_tags(db: AsyncSession, post_id: UUID) -> list[Tag]:
    result = await db.execute(
        select(Tag).join(PostTag, PostTag.tag_id == Tag.id).where(PostTag.post_id == post_id).order_by(Tag.name)
    )
    return list(result.scalars().all())


async def list_posts(
    db: AsyncSession,
    filters: PostFilters,
    sort: FeedSort = FeedSort.RECENT,
    page: int = 1,
    page_size: int = 10,
    viewer_id: UUID | None = None,
) -> PostListResponse:
    page = max(page, 1)
    skip = (page - 1) * page_size
    clauses = _filter_clauses(filters)

    result = await db.execute(
        post_with_counts_query().where(*clauses).order_by(*_order_by(sort)).offset(skip).limit(page_size)
    )
    rows = result.all()
    # Separate count query; drift between the two reads under concurrent writes is tolerated
    total = (await db.execute(select(func.count(Post.id)).where(*clauses))).scalar() or 0

    post_ids = [row[0].id for row in rows]
    liked_ids, bookmarked_ids = await get_viewer_flags(db, viewer_id, post_ids)
    posts = [
        post_to_response(
            post,
            PostCounts(likes=likes, comments=comments, bookmarks=bookmarks),
            is_liked=post.id in liked_ids,
            is_bookmarked=post.id in bookmarked_ids,
        )
        for post, likes, comments, bookmarks in rows
    ]
    return PostListResponse(
        posts=posts,
        has_more=skip + len(posts) < total,
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size) if page_size else 0,
    )
