"""SQLAlchemy declarative base and model imports for Alembic."""
from unknown_items.db.session import Base  # noqa: F401
from unknown_items.models.user import Profile, User  # noqa: F401
from unknown_items.models.post import Media, Post, PostTag, Tag  # noqa: F401
from unknown_items.models.comment import Comment  # noqa: F401
from unknown_items.models.engagement import Bookmark, CommentLike, Follow, Like  # noqa: F401

__all__ = ["Base", "User", "Profile", "Post", "Media", "Tag", "PostTag", "Comment", "Like", "Bookmark", "CommentLike", "Follow"]
