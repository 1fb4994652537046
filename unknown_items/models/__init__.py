from unknown_items.models.user import Profile, User
from unknown_items.models.post import Media, Post, PostTag, Tag
from unknown_items.models.comment import Comment
from unknown_items.models.engagement import Bookmark, CommentLike, Follow, Like

__all__ = ["User", "Profile", "Post", "Media", "Tag", "PostTag", "Comment", "Like", "Bookmark", "CommentLike", "Follow"]
