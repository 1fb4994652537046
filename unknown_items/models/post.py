"""Post model plus its media attachments and tags."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from unknown_items.db.session import Base
from unknown_items.models.enums import Category, ContentType, MediaType, MysteryStatus


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False, default=ContentType.TEXT)
    category = Column(Enum(Category, name="category"), nullable=False, index=True)
    mystery_status = Column(
        Enum(MysteryStatus, name="mystery_status"), nullable=False, default=MysteryStatus.UNSOLVED
    )
    views_count = Column(Integer, nullable=False, default=0)
    published = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="posts")
    media = relationship("Media", back_populates="post", cascade="all, delete-orphan", order_by="Media.created_at")
    tags = relationship("PostTag", back_populates="post", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="post", cascade="all, delete-orphan")


class Media(Base):
    """Uploaded file. Unattached (post_id is null) until a post claims it."""
    __tablename__ = "media"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    uploader_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True, index=True)
    url = Column(Text, nullable=False)
    type = Column(Enum(MediaType, name="media_type"), nullable=False, default=MediaType.IMAGE)
    thumbnail_url = Column(Text, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    uploader = relationship("User", back_populates="media")
    post = relationship("Post", back_populates="media")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    posts = relationship("PostTag", back_populates="tag", cascade="all, delete-orphan")


class PostTag(Base):
    __tablename__ = "post_tags"

    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    post = relationship("Post", back_populates="tags")
    tag = relationship("Tag", back_populates="posts")
