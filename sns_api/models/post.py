"""
SNS API Server — Post and Like SQLAlchemy Models
=================================================

What:  ORM models for the `posts` and `likes` tables.
How:   Inherit from the shared DeclarativeBase; Alembic reads Base.metadata.
Who:   Used by PostStore for every query and by Alembic for schema management.

Table Design:
    posts
        - Integer autoincrement id (clients address posts by this number)
        - content: trimmed, non-empty text (enforced by the service layer)
        - image_url / user_id: optional; user_id is not a foreign key
        - created_at / updated_at: UTC, timezone-aware
        - Index on created_at DESC for the newest-first listing
    likes
        - One row per (post_id, user_id); a unique constraint enforces it
        - post_id → posts.id ON DELETE CASCADE
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sns_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A user-authored content item.

    Lifecycle:
        1. Created by POST /api/posts
        2. Read through GET /api/posts (with live like counts)
        3. Deleted by DELETE /api/posts/{id}; its likes go with it
        Never updated in place.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Post body, stored trimmed",
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Optional image URL supplied by the client",
    )

    # Plain identifier; no users table exists in this service
    user_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Optional author identifier",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this post was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this post was last modified (UTC)",
    )

    # passive_deletes: the database cascade removes likes, the ORM does not load them
    likes: Mapped[List["Like"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id!r}, created_at='{self.created_at}')>"


class Like(Base):
    """
    A user's endorsement of a post. At most one per (post_id, user_id).

    Never read on its own; only counted per post and probed per viewer.
    """

    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    post: Mapped["Post"] = relationship(back_populates="likes")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_likes_post_id_user_id"),
        Index("idx_likes_post_id", "post_id"),
    )

    def __repr__(self) -> str:
        return f"<Like(post_id={self.post_id}, user_id={self.user_id!r})>"
