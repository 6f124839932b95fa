"""
SNS API Server — Persistence Client
====================================

What:  The only module that builds SQL. PostStore wraps one AsyncSession and
       offers the handful of operations the service layer needs.
How:   Each method issues a single statement (or insert + flush) against the
       request's session. Commit/rollback belongs to the session owner
       (Database.session), not to the store.

Store-reported conditions:
    The service decides HTTP statuses from two named conditions instead of
    driver- or ORM-specific error codes:
    - ConstraintViolation: the (post_id, user_id) unique constraint rejected a like
    - RecordNotFound:      a delete matched no post
    Everything else (connection loss, foreign-key failure, ...) propagates as
    the raw SQLAlchemy exception.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sns_api.exceptions import ConstraintViolation, RecordNotFound
from sns_api.models.post import Like, Post

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL)
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    Tells a unique-constraint failure apart from other integrity errors.

    PostgreSQL (asyncpg) exposes SQLSTATE 23505 on the driver error;
    SQLite (aiosqlite) only reports it in the message text.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "UNIQUE constraint failed" in str(orig)


@dataclass
class PostRow:
    """A post together with its live like count and the viewer's like flag."""

    post: Post
    like_count: int
    is_liked: bool


class PostStore:
    """Persistence operations for posts and likes over one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_posts(self, viewer_id: Optional[str] = None) -> List[PostRow]:
        """
        All posts, newest first, with like counts.

        The per-viewer EXISTS probe is only added to the query when a viewer
        is given; without one every row reports is_liked=False.

        Query shape:
            SELECT posts.*,
                   (SELECT count(likes.id) FROM likes WHERE likes.post_id = posts.id),
                   EXISTS (SELECT * FROM likes WHERE post_id = posts.id AND user_id = :viewer)
            FROM posts ORDER BY posts.created_at DESC
        """
        like_count = (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
            .label("like_count")
        )
        columns = [Post, like_count]

        if viewer_id is not None:
            liked = (
                exists()
                .where(Like.post_id == Post.id, Like.user_id == viewer_id)
                .correlate(Post)
                .label("is_liked")
            )
            columns.append(liked)

        query = select(*columns).order_by(Post.created_at.desc())
        result = await self.session.execute(query)

        rows = []
        for row in result.all():
            is_liked = bool(row[2]) if viewer_id is not None else False
            rows.append(PostRow(post=row[0], like_count=int(row[1] or 0), is_liked=is_liked))
        return rows

    async def create_post(
        self,
        content: str,
        image_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Post:
        """Inserts a post and flushes so id and timestamps are populated."""
        post = Post(content=content, image_url=image_url, user_id=user_id)
        self.session.add(post)
        await self.session.flush()
        return post

    async def delete_post(self, post_id: int) -> None:
        """
        Deletes one post by id.

        Raises:
            RecordNotFound: no post has this id
        """
        result = await self.session.execute(delete(Post).where(Post.id == post_id))
        if result.rowcount == 0:
            raise RecordNotFound("Post", post_id)

    async def create_like(self, post_id: int, user_id: str) -> Like:
        """
        Inserts a like row.

        Raises:
            ConstraintViolation: (post_id, user_id) already liked
            IntegrityError: any other integrity failure (e.g. unknown post)
        """
        like = Like(post_id=post_id, user_id=user_id)
        self.session.add(like)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConstraintViolation("uq_likes_post_id_user_id") from e
            raise
        return like

    async def delete_likes(self, post_id: int, user_id: str) -> int:
        """Deletes the like matching (post_id, user_id), if any. Returns rows removed."""
        result = await self.session.execute(
            delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
        )
        return result.rowcount

    async def count_likes(self, post_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Like.id)).where(Like.post_id == post_id)
        )
        return result.scalar_one()
