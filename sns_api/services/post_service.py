"""
SNS API Server — Post Service (Business Logic)
===============================================

What:  Validation, orchestration and error mapping for every post and like
       operation. Independent of HTTP: routes pass raw inputs in and get
       response models (or application exceptions) back.
How:   Each operation validates its input locally (no store call on bad
       input), runs one or two PostStore calls inside the request session,
       and translates store conditions into application exceptions.

Error Mapping:
    bad input                 → ValidationError     (400)
    RecordNotFound            → NotFoundError       (404)
    ConstraintViolation       → DuplicateLikeError  (400)
    anything else from store  → DatabaseError       (500, logged with traceback)

Commits:
    Every write commits inside its own try block before the method returns,
    so a success status is only ever sent for committed data, and a failed
    commit maps to the operation's DatabaseError. A like/unlike write and
    its follow-up count share one transaction: if the count fails, nothing
    is committed.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sns_api.exceptions import (
    ConstraintViolation,
    DatabaseError,
    DuplicateLikeError,
    NotFoundError,
    RecordNotFound,
    ValidationError,
)
from sns_api.schemas.post import FormattedPost, LikeResponse, PostResponse
from sns_api.store import PostRow, PostStore

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)


def parse_post_id(raw: Optional[str], message: str = "無効なIDです") -> int:
    """
    Parses a path segment as a base-10 integer.

    Raises:
        ValidationError: the segment is not an integer
    """
    # Deliberately strict: "12abc" and "1.5" are rejected, never truncated to 12 or 1
    if raw is None or not _INTEGER_RE.fullmatch(raw.strip()):
        raise ValidationError(message=message, field="id", context={"value": raw})
    return int(raw)


def format_post(row: PostRow) -> FormattedPost:
    post = row.post
    return FormattedPost(
        id=post.id,
        content=post.content,
        image_url=post.image_url,
        user_id=post.user_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
        like_count=row.like_count,
        is_liked=row.is_liked,
    )


class PostService:
    """
    Business logic for posts and likes.

    Stateless: every method receives the request's session and builds a
    PostStore over it.
    """

    async def list_posts(
        self,
        db: AsyncSession,
        user_id: Optional[str] = None,
    ) -> List[FormattedPost]:
        """
        All posts newest first, each with likeCount and isLiked.

        An absent or empty user_id means "no viewer": isLiked is False for
        every post and no per-user filter is queried.
        """
        viewer_id = user_id or None
        try:
            rows = await PostStore(db).find_posts(viewer_id)
        except Exception as e:
            logger.error("Error fetching posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="投稿の取得に失敗しました",
                context={"error_type": type(e).__name__},
            )

        return [format_post(row) for row in rows]

    async def create_post(
        self,
        db: AsyncSession,
        content: Optional[str],
        image_url: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> PostResponse:
        """
        Persists a new post with trimmed content.

        Empty image_url / user_id are stored as NULL.

        Raises:
            ValidationError: content missing or blank
            DatabaseError:   the insert failed
        """
        if content is None or content.strip() == "":
            raise ValidationError(message="投稿内容を入力してください", field="content")

        try:
            post = await PostStore(db).create_post(
                content=content.strip(),
                image_url=image_url or None,
                user_id=user_id or None,
            )
            await db.commit()
        except Exception as e:
            logger.error("Error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="投稿の作成に失敗しました",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post %s created (user_id=%s)", post.id, post.user_id)
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, raw_post_id: str) -> None:
        """
        Raises:
            ValidationError: id is not an integer
            NotFoundError:   no such post
            DatabaseError:   the delete failed
        """
        post_id = parse_post_id(raw_post_id, message="無効なIDです")

        try:
            await PostStore(db).delete_post(post_id)
            await db.commit()
        except RecordNotFound:
            logger.warning("Delete requested for missing post %s", post_id)
            raise NotFoundError(message="投稿が見つかりません", resource_id=post_id)
        except Exception as e:
            logger.error("Error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="投稿の削除に失敗しました",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )

        logger.info("Post %s deleted", post_id)

    async def like_post(
        self,
        db: AsyncSession,
        raw_post_id: str,
        user_id: Optional[str],
    ) -> LikeResponse:
        """
        Records user_id's like on the post and returns the new count.

        Raises:
            ValidationError:    id not an integer, or user_id missing
            DuplicateLikeError: the user already likes this post
            DatabaseError:      any other store failure
        """
        post_id = parse_post_id(raw_post_id, message="無効な投稿IDです")
        if not user_id:
            raise ValidationError(message="ユーザーIDが必要です", field="userId")

        store = PostStore(db)
        try:
            await store.create_like(post_id, user_id)
            like_count = await store.count_likes(post_id)
            await db.commit()
        except ConstraintViolation:
            raise DuplicateLikeError(post_id=post_id, user_id=user_id)
        except Exception as e:
            logger.error("Error creating like on post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="いいねに失敗しました",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )

        return LikeResponse(like_count=like_count, is_liked=True)

    async def unlike_post(
        self,
        db: AsyncSession,
        raw_post_id: str,
        user_id: Optional[str],
    ) -> LikeResponse:
        """
        Removes user_id's like from the post, if there is one.

        Unliking a post the user never liked is not an error: the response
        simply carries the current count.

        Raises:
            ValidationError: id not an integer, or user_id missing
            DatabaseError:   the delete or count failed
        """
        post_id = parse_post_id(raw_post_id, message="無効な投稿IDです")
        if not user_id:
            raise ValidationError(message="ユーザーIDが必要です", field="userId")

        store = PostStore(db)
        try:
            removed = await store.delete_likes(post_id, user_id)
            like_count = await store.count_likes(post_id)
            await db.commit()
        except Exception as e:
            logger.error("Error deleting like on post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="いいねの削除に失敗しました",
                context={"post_id": post_id, "error_type": type(e).__name__},
            )

        if removed == 0:
            logger.debug("Unlike on post %s by %s matched no like", post_id, user_id)
        return LikeResponse(like_count=like_count, is_liked=False)


post_service = PostService()
