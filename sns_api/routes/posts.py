"""
SNS API Server — Post and Like Route Handlers
==============================================

What:  The five /api/posts endpoints.
How:   Extract query/path/body values, delegate to PostService, return the
       response model with the right success status. Errors are raised as
       application exceptions and rendered by the global handlers.

Route Inventory:
    GET    /api/posts?userId=<id>     list posts (newest first) with likes
    POST   /api/posts                 create a post
    DELETE /api/posts/{id}            delete a post
    POST   /api/posts/{id}/like       like a post
    DELETE /api/posts/{id}/like       unlike a post

Path ids are taken as strings and parsed by the service, so a non-integer
id produces the project's own 400 message instead of FastAPI's 422.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sns_api.database import get_db_session
from sns_api.schemas.post import (
    ErrorResponse,
    FormattedPost,
    LikeRequest,
    LikeResponse,
    MessageResponse,
    PostCreateRequest,
    PostResponse,
)
from sns_api.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Posts"])


@router.get(
    "/posts",
    response_model=List[FormattedPost],
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List posts with like counts",
)
async def list_posts(
    user_id: Optional[str] = Query(
        default=None,
        alias="userId",
        description="Viewer identifier; when given, isLiked reflects this user's likes",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[FormattedPost]:
    return await post_service.list_posts(db=db, user_id=user_id)


@router.post(
    "/posts",
    status_code=201,
    response_model=PostResponse,
    responses={
        400: {"description": "Content missing or blank", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    payload: Optional[PostCreateRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    payload = payload or PostCreateRequest()
    return await post_service.create_post(
        db=db,
        content=payload.content,
        image_url=payload.image_url,
        user_id=payload.user_id,
    )


@router.delete(
    "/posts/{post_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid id", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db=db, raw_post_id=post_id)
    return MessageResponse(message="投稿を削除しました")


@router.post(
    "/posts/{post_id}/like",
    status_code=201,
    response_model=LikeResponse,
    responses={
        400: {"description": "Invalid id, missing userId, or already liked", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Like a post",
)
async def like_post(
    post_id: str,
    payload: Optional[LikeRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    user_id = payload.user_id if payload else None
    return await post_service.like_post(db=db, raw_post_id=post_id, user_id=user_id)


@router.delete(
    "/posts/{post_id}/like",
    response_model=LikeResponse,
    responses={
        400: {"description": "Invalid id or missing userId", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Unlike a post",
)
async def unlike_post(
    post_id: str,
    payload: Optional[LikeRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    user_id = payload.user_id if payload else None
    return await post_service.unlike_post(db=db, raw_post_id=post_id, user_id=user_id)
