"""
SNS API Server — Pydantic Request/Response Schemas
===================================================

What:  The JSON contract between the client and this API.
How:   FastAPI validates request bodies against the request models and
       serializes responses through the response models. Field names are
       snake_case in Python and camelCase on the wire (alias generator), so
       `image_url` travels as `imageUrl`.

Request models deliberately mark every field optional: "content is
required" and "userId is required" are business rules with their own error
messages, enforced by PostService rather than by schema validation.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case attributes in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreateRequest(CamelModel):
    """Body of POST /api/posts."""

    content: Optional[str] = Field(default=None, description="Post body (required, trimmed)")
    image_url: Optional[str] = Field(default=None, description="Optional image URL")
    user_id: Optional[str] = Field(default=None, description="Optional author identifier")


class LikeRequest(CamelModel):
    """Body of POST and DELETE /api/posts/{id}/like."""

    user_id: Optional[str] = Field(default=None, description="Identifier of the liking user")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(CamelModel):
    """A stored post exactly as persisted. Returned by POST /api/posts."""

    id: int = Field(description="Post identifier")
    content: str = Field(description="Trimmed post body")
    image_url: Optional[str] = Field(default=None, description="Image URL or null")
    user_id: Optional[str] = Field(default=None, description="Author identifier or null")
    created_at: datetime = Field(description="Creation time (ISO 8601)")
    updated_at: datetime = Field(description="Last modification time (ISO 8601)")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """SQLite returns naive datetimes; every stored timestamp is UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class FormattedPost(PostResponse):
    """
    A post enriched for listing.

    like_count is the live number of likes at response time; is_liked is
    only ever true when the request named a viewer via ?userId=.
    """

    like_count: int = Field(description="Number of likes on this post")
    is_liked: bool = Field(description="Whether the requesting userId liked this post")


class LikeResponse(CamelModel):
    """Result of a like or unlike: the post's new count and the caller's state."""

    like_count: int = Field(description="Number of likes after the operation")
    is_liked: bool = Field(description="True after like, false after unlike")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Every error body: {"error": "<message>"}."""

    error: str = Field(description="Human-readable error message")


class HealthResponse(CamelModel):
    """Returned by GET /health for monitoring and container probes."""

    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
