"""
SNS API Server — Custom Exception Hierarchy
============================================

What:  Application exceptions (rendered as HTTP errors) and the two
       conditions the persistence layer reports.
How:   Each application exception carries a user-facing message, an HTTP
       status, and an optional context dict. The global handlers registered
       in main.py render every SnsApiError as {"error": message}.
Who:   Store conditions are raised by PostStore and caught by PostService;
       application exceptions are raised by PostService and caught by the
       global handlers.

Exception Hierarchy:
    SnsApiError (base)
    ├── ValidationError      → 400 Bad Request
    ├── DuplicateLikeError   → 400 Bad Request (like already exists)
    ├── NotFoundError        → 404 Not Found
    └── DatabaseError        → 500 Internal Server Error

    StoreCondition (base, never reaches the client)
    ├── ConstraintViolation  (a unique constraint rejected the write)
    └── RecordNotFound       (the targeted row does not exist)

Messages are Japanese, matching the client application this API serves.
"""

from typing import Any, Dict, Optional


class SnsApiError(Exception):
    """
    Base exception for all SNS API application errors.

    Attributes:
        message:      User-facing error description (returned as {"error": message})
        status_code:  HTTP status used by the global handler
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "サーバーエラーが発生しました",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnsApiError):
    """
    Raised when client input fails validation.

    When:    Blank content, non-integer post id, missing userId.
    HTTP:    400 Bad Request. No store call has been attempted.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "リクエストの形式が正しくありません",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateLikeError(SnsApiError):
    """
    Raised when a user likes a post they have already liked.

    HTTP:    400 Bad Request (the original client treats it as a bad request,
             not a 409).
    """

    status_code = 400

    def __init__(
        self,
        post_id: Optional[int] = None,
        user_id: Optional[str] = None,
    ):
        super().__init__(
            message="すでにいいねしています",
            context={"post_id": post_id, "user_id": user_id},
        )


class NotFoundError(SnsApiError):
    """
    Raised when a requested resource does not exist.

    When:    DELETE /api/posts/{id} for an id the store does not have.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "投稿が見つかりません",
        resource: str = "post",
        resource_id: Optional[Any] = None,
    ):
        ctx: Dict[str, Any] = {"resource": resource}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SnsApiError):
    """
    Raised when a store operation fails for an unclassified reason.

    HTTP:    500 Internal Server Error

    The message is a generic, per-operation text. The original exception is
    logged server-side and its type kept in `context`; neither reaches the
    client.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "サーバーエラーが発生しました",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Store-reported conditions
# ══════════════════════════════════════════════════════════════════════════


class StoreCondition(Exception):
    """Base for conditions reported by the persistence layer."""


class ConstraintViolation(StoreCondition):
    """A unique constraint rejected an insert."""

    def __init__(self, constraint: Optional[str] = None):
        self.constraint = constraint
        super().__init__(f"unique constraint violated: {constraint or 'unknown'}")


class RecordNotFound(StoreCondition):
    """A write targeted a row that does not exist."""

    def __init__(self, model: str, key: Any):
        self.model = model
        self.key = key
        super().__init__(f"{model} {key!r} not found")
