"""
SNS API Server — Post Service Unit Tests
=========================================

What:  Tests for PostService validation and error mapping.
How:   PostStore is patched with a mock; no database is touched.

What we test:
    ✅ Validation rejects bad input before any store call
    ✅ Store conditions map to the right application exceptions
    ✅ Unclassified store failures become DatabaseError with per-operation messages
    ✅ Formatting of listed posts
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from sns_api.exceptions import (
    ConstraintViolation,
    DatabaseError,
    DuplicateLikeError,
    NotFoundError,
    RecordNotFound,
    ValidationError,
)
from sns_api.services.post_service import PostService, parse_post_id
from sns_api.store import PostRow


class TestParsePostId:

    @pytest.mark.parametrize("raw, expected", [("1", 1), ("42", 42), (" 7 ", 7), ("-3", -3)])
    def test_integers_parse(self, raw, expected):
        assert parse_post_id(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "1.5", "12abc", "1_000", "١٢"])
    def test_non_integers_rejected(self, raw):
        with pytest.raises(ValidationError, match="無効なIDです"):
            parse_post_id(raw)

    def test_custom_message(self):
        with pytest.raises(ValidationError, match="無効な投稿IDです"):
            parse_post_id("x", message="無効な投稿IDです")


class TestListPosts:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_formats_rows(self, mock_db_session, mock_store, sample_post):
        mock_store.find_posts.return_value = [
            PostRow(post=sample_post, like_count=3, is_liked=True),
        ]
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            result = await self.service.list_posts(mock_db_session, user_id="user-1")

        assert len(result) == 1
        assert result[0].id == 1
        assert result[0].like_count == 3
        assert result[0].is_liked is True
        mock_store.find_posts.assert_awaited_once_with("user-1")

    @pytest.mark.asyncio
    async def test_empty_user_id_means_no_viewer(self, mock_db_session, mock_store):
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            await self.service.list_posts(mock_db_session, user_id="")

        mock_store.find_posts.assert_awaited_once_with(None)

    @pytest.mark.asyncio
    async def test_store_failure_becomes_database_error(self, mock_db_session, mock_store):
        mock_store.find_posts.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="投稿の取得に失敗しました"):
                await self.service.list_posts(mock_db_session)


class TestCreatePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   ", "\n\t", "　"])
    async def test_blank_content_rejected(self, mock_db_session, mock_store, content):
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(ValidationError, match="投稿内容を入力してください"):
                await self.service.create_post(mock_db_session, content=content)

        mock_store.create_post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_content_trimmed_and_empty_optionals_nulled(
        self, mock_db_session, mock_store, sample_post
    ):
        mock_store.create_post.return_value = sample_post
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            result = await self.service.create_post(
                mock_db_session, content="  hello  ", image_url="", user_id=""
            )

        mock_store.create_post.assert_awaited_once_with(
            content="hello", image_url=None, user_id=None
        )
        mock_db_session.commit.assert_awaited_once()
        assert result.id == sample_post.id

    @pytest.mark.asyncio
    async def test_store_failure_becomes_database_error(self, mock_db_session, mock_store):
        mock_store.create_post.side_effect = RuntimeError("boom")
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="投稿の作成に失敗しました"):
                await self.service.create_post(mock_db_session, content="hi")

    @pytest.mark.asyncio
    async def test_commit_failure_becomes_database_error(
        self, mock_db_session, mock_store, sample_post
    ):
        mock_store.create_post.return_value = sample_post
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk I/O error"))
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="投稿の作成に失敗しました"):
                await self.service.create_post(mock_db_session, content="hi")


class TestDeletePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_invalid_id_rejected_without_store_call(self, mock_db_session, mock_store):
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(ValidationError, match="無効なIDです"):
                await self.service.delete_post(mock_db_session, "abc")

        mock_store.delete_post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_record_not_found_maps_to_404(self, mock_db_session, mock_store):
        mock_store.delete_post.side_effect = RecordNotFound("Post", 9)
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(NotFoundError) as exc_info:
                await self.service.delete_post(mock_db_session, "9")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "投稿が見つかりません"

    @pytest.mark.asyncio
    async def test_other_failure_maps_to_500(self, mock_db_session, mock_store):
        mock_store.delete_post.side_effect = RuntimeError("boom")
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="投稿の削除に失敗しました"):
                await self.service.delete_post(mock_db_session, "9")

    @pytest.mark.asyncio
    async def test_commit_failure_maps_to_500(self, mock_db_session, mock_store):
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("locked"))
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="投稿の削除に失敗しました"):
                await self.service.delete_post(mock_db_session, "9")


class TestLikes:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_like_returns_fresh_count(self, mock_db_session, mock_store):
        mock_store.count_likes.return_value = 5
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            result = await self.service.like_post(mock_db_session, "3", "user-1")

        mock_store.create_like.assert_awaited_once_with(3, "user-1")
        mock_store.count_likes.assert_awaited_once_with(3)
        mock_db_session.commit.assert_awaited_once()
        assert result.like_count == 5
        assert result.is_liked is True

    @pytest.mark.asyncio
    async def test_like_requires_user_id(self, mock_db_session, mock_store):
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(ValidationError, match="ユーザーIDが必要です"):
                await self.service.like_post(mock_db_session, "3", None)

        mock_store.create_like.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_like_invalid_id_checked_before_user_id(self, mock_db_session, mock_store):
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(ValidationError, match="無効な投稿IDです"):
                await self.service.like_post(mock_db_session, "x", None)

    @pytest.mark.asyncio
    async def test_duplicate_like_maps_to_duplicate_error(self, mock_db_session, mock_store):
        mock_store.create_like.side_effect = ConstraintViolation("uq_likes_post_id_user_id")
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DuplicateLikeError) as exc_info:
                await self.service.like_post(mock_db_session, "3", "user-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "すでにいいねしています"
        mock_store.count_likes.assert_not_awaited()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_failure_after_like_is_database_error(self, mock_db_session, mock_store):
        mock_store.count_likes.side_effect = RuntimeError("lost connection")
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="いいねに失敗しました"):
                await self.service.like_post(mock_db_session, "3", "user-1")

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unlike_without_existing_like_is_not_an_error(self, mock_db_session, mock_store):
        mock_store.delete_likes.return_value = 0
        mock_store.count_likes.return_value = 2
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            result = await self.service.unlike_post(mock_db_session, "3", "user-9")

        assert result.like_count == 2
        assert result.is_liked is False

    @pytest.mark.asyncio
    async def test_unlike_failure_maps_to_500(self, mock_db_session, mock_store):
        mock_store.delete_likes.side_effect = RuntimeError("boom")
        with patch("sns_api.services.post_service.PostStore", return_value=mock_store):
            with pytest.raises(DatabaseError, match="いいねの削除に失敗しました"):
                await self.service.unlike_post(mock_db_session, "3", "user-1")
