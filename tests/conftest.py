"""
SNS API Server — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    ├── mock_store:      PostStore double with AsyncMock methods
    ├── database:        Database handle over a fresh SQLite file, tables created
    ├── test_client:     HTTPX AsyncClient bound to an app using `database`
    └── make_post:       Inserts a post directly (explicit timestamps)
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from sns_api.database import Database  # noqa: E402
from sns_api.main import create_app  # noqa: E402
from sns_api.models.post import Post  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_x(mock_db_session):
            mock_db_session.execute.return_value.all.return_value = []
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_store():
    """A PostStore stand-in; patch it into post_service with `PostStore.return_value`."""
    store = MagicMock()
    store.find_posts = AsyncMock(return_value=[])
    store.create_post = AsyncMock()
    store.delete_post = AsyncMock(return_value=None)
    store.create_like = AsyncMock()
    store.delete_likes = AsyncMock(return_value=0)
    store.count_likes = AsyncMock(return_value=0)
    return store


@pytest.fixture
def sample_post():
    """A detached Post with every column populated."""
    now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    return Post(
        id=1,
        content="hello",
        image_url=None,
        user_id="user-1",
        created_at=now,
        updated_at=now,
    )


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    A real Database handle over a throwaway SQLite file.

    Foreign keys are enforced (see Database), so cascades behave as on PostgreSQL.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'sns_test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into a fresh app (no server, no lifespan).

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
    """
    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_post(database):
    """Inserts a post with an explicit created_at and returns its id."""

    async def _make_post(content: str, created_at: datetime, user_id=None) -> int:
        async with database.session() as session:
            post = Post(
                content=content,
                user_id=user_id,
                created_at=created_at,
                updated_at=created_at,
            )
            session.add(post)
            await session.flush()
            return post.id

    return _make_post
