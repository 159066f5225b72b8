"""
Shared pytest fixtures and configuration
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import MagicMock, AsyncMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.main import app
from app.database import get_async_session
from app.dependencies import get_media_uploader
from app.apps.blog.models import BlogPost  # noqa: F401
from app.apps.media.uploader import UploadResult


# In-memory SQLite database for testing (aiosqlite provides the async driver)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

UPLOADED_URL = "https://cdn.example.com/storage/v1/object/public/content-media/blogs/cover.png"


@pytest_asyncio.fixture(scope="function")
async def test_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database and session for each test.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    await test_engine.dispose()


@pytest.fixture
def mock_uploader():
    """
    MediaUploader double; upload succeeds with a fixed public URL.
    """
    uploader = MagicMock()
    uploader.upload = AsyncMock(return_value=UploadResult(url=UPLOADED_URL, path="blogs/cover.png"))
    uploader.remove = AsyncMock(return_value=None)
    return uploader


@pytest_asyncio.fixture(scope="function")
async def client(test_session: AsyncSession, mock_uploader) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with overridden database and uploader dependencies.
    """
    async def override_get_async_session():
        yield test_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_media_uploader] = lambda: mock_uploader

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    # Cleanup
    app.dependency_overrides.clear()


@pytest.fixture
def blog_payload():
    """
    Factory for valid blog create payloads.
    """
    def _make(slug: str = "intro", **overrides):
        payload = {
            "title": f"Post {slug}",
            "slug": slug,
            "summary": "A short summary",
            "body": "The full body of the post",
            "author": "Ada",
            "category": "News",
            "tags": ["club", "events"],
        }
        payload.update(overrides)
        return payload
    return _make
