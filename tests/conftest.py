"""Pytest configuration and fixtures for the document management service.

Environment is set before app.main is imported: SQLite (aiosqlite, in-memory)
for metadata and the local blob store under a temp directory. HTTP tests use
app.main:app with the DB session and blob store dependencies overridden so
the API, repository and consistency tests share one in-memory database.
"""

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

TEST_SIGNING_SECRET = "test-signing-secret"

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_SIGNING_SECRET"] = TEST_SIGNING_SECRET
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="dms-test-storage-")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.v1.dependencies import get_blob_store  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.infrastructure.external.storage.local_storage import LocalBlobStore  # noqa: E402
from app.infrastructure.persistence.database import (  # noqa: E402
    Base,
    get_db,
    get_db_transactional,
)
from app.infrastructure.persistence.models import Document  # noqa: E402, F401
from app.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Each test starts from the environment configured above."""
    get_settings.cache_clear()


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine with the document table created."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    """Local blob store rooted in a per-test directory."""
    return LocalBlobStore(
        storage_root=str(tmp_path / "blobs"),
        signing_secret=TEST_SIGNING_SECRET,
    )


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    blob_store: LocalBlobStore,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI) backed by the test DB and blob store."""

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    async def _get_db_transactional() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_db_transactional] = _get_db_transactional
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    limiter.enabled = False
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True
