"""
Test configuration and fixtures.
Uses an in-memory SQLite database (aiosqlite) and a real boto3 client with
dummy credentials: presigning is offline, network calls are patched per test.
"""
import os

# Set test environment before any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_ACCESS_KEY"] = "test-access-key"
os.environ["STORAGE_SECRET_KEY"] = "test-secret-key"

import pytest
from datetime import datetime
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from filedrop.config import Settings
from filedrop.models.base import Base
from filedrop.models.file_record import FileRecord, FileStatus, Exposure
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.storage.object_store import ObjectStore


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": TEST_DATABASE_URL,
        "environment": "test",
        "storage_endpoint": "http://localhost:9000",
        "storage_bucket": "uploads",
        "storage_access_key": "test-access-key",
        "storage_secret_key": "test-secret-key",
        "verify_uploads": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
async def db_session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """Create a fresh in-memory database and a session factory bound to it."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    
    yield session_maker
    
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(db_session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with db_session_maker() as session:
        yield session


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def verifying_settings() -> Settings:
    return make_settings(verify_uploads=True)


@pytest.fixture
def object_store(test_settings: Settings) -> ObjectStore:
    return ObjectStore(test_settings)


@pytest.fixture
def catalog(db_session: AsyncSession, test_settings: Settings) -> FileRecordRepository:
    return FileRecordRepository(db_session, timeout=test_settings.backend_timeout_seconds)


@pytest.fixture
def make_record(db_session: AsyncSession):
    """Insert a file record with an explicit creation time."""
    async def _make_record(
        name: str,
        created_at: datetime,
        status: FileStatus = FileStatus.PENDING,
        exposure: Exposure = Exposure.PUBLIC,
        size: int = 1024,
    ) -> FileRecord:
        record = FileRecord(
            file_name=f"{int(created_at.timestamp() * 1000)}-{name}",
            bucket="uploads",
            original_name=name,
            size=size,
            url=None if exposure == Exposure.PRIVATE else f"http://localhost:9000/uploads/{name}",
            exposure=exposure,
            status=status,
            created_at=created_at,
        )
        db_session.add(record)
        await db_session.commit()
        await db_session.refresh(record)
        return record
    
    return _make_record


def get_test_app(
    db_session: AsyncSession,
    settings: Settings,
    store: Optional[ObjectStore] = None
) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    from filedrop.main import app
    from filedrop.database import get_db
    from filedrop.api.dependencies import get_settings
    from filedrop.storage.object_store import get_object_store
    
    store = store or ObjectStore(settings)
    
    async def override_get_db():
        yield db_session
    
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_object_store] = lambda: store
    
    return app


@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    test_settings: Settings,
    object_store: ObjectStore
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = get_test_app(db_session, test_settings, object_store)
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
def verifying_store(verifying_settings: Settings) -> ObjectStore:
    return ObjectStore(verifying_settings)


@pytest.fixture(scope="function")
async def verifying_client(
    db_session: AsyncSession,
    verifying_settings: Settings,
    verifying_store: ObjectStore
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an app that checks storage before confirming uploads."""
    app = get_test_app(db_session, verifying_settings, verifying_store)
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    app.dependency_overrides.clear()
