"""Global pytest fixtures for the organization portal.

This module provides shared fixtures for testing including:
- Mock sessions and Redis for unit tests
- An in-memory SQLite database standing in for PostgreSQL
- An httpx client wired to the app with the database overridden
- Users and Bearer headers for each role
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orgportal.auth import create_access_token
from orgportal.database import get_db
from orgportal.documents import DocumentGenerator, LocalBlobStore, PdfConversionError
from orgportal.models import Base, User
from orgportal.services.document_service import DocumentService, get_document_service
from tests.factories import UserFactory, organization_payload


# ===========================================
# MOCK FIXTURES
# ===========================================


@pytest.fixture
def db_session() -> AsyncMock:
    """Create a mock async database session for unit tests."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Create a mock Redis client for unit tests."""
    redis = MagicMock()
    redis.publish = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


class FakePdfConverter:
    """Stands in for LibreOffice."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    def to_pdf(self, docx_bytes: bytes) -> bytes:
        self.calls += 1
        if self.fail:
            raise PdfConversionError("soffice exited with status 1")
        return b"%PDF-1.4 fake"


@pytest.fixture
def pdf_converter() -> FakePdfConverter:
    return FakePdfConverter()


@pytest.fixture
def document_service(tmp_path: Path, pdf_converter: FakePdfConverter) -> DocumentService:
    """A document service with the real DOCX renderer, a fake converter and a temp store."""
    return DocumentService(
        generator=DocumentGenerator(),
        converter=pdf_converter,
        blob_store=LocalBlobStore(tmp_path / "generated-docs", "/generated-docs"),
    )


# ===========================================
# DATABASE FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A real session for service-level tests."""
    async with session_factory() as session:
        yield session


# ===========================================
# USER FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def owner(session_factory) -> User:
    async with session_factory() as session:
        return await UserFactory.create(session, name="Owner")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    async with session_factory() as session:
        return await UserFactory.create(session, name="Someone Else")


@pytest_asyncio.fixture
async def admin(session_factory) -> User:
    async with session_factory() as session:
        return await UserFactory.create(session, role="admin", name="Admin")


def auth_headers(user: Any) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def owner_headers(owner) -> dict[str, str]:
    return auth_headers(owner)


@pytest.fixture
def other_headers(other_user) -> dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin)


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def async_client(
    session_factory,
    document_service: DocumentService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the database and documents overridden."""
    from orgportal.main import app

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_document_service] = lambda: document_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ===========================================
# API SCENARIO FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def pending_org(async_client: AsyncClient, owner_headers) -> dict[str, Any]:
    """A registration with two services, submitted by ``owner``."""
    response = await async_client.post(
        "/api/pending-organizations",
        json=organization_payload(),
        headers=owner_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def approved_org(
    async_client: AsyncClient,
    pending_org: dict[str, Any],
    admin_headers,
) -> dict[str, Any]:
    """``pending_org`` promoted to a live, approved organization."""
    response = await async_client.patch(
        f"/api/pending-organizations/{pending_org['id']}/status",
        json={"status": "approved", "action": "move"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]
