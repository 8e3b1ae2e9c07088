"""
Storefront Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the whole suite.
How:   Catalog tests run against an in-memory SQLite database (aiosqlite) built
       from the ORM metadata; file-backed stores point at tmp_path; HTTP tests
       drive the real FastAPI app through httpx's ASGITransport.

Fixture Hierarchy:
    Function-scoped (fresh for each test):
    ├── mock_db_session:   AsyncMock session (asserts "no store access")
    ├── db_engine:         in-memory SQLite engine with all tables created
    ├── session_factory:   async_sessionmaker bound to db_engine
    ├── db_session:        one session for service-level tests
    ├── data_dir:          temporary DATA_ROOT
    ├── page_store / branding_service / mail_service / fake_transport
    ├── app:               create_app() wired to the fixtures above
    └── test_client:       HTTPX AsyncClient for endpoint tests

The lifespan is not run by ASGITransport, so no DB_* variables are needed:
the app fixture sets app.state.session_factory directly.
"""

import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any storefront import builds the settings singleton
os.environ["DATA_ROOT"] = tempfile.mkdtemp(prefix="storefront_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MAIL_RETRY_ATTEMPTS"] = "1"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.database import Base  # noqa: E402
from storefront.exceptions import MailDeliveryError  # noqa: E402
from storefront.models.catalog import Category, Product, Service  # noqa: E402
from storefront.services.branding_service import BrandingService, get_branding_service  # noqa: E402
from storefront.services.email_log_service import EmailLogFacade, get_email_log_facade  # noqa: E402
from storefront.services.mail_service import EmailLogStore, MailService  # noqa: E402
from storefront.services.mail_transport import MailTransport, OutgoingEmail  # noqa: E402
from storefront.services.page_store import PageStore, get_page_store  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeTransport(MailTransport):
    """Records messages instead of delivering them; fails on demand."""

    def __init__(self):
        self.sent = []
        self.fail_with = None

    async def send(self, message: OutgoingEmail) -> None:
        if self.fail_with is not None:
            raise MailDeliveryError(message=self.fail_with)
        self.sent.append(message)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that must prove the store is never queried.

    Usage:
        await catalog.get_by_id(mock_db_session, "abc")
        mock_db_session.execute.assert_not_awaited()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    # StaticPool keeps the single in-memory database alive across sessions
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
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_catalog(session_factory):
    """
    Rows used across catalog tests:

        categories: 1 Apparel, 2 Archived (soft-deleted), 3 Books
        products:   1 T-Shirt (Apparel), 2 Old Mug (soft-deleted), 3 Gift Card (no category)
        services:   1 Haircut, 2 Retired Massage (soft-deleted)
    """
    deleted = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with session_factory() as session:
        session.add_all([
            Category(id=1, name="Apparel", slug="apparel", type="PRODUCT"),
            Category(id=2, name="Archived", slug="archived", type="PRODUCT", deleted_at=deleted),
            Category(id=3, name="Books", slug="books", type="PRODUCT", description="Paper and ebooks"),
        ])
        await session.flush()
        session.add_all([
            Product(id=1, name="T-Shirt", slug="t-shirt", price=Decimal("19.99"), category_id=1, sku="TS-1"),
            Product(id=2, name="Old Mug", slug="old-mug", price=Decimal("5.00"), deleted_at=deleted),
            Product(id=3, name="Gift Card", slug="gift-card", price=Decimal("25.00"), type="DIGITAL"),
            Service(id=1, name="Haircut", slug="haircut", price=Decimal("30.00"), duration=45),
            Service(
                id=2, name="Retired Massage", slug="retired-massage",
                price=Decimal("60.00"), duration=60, deleted_at=deleted,
            ),
        ])
        await session.commit()


# ══════════════════════════════════════════════════════════════════════════
# File-Backed Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def data_dir(tmp_path):
    """A fresh DATA_ROOT for each test (pytest cleans tmp_path up)."""
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def page_store(data_dir):
    return PageStore(pages_dir=str(data_dir / "pages"))


@pytest.fixture
def branding_service(data_dir):
    return BrandingService(settings_path=str(data_dir / "branding-settings.json"))


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def mail_service(data_dir, fake_transport):
    store = EmailLogStore(logs_path=str(data_dir / "email-logs" / "logs.json"))
    return MailService(store=store, transport=fake_transport)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory, page_store, branding_service, mail_service):
    """The real application with every store redirected to test fixtures."""
    from storefront.main import create_app

    application = create_app()
    application.state.session_factory = session_factory
    application.dependency_overrides[get_page_store] = lambda: page_store
    application.dependency_overrides[get_branding_service] = lambda: branding_service
    application.dependency_overrides[get_email_log_facade] = lambda: EmailLogFacade(mailer=mail_service)
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
