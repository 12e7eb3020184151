import os

# libs.db.config builds its engine at import time; pin test settings first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import get_settings

get_settings.cache_clear()

from libs.db.base import Base
from services.payments_service import models as _payment_models  # noqa: F401
from services.payments_service.services.reconciliation import ReconciliationEngine
from services.store_service import models as _store_models  # noqa: F401
from services.store_service.services.cart_service import CartService
from services.store_service.services.order_service import OrderService
from tests.fakes import FakeInvoice, FakeMailer, FakeNotifier, FakeStripe


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Services wired with fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_stripe() -> FakeStripe:
    return FakeStripe()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def payments(db_session, fake_stripe, fake_mailer, fake_notifier) -> ReconciliationEngine:
    return ReconciliationEngine(
        db_session,
        fake_stripe,
        mailer=fake_mailer,
        notifier=fake_notifier,
        invoice=FakeInvoice(db_session),
    )


@pytest.fixture
def cart_service(db_session, payments, fake_notifier) -> CartService:
    return CartService(db_session, payments=payments, notifier=fake_notifier)


@pytest.fixture
def order_service(db_session, payments, fake_mailer) -> OrderService:
    return OrderService(db_session, payments, mailer=fake_mailer)


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------


def _override_collaborators(app, db_session, fake_stripe, fake_mailer, fake_notifier):
    from libs.common.notifications import get_notifier
    from libs.db.session import get_async_db
    from services.payments_service.dependencies import get_mailer, get_stripe_client

    async def _db():
        yield db_session

    app.dependency_overrides[get_async_db] = _db
    app.dependency_overrides[get_stripe_client] = lambda: fake_stripe
    app.dependency_overrides[get_mailer] = lambda: fake_mailer
    app.dependency_overrides[get_notifier] = lambda: fake_notifier


@pytest_asyncio.fixture
async def store_client(
    db_session, fake_stripe, fake_mailer, fake_notifier
) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient for the store app with DB and collaborators overridden.
    """
    from services.store_service.app.main import app

    _override_collaborators(app, db_session, fake_stripe, fake_mailer, fake_notifier)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def payments_client(
    db_session, fake_stripe, fake_mailer, fake_notifier
) -> AsyncGenerator[AsyncClient, None]:
    from services.payments_service.app.main import app

    _override_collaborators(app, db_session, fake_stripe, fake_mailer, fake_notifier)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
