import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TENDERLY_WEBHOOK_SIGNING_KEY"] = "test-tenderly-signing-key"
os.environ["CAMPAIGN_PAYMENTS_CONTRACT_ADDRESS"] = "0x1111111111111111111111111111111111111111"
os.environ["TARGET_CODEC_VERSION"] = "v1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from campaign_payments.config.database import create_tables, get_db
from campaign_payments.models import Brand, BrandWallet


@pytest.fixture
async def db_engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
        poolclass=StaticPool,
    )

    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def registered_brand(session_factory):
    """A brand owning the test sender wallet, registered with mixed-case hex."""
    from factories import SENDER_ADDRESS

    async with session_factory() as session:
        brand = Brand(name="Acme")
        session.add(brand)
        await session.flush()
        session.add(
            BrandWallet(
                brand_id=brand.id,
                wallet_address="0x" + SENDER_ADDRESS[2:].upper(),
            )
        )
        await session.commit()
        return brand


@pytest.fixture
async def async_client(session_factory):
    """HTTP client bound to the app with the test database."""
    from campaign_payments.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def tenderly_signing_key():
    """Return Tenderly signing key for testing."""
    return os.environ["TENDERLY_WEBHOOK_SIGNING_KEY"]
