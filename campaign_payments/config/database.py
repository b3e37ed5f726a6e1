from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from campaign_payments.config.settings import settings

# Sync driver prefixes mapped to the async driver the engine needs
ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def async_database_url(url: str) -> str:
    """Rewrite a plain DATABASE_URL to its async driver; explicit drivers are kept."""
    for prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "future": True}
    # SQLite has no server connection to ping
    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return options


database_url = async_database_url(settings.DATABASE_URL)

engine = create_async_engine(database_url, **engine_options(database_url))

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base for all models
Base = declarative_base()


async def create_tables(bind=None) -> None:
    """Create any missing tables for the registered models."""
    # Registers every model on Base.metadata
    import campaign_payments.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """Dependency for database session in routes."""
    async with async_session() as session:
        yield session
