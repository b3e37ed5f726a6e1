import pytest

from campaign_payments.config.database import async_database_url, engine_options


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql://u:p@db:5432/cp", "postgresql+asyncpg://u:p@db:5432/cp"),
        ("postgres://u:p@db:5432/cp", "postgresql+asyncpg://u:p@db:5432/cp"),
        ("sqlite:///./cp.db", "sqlite+aiosqlite:///./cp.db"),
        ("postgresql+asyncpg://u:p@db/cp", "postgresql+asyncpg://u:p@db/cp"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected


def test_engine_options_ping_only_server_databases():
    assert engine_options("postgresql+asyncpg://u:p@db/cp")["pool_pre_ping"] is True
    assert "pool_pre_ping" not in engine_options("sqlite+aiosqlite:///:memory:")
