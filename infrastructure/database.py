"""
Database engine and session management
"""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.engine import make_url
from typing import Any, AsyncGenerator, Dict

from core.config import settings
from infrastructure.models import Base


def _build_async_url(database_url: str) -> str:
    """Make sure the database URL names an async driver"""
    url = make_url(database_url)
    drivername = url.drivername

    if "+" in drivername:
        return database_url

    driver_map = {
        "postgresql": "postgresql+asyncpg",
        "postgres": "postgresql+asyncpg",
        "mysql": "mysql+aiomysql",
        "sqlite": "sqlite+aiosqlite",
    }

    if drivername not in driver_map:
        raise ValueError(f"Unsupported database driver: {drivername}. Use an async driver or update DATABASE__URL")

    async_driver = driver_map[drivername]
    return url.set(drivername=async_driver).render_as_string(hide_password=False)


def _engine_options(async_url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.database.echo}
    # SQLite pools do not take a size
    if not make_url(async_url).drivername.startswith("sqlite"):
        options["pool_size"] = settings.database.pool_size
        options["pool_pre_ping"] = True
    return options


_async_url = _build_async_url(settings.database.url)
engine = create_async_engine(_async_url, **_engine_options(_async_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; the caller owns the transaction."""
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables(bind: AsyncEngine = engine):
    """
    Create all tables

    Development only; production schemas come from Alembic migrations.
    """
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(bind: AsyncEngine = engine):
    """
    Drop all tables

    Warning: test use only, deletes all data.
    """
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def check_database(bind: AsyncEngine = engine) -> None:
    """Round-trip ``SELECT 1``; raises whatever the driver raises."""
    async with bind.connect() as conn:
        await conn.execute(text("SELECT 1"))
