"""Database Connection and Session Management"""

import re
import ssl
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from academy.config import settings


def _async_url(url: str) -> tuple[str, dict]:
    """Rewrite a postgres URL for asyncpg and move sslmode into connect_args."""
    url = re.sub(r"^postgres(ql)?://", "postgresql+asyncpg://", url)
    connect_args = {}
    # asyncpg takes ssl=SSLContext, not sslmode (hosted Postgres pools require TLS)
    if re.search(r"[?&]sslmode=(require|required|verify-full)", url, re.I):
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ctx
    url = re.sub(r"[?&]sslmode=[^&]+", "", url, flags=re.I)
    url = url.replace("?&", "?").rstrip("?")
    return url, connect_args


database_url, connect_args = _async_url(settings.DATABASE_URL)

engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Commits on success and rolls back when the request handler raises,
    so persistence failures reach the caller untouched.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables (local development only)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
