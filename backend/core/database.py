from typing import Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from utils.retry import with_retry

log = structlog.get_logger()

Base = declarative_base()

# set by init_engine() during application start-up
engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker] = None


def init_engine(database_url: str, echo: bool = False) -> async_sessionmaker:
    global engine, SessionLocal

    engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
    SessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    log.info("database engine created", dialect=engine.dialect.name)
    return SessionLocal


async def create_tables(retries: int = 5, delay: float = 1.0) -> None:
    """Create missing tables, waiting for the database to come up."""
    # registers the tables on Base.metadata
    from core import tables  # noqa: F401

    if engine is None:
        raise RuntimeError("Database not configured. Call init_engine() first.")

    @with_retry(max_retries=retries, delay=delay, exceptions=(SQLAlchemyError, OSError))
    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    await _create()
    log.info("database tables ready")


async def dispose_engine() -> None:
    global engine, SessionLocal

    if engine is not None:
        await engine.dispose()
        log.info("database engine disposed")
    engine = None
    SessionLocal = None


async def is_healthy() -> bool:
    if engine is None:
        return False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        log.error("database health check failed", error=str(e))
        return False
