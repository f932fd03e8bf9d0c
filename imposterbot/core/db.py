# imposterbot/core/db.py

import logging
from contextlib import asynccontextmanager
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from imposterbot.core.config import settings

log = logging.getLogger(__name__)

db_url = URL.create(
    drivername="postgresql+asyncpg",
    username=settings.DB_USER,
    password=settings.DB_PASSWORD,
    host=settings.DB_HOST,
    port=settings.DB_PORT,
    database=settings.DB_NAME,
)

try:
    engine = create_async_engine(db_url, echo=False, pool_pre_ping=True)
    # Rows are read back after the transaction closes (previews, listeners).
    SessionLocal = async_sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )
    log.info("Async SQLAlchemy engine initialized successfully.")
except Exception as e:
    log.critical(f"Failed to initialize database engine: {e}")
    raise


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def get_session():
    """
    Session source handed to NotificationStore; one session per store call.
    Commits when the block exits cleanly, so a store method that already
    committed ends with an empty commit. Any exception rolls the session back
    and propagates for the store to wrap in StoreFailure.

    Usage:
        store = NotificationStore(get_session)
    """
    session = SessionLocal()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        log.error(f"Notification store transaction rolled back: {e}")
        raise
    finally:
        await session.close()
