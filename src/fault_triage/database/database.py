import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text

from src.fault_triage.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Define the base class for SQLAlchemy models
Base = declarative_base()


def build_database_url(settings: Settings) -> URL:
    """Build the asyncpg connection URL; credentials are escaped by SQLAlchemy."""
    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.POSTGRES_USER,
        password=settings.POSTGRES_PASSWORD,
        host=settings.POSTGRES_HOST,
        port=settings.POSTGRES_PORT,
        database=settings.POSTGRES_DB,
    )


settings = get_settings()
DATABASE_URL = build_database_url(settings)

# Create async engine and sessionmaker
engine = create_async_engine(DATABASE_URL, echo=settings.DEBUG_MODE, future=True)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class DatabaseManager:
    is_connected: bool = False
    retry_interval: int = 5  # seconds

    @classmethod
    async def connect(cls):
        """Connect to PostgreSQL database"""
        try:
            if cls.is_connected:
                logger.info("Already connected to the database")
                return
            async with engine.connect() as conn:
                await conn.scalar(text("SELECT 1"))
            cls.is_connected = True
            logger.info("Database connection established")
        except SQLAlchemyError as e:
            cls.is_connected = False
            logger.error(f"Database connection failed: {str(e)}")
            raise e

    @classmethod
    async def disconnect(cls):
        """Disconnect from database"""
        if cls.is_connected:
            await engine.dispose()
            cls.is_connected = False
            logger.info("Database connection closed")

    @classmethod
    async def reconnect(cls, max_attempts: int = 1):
        attempts = 0
        while not cls.is_connected and attempts < max_attempts:
            try:
                await cls.connect()
            except Exception as e:
                logger.error(f"Reconnection attempt failed: {str(e)}")
                await asyncio.sleep(cls.retry_interval)
                attempts += 1
        if not cls.is_connected:
            raise SQLAlchemyError("Max reconnection attempts exceeded")

    @classmethod
    async def create_tables(cls):
        """Create customers, locations, assets and fault_events tables."""
        # Register every mapped table on Base.metadata before create_all
        from src.fault_triage.customers import models as _customer_models  # noqa
        from src.fault_triage.fault_events import models as _fault_models  # noqa

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Ensured tables: {sorted(Base.metadata.tables)}")

    @classmethod
    async def get_client(cls) -> AsyncSession:
        if not cls.is_connected:
            logger.error("Database is not connected")
            raise RuntimeError("Database is not connected")
        return SessionLocal()

    @classmethod
    @asynccontextmanager
    async def session_scope(cls) -> AsyncIterator[AsyncSession]:
        """Yield a session for one unit of work and always close it."""
        session = await cls.get_client()
        try:
            yield session
        finally:
            await session.close()


db = DatabaseManager()
