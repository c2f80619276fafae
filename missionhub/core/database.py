"""Database configuration and session management."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self):
        self._engine = None
        self._session_factory = None
        self._initialized = False

    def init(self, database_url: str, echo: bool = False, pool_size: int = 5) -> None:
        """
        Initialize the database engine and session factory.

        Args:
            database_url: Async SQLAlchemy URL (asyncpg or aiosqlite)
            echo: Enable SQL query logging
            pool_size: Connection pool size (0 for NullPool)
        """
        if self._initialized:
            logger.warning("Database already initialized, skipping re-initialization")
            return

        # Convert postgresql:// to postgresql+asyncpg:// if needed
        if database_url.startswith("postgresql://"):
            database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

        logger.info("Initializing database connection...")

        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection, otherwise every session sees an empty database
            self._engine = create_async_engine(database_url, echo=echo, poolclass=StaticPool)
        elif database_url.startswith("sqlite"):
            self._engine = create_async_engine(database_url, echo=echo)
        elif pool_size == 0:
            # NullPool for serverless environments
            self._engine = create_async_engine(
                database_url,
                echo=echo,
                poolclass=NullPool,
            )
        else:
            self._engine = create_async_engine(
                database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=10,
                pool_pre_ping=True,
                pool_recycle=300,
            )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

        self._initialized = True
        logger.info("Database connection initialized successfully")

    async def create_all(self) -> None:
        """Create any missing tables for the registered models."""
        if not self._initialized or not self._engine:
            raise RuntimeError("Database not initialized. Call init() first.")

        # Register every model on Base.metadata
        import missionhub.models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def close(self) -> None:
        """Close the database engine and dispose of connections."""
        if self._engine:
            await self._engine.dispose()
            self._initialized = False
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a fresh session for one unit of work.

        The caller commits explicitly; anything left uncommitted is rolled back
        when the block exits.
        """
        if not self._initialized or not self._session_factory:
            raise RuntimeError("Database not initialized. Call init() first.")

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                if session.in_transaction():
                    await session.rollback()

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            bool: True if connection is healthy, False otherwise
        """
        if not self._initialized or not self._engine:
            return False

        try:
            from sqlalchemy import text
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    @property
    def dialect_name(self) -> str | None:
        return self._engine.dialect.name if self._engine else None

    @property
    def is_initialized(self) -> bool:
        """Check if database is initialized."""
        return self._initialized


# Global database manager instance
db_manager = DatabaseManager()
