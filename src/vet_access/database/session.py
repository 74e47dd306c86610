"""
Database session management utilities for the vet-access package.

This module provides the async session factory and the transaction primitive
that the grant store relies on to make create and revoke atomic.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..exceptions import TransactionException, VetAccessException

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages database sessions and provides transaction utilities."""

    def __init__(
        self, engine: AsyncEngine, session_config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize session manager with database engine.

        Args:
            engine: SQLAlchemy async engine
            session_config: Optional session configuration overrides
        """
        self.engine = engine
        self._is_initialized = False

        config = {"expire_on_commit": False, "autoflush": True}
        if session_config:
            config.update(session_config)

        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autoflush=config["autoflush"],
            expire_on_commit=config["expire_on_commit"],
        )

    async def create_session(self) -> AsyncSession:
        """
        Create a new database session.

        Returns:
            New async database session
        """
        return self.session_factory()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions with automatic cleanup.

        Yields:
            Database session

        Example:
            async with session_manager.get_session() as session:
                decision = await engine.authorize(session, principal, action, pet_id)
        """
        session = await self.create_session()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Session error, rolling back: {e}")
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database transactions with automatic commit/rollback.

        Yields:
            Database session within a transaction

        Example:
            async with session_manager.get_transaction() as session:
                await grant_store.revoke_grant(session, grant_id, owner.id)
                # Transaction is committed on success
        """
        async with self.get_session() as session:
            async with session.begin():
                try:
                    yield session
                except VetAccessException as e:
                    # Expected domain failures (denials, conflicts) are not errors
                    logger.info(f"Transaction rolled back: {e.error_code}")
                    raise
                except Exception as e:
                    logger.error(f"Transaction error, rolling back: {e}")
                    raise

    async def execute_in_transaction(
        self,
        operation: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Execute an operation within a transaction.

        Domain exceptions raised by the operation propagate unchanged; only
        unexpected database failures are wrapped.

        Args:
            operation: Async function taking a session as first argument
            *args: Arguments to pass to the operation
            **kwargs: Keyword arguments to pass to the operation

        Returns:
            Result of the operation

        Raises:
            TransactionException: If database transaction fails
        """
        operation_name = getattr(operation, "__name__", str(operation))
        try:
            async with self.get_transaction() as session:
                return await operation(session, *args, **kwargs)
        except VetAccessException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Database operation failed: {e}")
            raise TransactionException(
                "Database transaction failed",
                operation=operation_name,
                original_error=e,
            )

    async def health_check(self) -> Dict[str, Any]:
        """
        Health check for database sessions and connections.

        Returns:
            Dictionary with health check results
        """
        health_status: Dict[str, Any] = {
            "status": "healthy",
            "timestamp": time.time(),
            "checks": {},
        }

        try:
            start_time = time.time()
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            health_status["checks"]["basic_query"] = {
                "status": "pass",
                "response_time": round((time.time() - start_time) * 1000, 2),
            }
        except OperationalError as e:
            health_status["status"] = "unhealthy"
            health_status["checks"]["connection"] = {
                "status": "fail",
                "error": str(e),
                "error_type": "OperationalError",
            }
            logger.error(f"Database operational error during health check: {e}")
        except SQLAlchemyError as e:
            health_status["status"] = "unhealthy"
            health_status["checks"]["database"] = {
                "status": "fail",
                "error": str(e),
                "error_type": "SQLAlchemyError",
            }
            logger.error(f"Database error during health check: {e}")

        return health_status

    async def initialize_database(self, metadata: Optional[MetaData] = None) -> bool:
        """
        Initialize database schema.

        Args:
            metadata: SQLAlchemy metadata object containing table definitions

        Returns:
            True if initialization successful, False otherwise
        """
        logger.info("Starting database initialization...")

        health = await self.health_check()
        if health["status"] != "healthy":
            logger.error("Database health check failed during initialization")
            return False

        try:
            if metadata is not None:
                async with self.engine.begin() as conn:
                    await conn.run_sync(metadata.create_all)
                logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Database initialization failed: {e}")
            return False

        self._is_initialized = True
        return True

    async def cleanup_database(
        self, metadata: Optional[MetaData] = None, drop_all: bool = False
    ) -> bool:
        """
        Clean up database resources and optionally drop schema.

        Args:
            metadata: SQLAlchemy metadata object containing table definitions
            drop_all: Whether to drop all tables (use with caution)

        Returns:
            True if cleanup successful, False otherwise
        """
        try:
            if drop_all and metadata is not None:
                async with self.engine.begin() as conn:
                    await conn.run_sync(metadata.drop_all)
                logger.warning("All database tables dropped")
        except SQLAlchemyError as e:
            logger.error(f"Database cleanup failed: {e}")
            return False

        await self.close_all_sessions()
        return True

    async def close_all_sessions(self) -> None:
        """Close all active sessions and dispose of the engine."""
        await self.engine.dispose()
        logger.info("All database sessions and connections closed")

    @property
    def is_initialized(self) -> bool:
        """Check if the database has been initialized."""
        return self._is_initialized


# Global session manager instance (will be initialized by application)
_session_manager: Optional[SessionManager] = None


def initialize_session_manager(engine: AsyncEngine) -> SessionManager:
    """
    Initialize the global session manager.

    Args:
        engine: SQLAlchemy async engine

    Returns:
        Initialized session manager
    """
    global _session_manager
    _session_manager = SessionManager(engine)
    logger.info("Session manager initialized")
    return _session_manager


def get_session_manager() -> SessionManager:
    """
    Get the global session manager instance.

    Raises:
        RuntimeError: If session manager is not initialized
    """
    if _session_manager is None:
        raise RuntimeError(
            "Session manager not initialized. Call initialize_session_manager() first."
        )
    return _session_manager


def get_engine() -> AsyncEngine:
    """Get the database engine from the global session manager."""
    return get_session_manager().engine


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session from the global session manager."""
    manager = get_session_manager()
    async with manager.get_session() as session:
        yield session


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncSession, None]:
    """Get a database transaction from the global session manager."""
    manager = get_session_manager()
    async with manager.get_transaction() as session:
        yield session


async def health_check() -> Dict[str, Any]:
    """Perform database health check with the global session manager."""
    return await get_session_manager().health_check()


async def initialize_database(metadata: Optional[MetaData] = None) -> bool:
    """Initialize the database with the global session manager."""
    return await get_session_manager().initialize_database(metadata)


async def cleanup_database(
    metadata: Optional[MetaData] = None, drop_all: bool = False
) -> bool:
    """Clean up the database with the global session manager."""
    return await get_session_manager().cleanup_database(metadata, drop_all)
