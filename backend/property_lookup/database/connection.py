"""
Database connection utilities for the property cache.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

import asyncpg

from property_lookup.core.config import get_settings

logger = logging.getLogger(__name__)


PROPERTIES_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS properties (
        id BIGSERIAL PRIMARY KEY,
        address TEXT NOT NULL UNIQUE,
        property_data JSONB NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
        last_accessed_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
        access_count INTEGER NOT NULL DEFAULT 1 CHECK (access_count >= 1)
    );
    CREATE INDEX IF NOT EXISTS idx_properties_updated_at ON properties (updated_at);
"""


class ConnectionPoolManager:
    """Process-wide asyncpg pool bound to the event loop that created it."""

    _pool: Optional[asyncpg.Pool] = None
    _loop_id: Optional[int] = None
    _pool_lock: Optional[asyncio.Lock] = None
    _metrics: Dict[str, int] = {"acquired": 0, "released": 0, "pool_created": 0}

    @classmethod
    def _ensure_loop_bound(cls) -> None:
        """Pools must only be used with the loop they were created on."""
        current_loop_id = id(asyncio.get_running_loop())
        if cls._loop_id != current_loop_id:
            if cls._pool is not None:
                logger.warning("Event loop changed; discarding connection pool from previous loop")
            cls._pool = None
            cls._loop_id = current_loop_id
            cls._pool_lock = asyncio.Lock()

    @classmethod
    def _get_database_dsn(cls) -> str:
        settings = get_settings()
        if not settings.database_url:
            raise ValueError("DATABASE_URL is not configured")
        return settings.database_url

    @classmethod
    async def get_pool(cls) -> asyncpg.Pool:
        """Get (or lazily create) the shared connection pool."""
        cls._ensure_loop_bound()
        async with cls._pool_lock:  # type: ignore[union-attr]
            if cls._pool is None:
                settings = get_settings()
                try:
                    cls._pool = await asyncpg.create_pool(
                        cls._get_database_dsn(),
                        min_size=settings.db_pool_min_size,
                        max_size=settings.db_pool_max_size,
                        command_timeout=settings.db_command_timeout,
                    )
                    cls._metrics["pool_created"] += 1
                    logger.info("Database connection pool created")
                except Exception as e:
                    logger.error(f"Failed to create database connection pool: {e}")
                    raise
        return cls._pool

    @classmethod
    async def close(cls) -> None:
        if cls._pool is not None:
            await cls._pool.close()
            logger.info("Database connection pool closed")
        cls._pool = None
        cls._loop_id = None

    @classmethod
    def get_metrics(cls) -> Dict[str, int]:
        return dict(cls._metrics)


@asynccontextmanager
async def get_service_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """
    Get a pooled database connection with context management.

    Returns:
        AsyncContextManager[asyncpg.Connection]
    """
    pool = await ConnectionPoolManager.get_pool()
    connection = await pool.acquire()
    ConnectionPoolManager._metrics["acquired"] += 1
    logger.debug("[DB] Acquired connection from pool")

    try:
        yield connection
    finally:
        try:
            await pool.release(connection)
            ConnectionPoolManager._metrics["released"] += 1
            logger.debug("[DB] Released connection back to pool")
        except Exception as e:
            logger.error(f"Failed to release database connection: {e}")


async def ensure_schema() -> None:
    """Create the properties cache table if it does not exist."""
    async with get_service_connection() as conn:
        await conn.execute(PROPERTIES_TABLE_DDL)
    logger.info("Property cache schema ready")
