"""Channel store using asyncpg for PostgreSQL."""

import logging
from typing import Any

import asyncpg

from hiscorebot.config.settings import get_settings
from hiscorebot.contracts import Channel
from hiscorebot.core.errors import ChannelAlreadyExistsError, ChannelNotFoundError
from hiscorebot.core.ports import ChannelDatabasePort

logger = logging.getLogger(__name__)

TABLE_NAME = "hiscorebot_channels"

_UPDATABLE_COLUMNS = frozenset({"is_connected", "rsn"})


def _to_channel(record: Any) -> Channel:
    return Channel(name=record["name"], is_connected=record["is_connected"], rsn=record["rsn"])


class DatabaseAdapter(ChannelDatabasePort):
    """Channel persistence backed by a PostgreSQL connection pool."""

    def __init__(self, dsn: str | None = None) -> None:
        self._dsn = dsn
        self._pool: Any = None  # asyncpg.Pool (untyped library)
        logger.info("Database adapter initialized")

    async def connect(self) -> None:
        """Create the connection pool and the channel table.

        This should be called once at application startup.
        """
        if self._pool is not None:
            logger.warning("Database pool already exists")
            return

        settings = get_settings()
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn or settings.database_url,
                min_size=1,
                max_size=settings.database_pool_size,
                command_timeout=settings.database_pool_timeout,
            )
            logger.info("Database connection pool created successfully")
            await self._initialize_schema()
        except Exception as e:
            logger.error(f"Failed to create database pool: {e}")
            raise

    async def disconnect(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    def _require_pool(self) -> Any:
        if not self._pool:
            raise RuntimeError("Database pool not initialized")
        return self._pool

    async def _initialize_schema(self) -> None:
        async with self._require_pool().acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    name VARCHAR(255) PRIMARY KEY,
                    is_connected BOOLEAN NOT NULL DEFAULT FALSE,
                    rsn VARCHAR(12) NOT NULL DEFAULT '',
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                );
            """
            )

    async def get_channel(self, name: str) -> Channel:
        async with self._require_pool().acquire() as conn:
            record = await conn.fetchrow(
                f"SELECT name, is_connected, rsn FROM {TABLE_NAME} WHERE name = $1", name
            )
        if record is None:
            raise ChannelNotFoundError(name)
        return _to_channel(record)

    async def get_all_channels(self) -> list[Channel]:
        async with self._require_pool().acquire() as conn:
            records = await conn.fetch(
                f"SELECT name, is_connected, rsn FROM {TABLE_NAME} ORDER BY name"
            )
        return [_to_channel(r) for r in records]

    async def add_channel(self, name: str) -> Channel:
        try:
            async with self._require_pool().acquire() as conn:
                record = await conn.fetchrow(
                    f"""
                    INSERT INTO {TABLE_NAME} (name) VALUES ($1)
                    RETURNING name, is_connected, rsn
                    """,
                    name,
                )
        except asyncpg.UniqueViolationError as e:
            raise ChannelAlreadyExistsError(name) from e
        logger.info("Added channel %s", name)
        return _to_channel(record)

    async def update_channel(self, name: str, /, **fields: Any) -> Channel:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown or not fields:
            raise ValueError(f"Cannot update channel columns: {sorted(unknown) or 'none given'}")

        columns = sorted(fields)
        assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(columns, start=2))
        async with self._require_pool().acquire() as conn:
            record = await conn.fetchrow(
                f"""
                UPDATE {TABLE_NAME}
                SET {assignments}, updated_at = NOW()
                WHERE name = $1
                RETURNING name, is_connected, rsn
                """,
                name,
                *(fields[col] for col in columns),
            )
        if record is None:
            raise ChannelNotFoundError(name)
        return _to_channel(record)

    async def health_check(self) -> bool:
        try:
            async with self._require_pool().acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
