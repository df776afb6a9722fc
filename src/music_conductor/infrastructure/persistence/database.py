"""SQLite storage for linked-account credentials.

Every query opens its own short-lived aiosqlite connection in WAL mode.
The special path ``:memory:`` maps to a named shared-cache database that is
held open by a keepalive connection until :meth:`Database.close`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import aiosqlite

from music_conductor.domain.shared.constants import DatabaseTables, SQLPragmas
from music_conductor.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

_URL_PREFIX: Final[str] = "sqlite:///"
_MEMORY_PATH: Final[str] = ":memory:"
_MEMORY_URI: Final[str] = "file:music-conductor?mode=memory&cache=shared"

_CREDENTIALS_DDL: Final[str] = f"""
    CREATE TABLE IF NOT EXISTS {DatabaseTables.CREDENTIALS} (
        user_id TEXT PRIMARY KEY,
        access_token TEXT NOT NULL,
        refresh_token TEXT NOT NULL,
        expires_at TEXT NOT NULL,
        provider_user_id TEXT,
        scope TEXT,
        updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
    )
"""

# Columns added after the first release of the credentials table.
_LATE_COLUMNS: Final[tuple[tuple[str, str], ...]] = (
    ("provider_user_id", "TEXT"),
    ("scope", "TEXT"),
)


class Database:
    """Connection factory and schema owner for the credential table."""

    def __init__(self, url: str, settings: DatabaseSettings | None = None) -> None:
        self._db_path = url.removeprefix(_URL_PREFIX)
        self._busy_timeout_ms = settings.busy_timeout_ms if settings else 5000
        self._connect_timeout_s = settings.connection_timeout_s if settings else 10
        self._keepalive: aiosqlite.Connection | None = None
        self._initialized = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def in_memory(self) -> bool:
        return self._db_path == _MEMORY_PATH

    async def initialize(self) -> None:
        """Create the schema. Safe to call more than once."""
        if self._initialized:
            return

        if self.in_memory:
            if self._keepalive is None:
                self._keepalive = await self._open()
        else:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        async with self.transaction() as conn:
            await conn.execute(_CREDENTIALS_DDL)
            for column, column_type in _LATE_COLUMNS:
                await self._add_missing_column(
                    conn, DatabaseTables.CREDENTIALS, column, column_type
                )

        self._initialized = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    async def _add_missing_column(
        self, conn: aiosqlite.Connection, table: str, column: str, column_type: str
    ) -> None:
        info = await conn.execute_fetchall(SQLPragmas.TABLE_INFO.format(table=table))
        if column in {row["name"] for row in info}:
            return
        await conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        logger.info(LogTemplates.TABLE_MIGRATED, table, column)

    async def _open(self) -> aiosqlite.Connection:
        target, uri = (_MEMORY_URI, True) if self.in_memory else (self._db_path, False)
        # ISO timestamps are stored as TEXT and parsed by the repository.
        conn = await aiosqlite.connect(
            target, uri=uri, detect_types=0, timeout=self._connect_timeout_s
        )
        conn.row_factory = aiosqlite.Row
        for pragma in (
            SQLPragmas.JOURNAL_MODE_WAL,
            SQLPragmas.FOREIGN_KEYS_ON,
            SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout_ms),
        ):
            await conn.execute(pragma)
        return conn

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        conn = await self._open()
        try:
            yield conn
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """A connection that commits on success and rolls back on error."""
        async with self.connection() as conn:
            try:
                yield conn
            except Exception:
                await conn.rollback()
                raise
            await conn.commit()

    async def execute(self, sql: str, parameters: tuple[Any, ...] = ()) -> int:
        """Run one write statement in its own transaction and return the affected row count."""
        async with self.transaction() as conn:
            cursor = await conn.execute(sql, parameters)
            return cursor.rowcount

    async def fetch_one(self, sql: str, parameters: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters)
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, parameters: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters)
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def close(self) -> None:
        """Drop the in-memory keepalive connection, if any, and mark uninitialised."""
        keepalive, self._keepalive = self._keepalive, None
        if keepalive is not None:
            await keepalive.close()
        self._initialized = False
        logger.info(LogTemplates.DATABASE_CLOSED)
