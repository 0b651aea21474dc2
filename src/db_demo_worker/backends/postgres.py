"""PostgreSQL backend using asyncpg."""

import logging

import asyncpg
from asyncpg import Connection

from ..config.connection import asyncpg_connect_kwargs
from ..models import DatabaseKind, LogRecord
from .base import LOG_TABLE, DatabaseBackend


logger = logging.getLogger(__name__)


class PostgresBackend(DatabaseBackend):
    """Writes log rows to a ``TIMESTAMPTZ`` column."""

    kind = DatabaseKind.POSTGRES
    display_name = "Postgres"

    CREATE_TABLE_SQL = (
        f"CREATE TABLE IF NOT EXISTS {LOG_TABLE} "
        "(id SERIAL PRIMARY KEY, log_time TIMESTAMPTZ)"
    )
    INSERT_SQL = f"INSERT INTO {LOG_TABLE} (log_time) VALUES ($1)"

    def __init__(self, connection_string: str):
        super().__init__(connection_string)
        self.connect_kwargs = asyncpg_connect_kwargs(connection_string)

    async def _connect(self) -> Connection:
        return await asyncpg.connect(**self.connect_kwargs)

    async def probe(self) -> None:
        conn = await self._connect()
        await conn.close()

    async def ensure_schema(self, conn: Connection) -> None:
        await conn.execute(self.CREATE_TABLE_SQL)

    async def insert_log(self) -> LogRecord:
        record = LogRecord()
        conn = await self._connect()
        try:
            await self.ensure_schema(conn)
            await conn.execute(self.INSERT_SQL, record.log_time)
        finally:
            await conn.close()

        logger.debug(f"Inserted {LOG_TABLE} row at {record.log_time.isoformat()}")
        return record
