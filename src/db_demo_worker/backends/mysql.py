"""MySQL backend using aiomysql."""

import logging

import aiomysql

from ..config.connection import aiomysql_connect_kwargs
from ..models import DatabaseKind, LogRecord
from .base import LOG_TABLE, DatabaseBackend


logger = logging.getLogger(__name__)


class MySQLBackend(DatabaseBackend):
    """Writes log rows to a microsecond-precision ``DATETIME`` column."""

    kind = DatabaseKind.MYSQL
    display_name = "MySQL"

    CREATE_TABLE_SQL = (
        f"CREATE TABLE IF NOT EXISTS {LOG_TABLE} "
        "(id INT AUTO_INCREMENT PRIMARY KEY, log_time DATETIME(6))"
    )
    INSERT_SQL = f"INSERT INTO {LOG_TABLE} (log_time) VALUES (%s)"

    def __init__(self, connection_string: str):
        super().__init__(connection_string)
        self.connect_kwargs = aiomysql_connect_kwargs(connection_string)

    async def _connect(self) -> aiomysql.Connection:
        return await aiomysql.connect(**self.connect_kwargs)

    async def probe(self) -> None:
        conn = await self._connect()
        conn.close()

    async def ensure_schema(self, conn: aiomysql.Connection) -> None:
        async with conn.cursor() as cur:
            await cur.execute(self.CREATE_TABLE_SQL)

    async def insert_log(self) -> LogRecord:
        record = LogRecord()
        conn = await self._connect()
        try:
            await self.ensure_schema(conn)
            async with conn.cursor() as cur:
                # DATETIME has no zone; store the UTC wall time
                await cur.execute(self.INSERT_SQL, (record.log_time.replace(tzinfo=None),))
        finally:
            conn.close()

        logger.debug(f"Inserted {LOG_TABLE} row at {record.log_time.isoformat()}")
        return record
