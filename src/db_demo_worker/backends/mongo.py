"""MongoDB backend using the PyMongo async client."""

import logging
from typing import Optional

from pymongo import AsyncMongoClient

from ..models import DatabaseKind, LogRecord
from .base import LOG_TABLE, DatabaseBackend


logger = logging.getLogger(__name__)

DATABASE_NAME = "otel"


class MongoBackend(DatabaseBackend):
    """
    Writes log documents to ``otel.demo_log``.

    The driver manages its own connection pool, so a single client is kept
    for the lifetime of the backend and released in ``close()``.
    """

    kind = DatabaseKind.MONGO
    display_name = "MongoDB"

    def __init__(self, connection_string: str):
        super().__init__(connection_string)
        self._client: Optional[AsyncMongoClient] = None

    @property
    def client(self) -> AsyncMongoClient:
        if self._client is None:
            self._client = AsyncMongoClient(
                self.connection_string,
                uuidRepresentation="standard",
                tz_aware=True,
            )
        return self._client

    async def probe(self) -> None:
        await self.client.list_database_names()

    async def insert_log(self) -> LogRecord:
        record = LogRecord()
        collection = self.client[DATABASE_NAME][LOG_TABLE]
        await collection.insert_one(record.to_document())

        logger.debug(f"Inserted {LOG_TABLE} document {record.id}")
        return record

    async def close(self) -> None:
        if self._client is not None:
            logger.info("Closing MongoDB client")
            await self._client.close()
            self._client = None
