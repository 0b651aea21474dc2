"""
Database backends.

Each ``DatabaseKind`` maps to exactly one backend class:
- postgres: asyncpg, ``demo_log`` table with a TIMESTAMPTZ column
- mysql: aiomysql, ``demo_log`` table with a DATETIME(6) column
- mongo: PyMongo async client, ``otel.demo_log`` collection
"""

from typing import Dict, Type

from ..models import DatabaseKind
from .base import LOG_TABLE, DatabaseBackend
from .mongo import MongoBackend
from .mysql import MySQLBackend
from .postgres import PostgresBackend


BACKENDS: Dict[DatabaseKind, Type[DatabaseBackend]] = {
    DatabaseKind.POSTGRES: PostgresBackend,
    DatabaseKind.MYSQL: MySQLBackend,
    DatabaseKind.MONGO: MongoBackend,
}


def create_backend(kind: DatabaseKind, connection_string: str) -> DatabaseBackend:
    """Instantiate the backend registered for ``kind``."""
    try:
        backend_cls = BACKENDS[DatabaseKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"No backend registered for database kind: {kind!r}")
    return backend_cls(connection_string)


__all__ = [
    "BACKENDS",
    "LOG_TABLE",
    "DatabaseBackend",
    "MongoBackend",
    "MySQLBackend",
    "PostgresBackend",
    "create_backend",
]
