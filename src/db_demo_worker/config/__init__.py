"""Configuration for the worker: settings and connection strings."""

from .connection import (
    ConnectionParams,
    aiomysql_connect_kwargs,
    asyncpg_connect_kwargs,
    mask_connection_string,
    parse_connection_string,
)
from .settings import LoggingConfig, ReadinessConfig, WorkerSettings, load_settings

__all__ = [
    "ConnectionParams",
    "LoggingConfig",
    "ReadinessConfig",
    "WorkerSettings",
    "aiomysql_connect_kwargs",
    "asyncpg_connect_kwargs",
    "load_settings",
    "mask_connection_string",
    "parse_connection_string",
]
