"""Core types shared by the worker and the database backends."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class DatabaseKind(str, Enum):
    """Supported database backends."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    MONGO = "mongo"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DatabaseKind":
        """
        Resolve a backend name case-insensitively.

        Unknown, empty or missing values fall back to PostgreSQL.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.POSTGRES
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.POSTGRES


class WorkerState(str, Enum):
    """Lifecycle states of the worker."""

    STARTING = "starting"
    PROBING = "probing"
    READY = "ready"
    POLLING = "polling"
    PROBE_FAILED = "probe_failed"
    STOPPED = "stopped"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LogRecord:
    """A single timestamp row written to ``demo_log``."""

    log_time: datetime = field(default_factory=utc_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_document(self) -> dict:
        return {"_id": self.id, "log_time": self.log_time}
