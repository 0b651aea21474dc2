"""Common interface for the database backends."""

from abc import ABC, abstractmethod

from ..models import DatabaseKind, LogRecord


LOG_TABLE = "demo_log"


class DatabaseBackend(ABC):
    """One backend per supported database kind."""

    kind: DatabaseKind
    display_name: str

    def __init__(self, connection_string: str):
        self.connection_string = connection_string

    @abstractmethod
    async def probe(self) -> None:
        """Check connectivity; raise on failure."""

    @abstractmethod
    async def insert_log(self) -> LogRecord:
        """Ensure the log storage exists and insert one record."""

    async def close(self) -> None:
        """Release driver resources held between calls."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value})"
