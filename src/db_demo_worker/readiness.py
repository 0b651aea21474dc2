"""Startup readiness probe with a bounded number of attempts."""

import asyncio
import logging

from .backends.base import DatabaseBackend


logger = logging.getLogger(__name__)


class DatabaseUnavailable(Exception):
    """The database did not become reachable within the attempt budget."""

    def __init__(self, kind: str, elapsed_seconds: float):
        self.kind = kind
        self.elapsed_seconds = elapsed_seconds
        super().__init__(f"Database {kind} not available after {elapsed_seconds:g} seconds.")


async def wait_for_database_ready(
    backend: DatabaseBackend,
    max_attempts: int = 30,
    delay_seconds: float = 2.0,
) -> int:
    """
    Probe the backend until it answers or the attempt budget runs out.

    The delay is fixed and the sleep between attempts is cancellable.

    Args:
        backend: Backend to probe
        max_attempts: Maximum number of probes
        delay_seconds: Delay between failed probes

    Returns:
        The attempt number that succeeded

    Raises:
        DatabaseUnavailable: If every attempt failed
        ValueError: If max_attempts is less than 1
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    kind = backend.kind.value

    for attempt in range(1, max_attempts + 1):
        try:
            await backend.probe()
        except Exception as e:
            logger.warning(f"[{kind}] Waiting for database... ({attempt}/{max_attempts})")
            logger.debug(f"[{kind}] Probe {attempt} failed: {e}")

            if attempt < max_attempts:
                await asyncio.sleep(delay_seconds)
            continue

        logger.info(f"[{backend.display_name}] Connection successful.")
        return attempt

    raise DatabaseUnavailable(kind, max_attempts * delay_seconds)
