"""Background worker: wait for the database, then insert on a fixed interval."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .backends import DatabaseBackend, create_backend
from .config.connection import mask_connection_string
from .config.settings import WorkerSettings
from .models import LogRecord, WorkerState
from .readiness import DatabaseUnavailable, wait_for_database_ready


logger = logging.getLogger(__name__)


class DbDemoWorker:
    """Runs the readiness probe once, then the polling insert loop until cancelled."""

    def __init__(self, settings: WorkerSettings, backend: Optional[DatabaseBackend] = None):
        self.settings = settings
        self._backend = backend
        self.state = WorkerState.STARTING
        self.transitions = [WorkerState.STARTING]

        # Statistics
        self.stats = {
            "inserts": 0,
            "insert_errors": 0,
            "probe_attempts": 0,
            "last_insert_time": None,
            "last_error": None,
        }
        self._last_iteration_failed = False

    @property
    def backend(self) -> DatabaseBackend:
        if self._backend is None:
            self._backend = create_backend(self.settings.db_type, self.settings.db_connection_string)
        return self._backend

    def _set_state(self, state: WorkerState):
        logger.debug(f"Worker state: {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)

    async def run(self):
        """Run the worker until the loop is cancelled or startup fails."""
        if not self.settings.has_connection_string:
            logger.error("DB_CONNECTION_STRING not set. Exiting.")
            self._set_state(WorkerState.STOPPED)
            return

        logger.info(f"DB_TYPE: {self.settings.db_type.value}")
        logger.info(f"DB_CONNECTION_STRING: {mask_connection_string(self.settings.db_connection_string)}")

        try:
            backend = self.backend
        except ValueError as e:
            logger.error(f"Invalid DB_CONNECTION_STRING: {e}")
            self._set_state(WorkerState.STOPPED)
            return

        try:
            self._set_state(WorkerState.PROBING)
            try:
                self.stats["probe_attempts"] = await wait_for_database_ready(
                    backend,
                    max_attempts=self.settings.readiness.max_attempts,
                    delay_seconds=self.settings.readiness.delay_seconds,
                )
            except DatabaseUnavailable as e:
                logger.error(f"Database not available after waiting: {e}")
                self.stats["probe_attempts"] = self.settings.readiness.max_attempts
                self._set_state(WorkerState.PROBE_FAILED)
                return

            self._set_state(WorkerState.READY)
            await self._polling_loop()
        finally:
            self._set_state(WorkerState.STOPPED)

    async def _polling_loop(self):
        """Insert one record per interval; errors are logged and the loop carries on."""
        self._set_state(WorkerState.POLLING)
        name = self.backend.display_name
        logger.info(f"Starting polling loop: {name} every {self.settings.poll_interval_seconds:g}s")

        while True:
            await self._run_iteration(name)
            await asyncio.sleep(self.settings.poll_interval_seconds)

    async def _run_iteration(self, name: str) -> Optional[LogRecord]:
        try:
            record = await self.backend.insert_log()
        except Exception as e:
            logger.error(f"[Error after initial DB ready] [{name}] {e}")
            self.stats["insert_errors"] += 1
            self.stats["last_error"] = str(e)
            self._last_iteration_failed = True
            return None

        logger.info(f"[{name}] Inserted {record.log_time.isoformat()}")
        self.stats["inserts"] += 1
        self.stats["last_insert_time"] = record.log_time
        self._last_iteration_failed = False
        return record

    async def close(self):
        """Release backend resources."""
        if self._backend is not None:
            await self._backend.close()

    async def health_check(self) -> Dict[str, Any]:
        """Report the worker state and statistics."""
        if self.state == WorkerState.POLLING:
            status = "degraded" if self._last_iteration_failed else "healthy"
        elif self.state in (WorkerState.STARTING, WorkerState.PROBING, WorkerState.READY):
            status = "starting"
        else:
            status = "stopped"

        return {
            "status": status,
            "state": self.state.value,
            "backend": self.settings.db_type.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stats": self.stats.copy(),
        }
