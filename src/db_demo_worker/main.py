"""DB Demo Worker Service - periodic timestamp inserts into a configurable database."""

import asyncio
import logging
import os
import signal
import sys
from datetime import datetime, timezone
from typing import Optional

from .config.settings import WorkerSettings, load_settings
from .utils.logging import setup_logging
from .worker import DbDemoWorker


logger = logging.getLogger(__name__)


class DbDemoWorkerService:
    """Hosts the worker task and handles graceful shutdown."""

    def __init__(self, settings: Optional[WorkerSettings] = None, worker: Optional[DbDemoWorker] = None):
        self.config = settings or load_settings()
        self.worker = worker or DbDemoWorker(self.config)
        self._shutdown_event = asyncio.Event()

        setup_logging(self.config.logging, self.config.service_name)
        logger.info("DB Demo Worker started")

    async def start(self):
        """Run the worker until it finishes on its own or a shutdown is requested."""
        logger.info("Starting DB Demo Worker")

        self._setup_signal_handlers()

        worker_task = asyncio.create_task(self.worker.run())
        shutdown_task = asyncio.create_task(self._shutdown_event.wait())

        try:
            done, _ = await asyncio.wait(
                {worker_task, shutdown_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if worker_task in done:
                # Startup failures end the worker before polling; surface anything unexpected
                shutdown_task.cancel()
                worker_task.result()
            else:
                logger.info("Shutting down DB Demo Worker")
                worker_task.cancel()
                try:
                    await worker_task
                except asyncio.CancelledError:
                    pass
        finally:
            await self.worker.close()
            stats = (await self.health_check())["components"]["worker"]["stats"]
            logger.info(
                f"DB Demo Worker stopped: inserts={stats['inserts']}, "
                f"insert_errors={stats['insert_errors']}, last_error={stats['last_error']}"
            )

    def stop(self):
        """Request a graceful shutdown."""
        self._shutdown_event.set()

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating shutdown")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def health_check(self) -> dict:
        """Aggregate component health; logged once at shutdown."""
        health_status = {
            "service": self.config.service_name,
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "components": {}
        }

        worker_health = await self.worker.health_check()
        health_status["components"]["worker"] = worker_health
        health_status["status"] = worker_health["status"]

        return health_status


async def main():
    """Main entry point."""
    config_file = os.getenv("CONFIG_FILE")

    try:
        service = DbDemoWorkerService(load_settings(config_file))
        await service.start()
    except Exception as e:
        logger.error(f"Service failed: {e}", exc_info=True)
        sys.exit(1)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
