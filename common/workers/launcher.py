"""
Common worker launcher utilities to reduce boilerplate code across workers.
"""

import asyncio
import signal
import sys
from typing import Any, Callable, Optional

from common.core.telemetry import _initialize_telemetry, get_logger


class WorkerLauncher:
    """Common worker launcher that handles setup, signals, and lifecycle."""

    def __init__(self):
        self.logger = get_logger(__name__)
        self.worker_instance: Optional[Any] = None

    def _signal_handler(self, signum: int) -> None:
        """Handle SIGINT/SIGTERM by stopping the worker gracefully."""
        self.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        if self.worker_instance:
            asyncio.ensure_future(self.worker_instance.stop())

    def _register_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._signal_handler, signum)

    async def _run_worker_async(self, worker_instance: Any, worker_name: str):
        """Run worker with common lifecycle management."""
        self.worker_instance = worker_instance
        self._register_signal_handlers()

        try:
            self.logger.info(f"Starting {worker_name}...")
            await worker_instance.start()
        except Exception as e:
            self.logger.error(f"Worker failed with error: {e}", exc_info=True)
        finally:
            try:
                self.logger.info("Performing worker cleanup...")
                await worker_instance.stop()
                self.logger.info("Worker shutdown complete")
            except Exception as cleanup_error:
                self.logger.error(f"Error during cleanup: {cleanup_error}")

    def run(
        self,
        worker_factory: Callable,
        worker_name: str,
        factory_args: tuple = (),
        factory_kwargs: Optional[dict] = None,
    ):
        """
        Main entry point to run a worker.

        Args:
            worker_factory: Function/class that creates the worker instance
            worker_name: Human readable name for logging
            factory_args: Args to pass to worker factory
            factory_kwargs: Kwargs to pass to worker factory
        """
        if factory_kwargs is None:
            factory_kwargs = {}

        _initialize_telemetry()
        self.logger.info(f"Configuring {worker_name}...")

        async def _main():
            # Built inside the loop so asyncio primitives bind to it
            worker_instance = worker_factory(*factory_args, **factory_kwargs)
            await self._run_worker_async(worker_instance, worker_name)

        try:
            asyncio.run(_main())
        except KeyboardInterrupt:
            self.logger.info("Final keyboard interrupt caught, exiting...")
            sys.exit(0)
