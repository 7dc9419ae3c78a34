"""
Standalone sweep worker.

Runs the subscription sweep scheduler outside the API process, for
deployments that set SWEEP_ENABLED=false on the API replicas.
"""

from typing import Optional

from common.core.telemetry import get_logger
from common.db.session import dispose_db
from packages.subscriptions.services.sweep_service import SweepService
from packages.subscriptions.workers.sweep_scheduler import SweepScheduler

logger = get_logger(__name__)


class SweepWorker:
    """Worker wrapping a SweepScheduler with the launcher's start/stop lifecycle."""

    def __init__(self, sweep_service: Optional[SweepService] = None):
        self.sweep_service = sweep_service or SweepService()
        self.scheduler = SweepScheduler(self.sweep_service.run_once)
        self.running = False

    async def start(self):
        if self.running:
            logger.warning("Sweep worker is already running")
            return
        self.running = True
        self.scheduler.start()
        await self.scheduler.wait()

    async def stop(self):
        self.running = False
        await self.scheduler.stop()
        await dispose_db()
