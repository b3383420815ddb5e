# ============================================================================
# REPAIR MONITOR
# ============================================================================
# STATUS: Core - Periodic repair polling
# PURPOSE: Drive compute_reports() on an interval and forward the reports
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repair Monitor

Background loop that polls the repair manager:

1. Call compute_reports() (in a worker thread; it blocks on engine and
   file system I/O)
2. Count reports by status
3. Hand the reports to the callback, if any
4. Sleep poll_interval seconds, or until stop() is called

compute_reports() is the only consumer of terminal reports, so a process
should run at most one monitor per manager, and HTTP callers of
POST /repairs/reports compete with it.

Runs as a background task in the FastAPI application.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.contracts import ReportStatus
from core.models.repair import Report
from services.repair_manager import BlockRepairManager

logger = logging.getLogger(__name__)

ReportCallback = Callable[[List[Report]], Any]


class RepairMonitor:
    """Periodic compute_reports() driver."""

    def __init__(
        self,
        manager: BlockRepairManager,
        poll_interval: float = 10.0,
        report_callback: Optional[ReportCallback] = None,
    ):
        """
        Args:
            manager: Repair manager to poll
            poll_interval: Seconds between cycles
            report_callback: Receives each cycle's reports; may be async
        """
        self.manager = manager
        self.poll_interval = poll_interval
        self.report_callback = report_callback

        # State
        self._running = False
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        # Metrics
        self._started_at: Optional[datetime] = None
        self._cycles = 0
        self._errors = 0
        self._last_cycle_at: Optional[datetime] = None
        self._reports_by_status: Dict[str, int] = {status.value: 0 for status in ReportStatus}

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background loop."""
        if self._running:
            logger.warning("Repair monitor already running")
            return

        self._running = True
        self._started_at = datetime.now(timezone.utc)
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name="repair-monitor")
        logger.info(f"Repair monitor started (poll_interval={self.poll_interval}s)")

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it."""
        self._running = False
        self._stop_event.set()

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Repair monitor stopped")

    async def run_once(self) -> List[Report]:
        """Run a single polling cycle and return its reports."""
        reports = await asyncio.to_thread(self.manager.compute_reports)

        for report in reports:
            self._reports_by_status[report.status.value] += 1
            if report.status.is_terminal():
                logger.info(f"Repair of {report.file_path} ended: {report.status.value}")

        if self.report_callback is not None and reports:
            result = self.report_callback(reports)
            if inspect.isawaitable(result):
                await result

        self._cycles += 1
        self._last_cycle_at = datetime.now(timezone.utc)
        return reports

    async def _loop(self) -> None:
        while self._running and not self._stop_event.is_set():
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self._errors += 1
                logger.exception(f"Error in repair monitor cycle: {e}")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

    def get_stats(self) -> Dict[str, Any]:
        """Get monitor statistics."""
        uptime_seconds = None
        if self._started_at:
            uptime_seconds = (datetime.now(timezone.utc) - self._started_at).total_seconds()

        return {
            "running": self._running,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "uptime_seconds": uptime_seconds,
            "poll_interval": self.poll_interval,
            "cycles": self._cycles,
            "errors": self._errors,
            "last_cycle_at": self._last_cycle_at.isoformat() if self._last_cycle_at else None,
            "reports_by_status": dict(self._reports_by_status),
        }


__all__ = ["RepairMonitor", "ReportCallback"]
