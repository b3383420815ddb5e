# ============================================================================
# REPAIR MONITOR TESTS
# ============================================================================
# STATUS: Tests - Background polling loop
# PURPOSE: Verify run_once, callbacks, stats and start/stop
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repair Monitor Tests

Uses asyncio.run + a MagicMock manager.

Run with:
    pytest tests/test_monitor.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from core.contracts import ReportStatus
from core.models.repair import Report
from orchestrator.monitor import RepairMonitor


def _manager(*batches):
    manager = MagicMock()
    manager.compute_reports.side_effect = list(batches) + [[]] * 100
    return manager


FINISHED = Report(file_path="/f/a", status=ReportStatus.FINISHED)
ACTIVE = Report(file_path="/f/b", status=ReportStatus.ACTIVE)


# ============================================================================
# SINGLE CYCLE
# ============================================================================

class TestRunOnce:

    def test_returns_reports_and_counts(self):
        monitor = RepairMonitor(_manager([FINISHED, ACTIVE]))

        reports = asyncio.run(monitor.run_once())

        assert reports == [FINISHED, ACTIVE]
        stats = monitor.get_stats()
        assert stats["cycles"] == 1
        assert stats["reports_by_status"]["FINISHED"] == 1
        assert stats["reports_by_status"]["ACTIVE"] == 1
        assert stats["reports_by_status"]["CANCELED"] == 0
        assert stats["last_cycle_at"] is not None

    def test_sync_callback(self):
        received = []
        monitor = RepairMonitor(_manager([FINISHED]), report_callback=received.append)

        asyncio.run(monitor.run_once())

        assert received == [[FINISHED]]

    def test_async_callback(self):
        callback = AsyncMock()
        monitor = RepairMonitor(_manager([FINISHED]), report_callback=callback)

        asyncio.run(monitor.run_once())

        callback.assert_awaited_once_with([FINISHED])

    def test_callback_skipped_without_reports(self):
        callback = MagicMock()
        monitor = RepairMonitor(_manager([]), report_callback=callback)

        asyncio.run(monitor.run_once())

        callback.assert_not_called()


# ============================================================================
# LOOP
# ============================================================================

class TestLoop:

    def test_start_and_stop(self):
        manager = _manager([FINISHED])
        monitor = RepairMonitor(manager, poll_interval=0.01)

        async def scenario():
            await monitor.start()
            assert monitor.is_running
            await asyncio.sleep(0.1)
            await monitor.stop()

        asyncio.run(scenario())

        assert not monitor.is_running
        assert manager.compute_reports.call_count >= 2
        assert monitor.get_stats()["cycles"] >= 2

    def test_errors_counted_and_loop_survives(self):
        manager = MagicMock()
        manager.compute_reports.side_effect = [RuntimeError("boom")] + [[]] * 100
        monitor = RepairMonitor(manager, poll_interval=0.01)

        async def scenario():
            await monitor.start()
            await asyncio.sleep(0.1)
            await monitor.stop()

        asyncio.run(scenario())

        stats = monitor.get_stats()
        assert stats["errors"] == 1
        assert stats["cycles"] >= 1

    def test_double_start_is_ignored(self):
        monitor = RepairMonitor(_manager(), poll_interval=0.01)

        async def scenario():
            await monitor.start()
            first_task = monitor._task
            await monitor.start()
            assert monitor._task is first_task
            await monitor.stop()

        asyncio.run(scenario())
