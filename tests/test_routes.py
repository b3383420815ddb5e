# ============================================================================
# API ROUTES TESTS
# ============================================================================
# STATUS: Tests - HTTP management surface
# PURPOSE: Verify repair endpoints against a real manager and fake engine
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes Tests

Uses FastAPI TestClient with a JobRepairManager backed by a fake engine.

Run with:
    pytest tests/test_routes.py -v
"""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router, set_services
from core.config.configuration import Configuration
from infrastructure.storage import LocalFileSystem
from orchestrator.monitor import RepairMonitor
from services.repair_manager import JobRepairManager
from worker.engine import SubmissionError

from fakes import FakeEngine, SlowCheck


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def manager(tmp_path, engine):
    return JobRepairManager(Configuration(), engine, LocalFileSystem(str(tmp_path)))


@pytest.fixture
def monitor():
    monitor = MagicMock()
    monitor.is_running = True
    monitor.get_stats.return_value = {
        "running": True,
        "started_at": "2026-10-19T00:00:00+00:00",
        "uptime_seconds": 12.0,
        "poll_interval": 10.0,
        "cycles": 3,
        "errors": 0,
        "last_cycle_at": "2026-10-19T00:00:10+00:00",
        "reports_by_status": {"ACTIVE": 1, "FINISHED": 2, "FAILED": 0, "CANCELED": 0},
    }
    return monitor


@pytest.fixture
def client(manager, monitor):
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    set_services(manager=manager, monitor=monitor)
    yield TestClient(app)
    set_services(manager=None, monitor=None)


BODY = {"codec_id": "rs", "source_path": "/f/a", "parity_path": "/p/a"}


# ============================================================================
# SUBMISSION
# ============================================================================

class TestSubmitRepair:

    def test_source(self, client, engine):
        resp = client.post("/api/v1/repairs/source", json=BODY)

        assert resp.status_code == 202
        assert resp.json() == {"repair_key": "/f/a", "kind": "SOURCE_FILE"}
        assert len(engine.submitted) == 1

    def test_parity(self, client):
        resp = client.post("/api/v1/repairs/parity", json=BODY)

        assert resp.status_code == 202
        assert resp.json() == {"repair_key": "/p/a", "kind": "PARITY_FILE"}

    def test_validation(self, client):
        resp = client.post("/api/v1/repairs/source", json={**BODY, "source_path": ""})
        assert resp.status_code == 422

    def test_not_started(self, client, engine):
        engine.submit_error = SubmissionError("a_1", "engine down")

        resp = client.post("/api/v1/repairs/source", json=BODY)

        assert resp.status_code == 500
        assert "could not be started" in resp.json()["detail"]

    def test_failed_resubmission_of_tracked_key(self, client, engine, manager):
        client.post("/api/v1/repairs/source", json=BODY)
        first = engine.submitted[0]
        engine.submit_error = SubmissionError("a_2", "engine down")

        resp = client.post("/api/v1/repairs/source", json=BODY)

        assert resp.status_code == 500
        assert manager.tracked_job("/f/a") is first


# ============================================================================
# LISTING AND REPORTS
# ============================================================================

class TestReports:

    def test_list(self, client):
        client.post("/api/v1/repairs/source", json=BODY)
        client.post("/api/v1/repairs/parity", json={**BODY, "source_path": "/f/b", "parity_path": "/p/b"})

        resp = client.get("/api/v1/repairs")

        assert resp.json() == {"repair_keys": ["/f/a", "/p/b"], "total": 2}

    def test_reports_consume_terminal_entries(self, client, engine):
        client.post("/api/v1/repairs/source", json=BODY)
        job = engine.submitted[0]
        job.complete, job.successful = True, True

        resp = client.post("/api/v1/repairs/reports")

        assert resp.status_code == 200
        assert resp.json() == {"reports": [{"file_path": "/f/a", "status": "FINISHED"}], "total": 1}
        assert client.post("/api/v1/repairs/reports").json()["total"] == 0


# ============================================================================
# CANCEL
# ============================================================================

class TestCancel:

    def test_cancel_by_path(self, client, engine):
        client.post("/api/v1/repairs/source", json=BODY)

        resp = client.delete("/api/v1/repairs/f/a")

        assert resp.json() == {"canceled": ["/f/a"]}
        assert engine.submitted[0].kill_calls == 1
        assert client.get("/api/v1/repairs").json()["total"] == 0

    def test_cancel_unknown(self, client):
        resp = client.delete("/api/v1/repairs/f/zzz")
        assert resp.status_code == 200
        assert resp.json() == {"canceled": []}

    def test_cancel_all(self, client, engine):
        client.post("/api/v1/repairs/source", json=BODY)
        client.post("/api/v1/repairs/source", json={**BODY, "source_path": "/f/b"})

        resp = client.delete("/api/v1/repairs")

        assert resp.json() == {"canceled": ["/f/a", "/f/b"]}
        assert [job.kill_calls for job in engine.submitted] == [1, 1]


# ============================================================================
# STATUS
# ============================================================================

class TestStatus:

    def test_health(self, client):
        resp = client.get("/api/v1/health")
        data = resp.json()
        assert data["status"] == "ok"
        assert data["manager_ready"] is True
        assert data["monitor_running"] is True

    def test_monitor_status(self, client):
        data = client.get("/api/v1/monitor/status").json()
        assert data["status"] == "running"
        assert data["metrics"]["cycles"] == 3
        assert data["metrics"]["reports_by_status"]["FINISHED"] == 2

    def test_uninitialized(self):
        app = FastAPI()
        app.include_router(router, prefix="/api/v1")
        set_services(manager=None, monitor=None)
        client = TestClient(app)

        assert client.get("/api/v1/repairs").status_code == 500
        assert client.get("/api/v1/monitor/status").status_code == 500


# ============================================================================
# MONITOR AND API TOGETHER
# ============================================================================

class TestMonitorAndApi:

    def test_terminal_report_delivered_once(self, client, engine, manager):
        client.post("/api/v1/repairs/source", json=BODY)
        job = engine.submitted[0]
        job.complete, job.successful = True, True
        check = SlowCheck(job)

        monitor = RepairMonitor(manager, poll_interval=60)
        from_monitor = []
        from_api = []

        thread = threading.Thread(target=lambda: from_monitor.extend(asyncio.run(monitor.run_once())))
        thread.start()
        from_api.extend(client.post("/api/v1/repairs/reports").json()["reports"])
        thread.join(10)

        delivered = [r.file_path for r in from_monitor] + [r["file_path"] for r in from_api]
        assert delivered == ["/f/a"]
        assert check.max_active == 1
        assert client.get("/api/v1/repairs").json()["total"] == 0
