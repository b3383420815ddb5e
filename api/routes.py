# ============================================================================
# API ROUTES
# ============================================================================
# STATUS: Core - FastAPI route definitions
# PURPOSE: HTTP endpoints for repair management
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

FastAPI routes for the block repair manager.

    POST   /repairs/source        repair lost data blocks
    POST   /repairs/parity        repair lost parity blocks
    GET    /repairs               keys of tracked repairs
    POST   /repairs/reports       poll (consumes terminal reports)
    DELETE /repairs/{key}         cancel one repair
    DELETE /repairs               cancel every repair
    GET    /monitor/status        monitor statistics
    GET    /health                liveness
"""

import asyncio
import logging
from typing import Tuple

from fastapi import APIRouter, HTTPException

from __version__ import __version__
from core.contracts import RepairType
from .schemas import (
    RepairCreate,
    RepairAccepted,
    ReportResponse,
    ReportListResponse,
    RepairListResponse,
    CancelResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# These will be set by the main app at startup

_manager = None
_monitor = None


def set_services(manager, monitor=None):
    """Set service instances for dependency injection."""
    global _manager, _monitor
    _manager = manager
    _monitor = monitor


def get_manager():
    if _manager is None:
        raise HTTPException(500, "Repair manager not initialized")
    return _manager


# ============================================================================
# HEALTH
# ============================================================================

@router.get("/health", tags=["Health"])
async def health():
    """Liveness check."""
    return {
        "status": "ok",
        "version": __version__,
        "manager_ready": _manager is not None,
        "monitor_running": bool(_monitor is not None and _monitor.is_running),
    }


# ============================================================================
# MONITOR STATUS
# ============================================================================

@router.get("/monitor/status", tags=["Monitor"])
async def get_monitor_status():
    """
    Get repair monitor status and statistics.

    Returns metrics about the polling loop including:
    - Running state
    - Cycle count
    - Reports by status
    - Error count
    """
    if _monitor is None:
        raise HTTPException(500, "Repair monitor not initialized")

    stats = _monitor.get_stats()

    return {
        "status": "running" if stats["running"] else "stopped",
        "started_at": stats["started_at"],
        "uptime_seconds": stats["uptime_seconds"],
        "poll_interval_seconds": stats["poll_interval"],
        "metrics": {
            "cycles": stats["cycles"],
            "last_cycle_at": stats["last_cycle_at"],
            "reports_by_status": stats["reports_by_status"],
            "errors": stats["errors"],
        },
    }


# ============================================================================
# REPAIRS
# ============================================================================
# Manager calls block on file system and engine I/O; they run in a worker
# thread so the event loop (and the repair monitor) keeps running.

def _submit_blocking(manager, kind: RepairType, request: RepairCreate) -> Tuple[str, bool]:
    if kind == RepairType.SOURCE_FILE:
        repair_key = request.source_path
        before = manager.tracked_job(repair_key)
        manager.repair_source_blocks(request.codec_id, request.source_path, request.parity_path)
    else:
        repair_key = request.parity_path
        before = manager.tracked_job(repair_key)
        manager.repair_parity_blocks(request.codec_id, request.source_path, request.parity_path)

    # Submission errors are logged and swallowed by the manager; a new
    # handle under the key is the only sign of success
    after = manager.tracked_job(repair_key)
    return repair_key, after is not None and after is not before


async def _submit(kind: RepairType, request: RepairCreate) -> RepairAccepted:
    manager = get_manager()
    repair_key, started = await asyncio.to_thread(_submit_blocking, manager, kind, request)
    if not started:
        raise HTTPException(500, f"Repair of {repair_key} could not be started")
    return RepairAccepted(repair_key=repair_key, kind=kind)


@router.post("/repairs/source", response_model=RepairAccepted, status_code=202, tags=["Repairs"])
async def repair_source(request: RepairCreate):
    """Repair lost or corrupt data blocks of a source file."""
    return await _submit(RepairType.SOURCE_FILE, request)


@router.post("/repairs/parity", response_model=RepairAccepted, status_code=202, tags=["Repairs"])
async def repair_parity(request: RepairCreate):
    """Repair lost or corrupt blocks of a parity file."""
    return await _submit(RepairType.PARITY_FILE, request)


@router.get("/repairs", response_model=RepairListResponse, tags=["Repairs"])
async def list_repairs():
    """Keys of repairs currently tracked (does not poll)."""
    keys = get_manager().active_repairs()
    return RepairListResponse(repair_keys=keys, total=len(keys))


@router.post("/repairs/reports", response_model=ReportListResponse, tags=["Repairs"])
async def compute_reports():
    """
    Poll every tracked repair.

    Terminal reports (FINISHED, FAILED, CANCELED) are returned once and
    the repair stops being tracked.
    """
    reports = await asyncio.to_thread(get_manager().compute_reports)
    return ReportListResponse(
        reports=[ReportResponse(file_path=r.file_path, status=r.status) for r in reports],
        total=len(reports),
    )


def _cancel_blocking(manager, repair_key: str) -> Tuple[str, bool]:
    # Route paths drop the leading slash of absolute file paths
    if not manager.is_repairing(repair_key) and manager.is_repairing("/" + repair_key):
        repair_key = "/" + repair_key

    tracked = manager.is_repairing(repair_key)
    manager.cancel(repair_key)
    return repair_key, tracked


@router.delete("/repairs/{repair_key:path}", response_model=CancelResponse, tags=["Repairs"])
async def cancel_repair(repair_key: str):
    """Cancel one repair. Unknown keys are ignored."""
    repair_key, tracked = await asyncio.to_thread(_cancel_blocking, get_manager(), repair_key)
    logger.info(f"Cancel requested for {repair_key} (tracked={tracked})")
    return CancelResponse(canceled=[repair_key] if tracked else [])


@router.delete("/repairs", response_model=CancelResponse, tags=["Repairs"])
async def cancel_all_repairs():
    """Cancel every tracked repair."""
    manager = get_manager()
    keys = manager.active_repairs()
    await asyncio.to_thread(manager.cancel_all)
    logger.info(f"Cancel requested for all repairs ({len(keys)} tracked)")
    return CancelResponse(canceled=keys)
