# ============================================================================
# BLOCK REPAIR MANAGER - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: Main application with repair monitor loop
# CREATED: 19 OCT 2026
# ============================================================================
"""
Block Repair Manager Main Application

FastAPI application that:
1. Provides HTTP API for repair management
2. Runs the repair monitor loop in the background
3. Owns the scratch file system and the local compute engine

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from __version__ import __version__, BUILD_DATE, CODENAME
from api.routes import router, set_services
from core.config import CODECS_JSON, Configuration, RepairDefaults, get_defaults
from handlers import codecs_to_json, initialize_codecs, load_codecs_file
from infrastructure.storage import get_filesystem
from orchestrator import RepairMonitor
from services import JobRepairManager
from worker.engine import LocalComputeEngine

from core.logging import configure_logging, get_logger

# LOG_LEVEL and LOG_FORMAT are read from the environment
configure_logging()
logger = get_logger(__name__)

# Global instances
_engine: Optional[LocalComputeEngine] = None
_manager: Optional[JobRepairManager] = None
_monitor: Optional[RepairMonitor] = None


def build_configuration(defaults: RepairDefaults) -> Configuration:
    """
    Base configuration shared by every repair job.

    Optional YAML file, then codec definitions, then process defaults
    for keys still missing.
    """
    if defaults.config_file:
        conf = Configuration.from_yaml(defaults.config_file)
        logger.info(f"Loaded {len(conf)} configuration keys from {defaults.config_file}")
    else:
        conf = Configuration()

    if defaults.codecs_file:
        conf.set(CODECS_JSON, codecs_to_json(load_codecs_file(defaults.codecs_file)))
        logger.info(f"Loaded codec definitions from {defaults.codecs_file}")

    return defaults.apply_to(conf)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    global _engine, _manager, _monitor

    logger.info(f"Starting {CODENAME} v{__version__} (Build {BUILD_DATE})")

    defaults = get_defaults()
    conf = build_configuration(defaults)

    # Fail fast on a bad codec file; tasks load it again per job
    codecs = initialize_codecs(conf)
    logger.info(f"Loaded {len(codecs)} codecs")

    fs = get_filesystem(defaults)
    logger.info(f"Scratch file system: {defaults.filesystem}")

    _engine = LocalComputeEngine(fs, max_workers=defaults.engine_max_workers)
    _manager = JobRepairManager(
        conf,
        _engine,
        fs,
        reconstructor_name=defaults.reconstructor_name,
        job_user=defaults.job_user,
    )
    _monitor = RepairMonitor(_manager, poll_interval=defaults.poll_interval_seconds)

    set_services(manager=_manager, monitor=_monitor)

    if defaults.monitor_enabled:
        await _monitor.start()
    else:
        logger.info("Repair monitor disabled; reports are only computed on request")

    yield

    # Shutdown
    logger.info(f"Shutting down {CODENAME}...")

    await _monitor.stop()
    _manager.cancel_all()
    _engine.shutdown(wait=False)

    logger.info(f"{CODENAME} stopped")


# Create FastAPI app
app = FastAPI(
    title=CODENAME,
    description="Dispatches and tracks erasure-coded block repair jobs",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api/v1")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": CODENAME,
        "version": __version__,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
