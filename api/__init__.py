# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for repair management
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the block repair manager.
"""

from .routes import router, set_services
from .schemas import (
    RepairCreate,
    RepairAccepted,
    ReportResponse,
    ReportListResponse,
)

__all__ = [
    "router",
    "set_services",
    "RepairCreate",
    "RepairAccepted",
    "ReportResponse",
    "ReportListResponse",
]
