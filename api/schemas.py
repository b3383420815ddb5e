# ============================================================================
# API SCHEMAS
# ============================================================================
# STATUS: Core - Request/Response schemas
# PURPOSE: Pydantic models for API validation
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Request and response models for the repair API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import RepairType, ReportStatus


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class RepairCreate(BaseModel):
    """Request to repair the blocks of one file."""
    codec_id: str = Field(..., min_length=1, max_length=64, description="Codec registry key")
    source_path: str = Field(..., min_length=1, description="Path of the source (data) file")
    parity_path: str = Field(..., min_length=1, description="Path of the parity file")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "codec_id": "rs",
                    "source_path": "/user/data/part-0001",
                    "parity_path": "/raidrs/user/data/part-0001",
                }
            ]
        }
    }


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class RepairAccepted(BaseModel):
    """Repair submitted and tracked."""
    repair_key: str
    kind: RepairType


class ReportResponse(BaseModel):
    """Status of one tracked repair."""
    file_path: str
    status: ReportStatus


class ReportListResponse(BaseModel):
    """Reports consumed by one compute_reports() call."""
    reports: List[ReportResponse]
    total: int


class RepairListResponse(BaseModel):
    """Keys of repairs currently tracked."""
    repair_keys: List[str]
    total: int


class CancelResponse(BaseModel):
    """Result of a cancel request."""
    canceled: List[str]


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None
    context: Optional[Dict[str, Any]] = None


__all__ = [
    "RepairCreate",
    "RepairAccepted",
    "ReportResponse",
    "ReportListResponse",
    "RepairListResponse",
    "CancelResponse",
    "ErrorResponse",
]
