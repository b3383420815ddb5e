# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for repair and job models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models cross the API boundary (RepairRequest, Report).
Dataclasses stay internal (JobDescriptor, InputSplit).
"""

from core.models.repair import RepairRequest, Report
from core.models.job import JobDescriptor, InputSplit

__all__ = [
    # Repair
    "RepairRequest",
    "Report",
    # Job
    "JobDescriptor",
    "InputSplit",
]
