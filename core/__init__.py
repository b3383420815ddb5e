# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts and models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import RepairType, ReportStatus, RepairCounter, JobState
from core.models import (
    RepairRequest,
    Report,
    JobDescriptor,
    InputSplit,
)

__all__ = [
    # Enums
    "RepairType",
    "ReportStatus",
    "RepairCounter",
    "JobState",
    # Models
    "RepairRequest",
    "Report",
    "JobDescriptor",
    "InputSplit",
]
