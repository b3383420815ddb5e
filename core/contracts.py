# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by manager, worker and API
# PURPOSE: Repair kinds, report statuses, task counters
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: RepairType, ReportStatus, RepairCounter, JobState
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the block repair system.

These values cross boundaries:
- Job configuration (repair_type is written as the enum name)
- HTTP API (report statuses)
- Python (internal processing)
"""

from enum import Enum


# ============================================================================
# STATUS ENUMS
# ============================================================================

class RepairType(str, Enum):
    """
    What is being reconstructed.

    The value is the literal stored under the ``repair_type`` job key.
    """
    SOURCE_FILE = "SOURCE_FILE"    # Missing/corrupt data blocks
    PARITY_FILE = "PARITY_FILE"    # Missing/corrupt parity blocks


class ReportStatus(str, Enum):
    """
    Repair status as surfaced by compute_reports().

    State transitions:
        ACTIVE -> FINISHED
               -> FAILED
               -> CANCELED
    """
    ACTIVE = "ACTIVE"          # Job submitted or running
    FINISHED = "FINISHED"      # Job completed successfully
    FAILED = "FAILED"          # Job completed unsuccessfully, or could not be checked
    CANCELED = "CANCELED"      # Killed after exceeding the maximum fix time

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (ReportStatus.FINISHED, ReportStatus.FAILED, ReportStatus.CANCELED)


class RepairCounter(str, Enum):
    """Per-job counters aggregated by the compute engine."""
    FILES_SUCCEEDED = "FILES_SUCCEEDED"
    FILES_FAILED = "FILES_FAILED"


class JobState(str, Enum):
    """
    Compute-engine job lifecycle.

    State transitions:
        PREP -> RUNNING -> SUCCEEDED
                        -> FAILED
                        -> KILLED
    """
    PREP = "prep"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    KILLED = "killed"

    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED, JobState.KILLED)
