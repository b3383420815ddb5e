# ============================================================================
# REPAIR MODELS
# ============================================================================
# STATUS: Core model - Repair request and status report
# PURPOSE: Validate repair submissions and describe repair outcomes
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: RepairRequest, Report
# DEPENDENCIES: pydantic
# ============================================================================
"""
Repair Models

RepairRequest is ephemeral: built from the arguments of a repair call,
validated, consumed by the job launcher and never stored.

Report is what compute_reports() hands back to callers. Every non-ACTIVE
status is terminal; the caller may reissue the repair if needed.
"""

from pydantic import BaseModel, Field, field_validator

from core.contracts import RepairType, ReportStatus


class RepairRequest(BaseModel):
    """
    One request to rebuild the blocks of a source or parity file.

    The repair key is the path of the object being repaired.
    """
    kind: RepairType
    source_path: str = Field(..., description="Path of the source (data) file")
    parity_path: str = Field(..., description="Path of the parity file")
    codec_id: str = Field(..., description="Codec registry key")

    model_config = {"frozen": True}

    @field_validator("source_path", "parity_path", "codec_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @property
    def repair_key(self) -> str:
        """Registry key: the source path for data repairs, the parity path otherwise."""
        if self.kind == RepairType.SOURCE_FILE:
            return self.source_path
        return self.parity_path


class Report(BaseModel):
    """Status of one tracked repair."""
    file_path: str = Field(..., description="Repair key of the tracked repair")
    status: ReportStatus

    model_config = {"frozen": True}

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()
