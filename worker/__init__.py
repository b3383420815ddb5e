# ============================================================================
# WORKER MODULE
# ============================================================================
# STATUS: Core - Compute-side repair components
# PURPOSE: Split planning, reconstruction tasks, task output, local engine
# CREATED: 19 OCT 2026
# ============================================================================
"""
Worker Module

Components that run on the compute fabric:
- input_format: Split planning over staged manifests
- mapper: Per-split reconstruction task body
- output_format: Per-task part files and job commit
- engine: ComputeEngine / JobHandle seams and the local engine
"""

from worker.input_format import (
    ReconstructionInputFormat,
    SplitRecordReader,
)
from worker.mapper import (
    ReconstructionMapper,
    ReconstructionError,
    TaskContext,
)
from worker.output_format import (
    RecordOutputFormat,
    read_output_records,
)
from worker.engine import (
    ComputeEngine,
    JobHandle,
    LocalComputeEngine,
    LocalJob,
    SubmissionError,
    JobNotFoundError,
)

__all__ = [
    # Input
    "ReconstructionInputFormat",
    "SplitRecordReader",
    # Mapper
    "ReconstructionMapper",
    "ReconstructionError",
    "TaskContext",
    # Output
    "RecordOutputFormat",
    "read_output_records",
    # Engine
    "ComputeEngine",
    "JobHandle",
    "LocalComputeEngine",
    "LocalJob",
    "SubmissionError",
    "JobNotFoundError",
]
