# ============================================================================
# JOB MODELS
# ============================================================================
# STATUS: Core model - Job descriptor and input split
# PURPOSE: Describe a compute job before submission, and one unit of its input
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: JobDescriptor, InputSplit
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Job Models

JobDescriptor is what the job launcher hands to a ComputeEngine. It carries
the per-job Configuration layer plus the classes the engine instantiates
(mapper, input format, output format).

InputSplit is a byte range inside one manifest file. The split planner
produces them; each one becomes one mapper task.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from core.config.configuration import Configuration


@dataclass
class JobDescriptor:
    """
    Everything the compute engine needs to run one job.

    Map-only: num_reduce_tasks is always 0 for repair jobs.
    """
    name: str
    configuration: Configuration
    mapper_class: Any
    input_format_class: Any
    output_format_class: Any
    input_paths: List[str] = field(default_factory=list)
    output_path: Optional[str] = None
    num_reduce_tasks: int = 0
    output_key_type: str = "text"
    output_value_type: str = "text"
    user: Optional[str] = None


@dataclass(frozen=True)
class InputSplit:
    """
    Byte range [start, start + length) of a record file.

    Boundaries always fall on record boundaries.
    """
    path: str
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length
