# ============================================================================
# RECORD OUTPUT FORMAT
# ============================================================================
# STATUS: Core - Task output files
# PURPOSE: Per-task part files under a job's output directory
# CREATED: 19 OCT 2026
# ============================================================================
"""
Record Output Format

Each mapper task writes its (text, text) output to
<output_path>/part-m-NNNNN. Only failed files produce records, as
(path -> "failed"). A successful job commit adds an empty _SUCCESS marker.
"""

import logging
from typing import List, Tuple

from core.models.job import JobDescriptor
from infrastructure.record_file import RecordWriter, create_writer, open_reader
from infrastructure.storage import FileSystem

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "_SUCCESS"
PART_PREFIX = "part-m-"


def part_file_name(task_index: int) -> str:
    return f"{PART_PREFIX}{task_index:05d}"


class RecordOutputFormat:
    """Writes one record file per map task."""

    def check_output_specs(self, job: JobDescriptor, fs: FileSystem) -> None:
        """
        Validate the job's output path before submission.

        Raises:
            ValueError if the job has no output path
            FileExistsError if the output directory already exists
        """
        if not job.output_path:
            raise ValueError(f"Output directory not set for job {job.name}")
        if fs.exists(job.output_path):
            raise FileExistsError(f"Output directory {job.output_path} already exists")

    def get_record_writer(self, job: JobDescriptor, fs: FileSystem, task_index: int) -> RecordWriter:
        path = f"{job.output_path.rstrip('/')}/{part_file_name(task_index)}"
        return create_writer(fs, path, job.output_key_type, job.output_value_type)

    def commit_job(self, job: JobDescriptor, fs: FileSystem) -> None:
        fs.mkdirs(job.output_path)
        with fs.create(f"{job.output_path.rstrip('/')}/{SUCCESS_MARKER}"):
            pass
        logger.debug(f"Committed output for job {job.name}")


def read_output_records(fs: FileSystem, output_dir: str) -> List[Tuple[str, str]]:
    """Collect all records from the part files of ``output_dir``."""
    records: List[Tuple[str, str]] = []
    for status in sorted(fs.list_status(output_dir), key=lambda s: s.name):
        if status.is_dir or not status.name.startswith(PART_PREFIX):
            continue
        with open_reader(fs, status.path) as reader:
            records.extend(reader)
    return records


__all__ = [
    "RecordOutputFormat",
    "read_output_records",
    "part_file_name",
    "SUCCESS_MARKER",
]
