# ============================================================================
# RECONSTRUCTION INPUT FORMAT
# ============================================================================
# STATUS: Core - Split planning over staged manifests
# PURPOSE: Turn a job's manifest directory into per-task input splits
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reconstruction Input Format

The manager stages one manifest per job at
<prefix>/in/<jobName>/<jobName>.in. The compute engine asks this class for
splits; each split becomes one mapper task.

A split is emitted every FILES_PER_TASK records, covering the byte range
those records occupy, plus one residual split for any remainder. Split
boundaries are reader positions taken between records, so they always
fall on record boundaries.
"""

import logging
from typing import Any, Iterator, List, Tuple

from core.config.defaults import IN_FILE_SUFFIX
from core.models.job import InputSplit, JobDescriptor
from infrastructure.record_file import RecordReader, open_reader
from infrastructure.storage import FileSystem

logger = logging.getLogger(__name__)


class ReconstructionInputFormat:
    """
    Splits manifest files into tasks handled by a single node.

    Every input path must be a directory; only the file named
    "<jobName>.in" inside it is read.
    """

    FILES_PER_TASK = 1

    def get_splits(self, job: JobDescriptor, fs: FileSystem) -> List[InputSplit]:
        """
        Plan the splits for ``job``.

        Raises:
            NotADirectoryError if an input path is not a directory
        """
        files_per_task = self.FILES_PER_TASK
        manifest_name = job.name + IN_FILE_SUFFIX

        splits: List[InputSplit] = []
        file_counter = 0

        for in_path in job.input_paths:
            if not fs.get_file_status(in_path).is_dir:
                raise NotADirectoryError(f"{in_path} is not a directory")

            for status in fs.list_status(in_path):
                if status.is_dir or status.name != manifest_name:
                    continue

                file_counter += 1
                with open_reader(fs, status.path) as reader:
                    splits.extend(self._split_file(reader, status.path, files_per_task))

        logger.info(f"created {len(splits)} input splits from {file_counter} files")
        return splits

    @staticmethod
    def _split_file(reader: RecordReader, path: str, files_per_task: int) -> List[InputSplit]:
        splits = []
        start_pos = reader.position
        counter = 0

        while reader.next() is not None:
            if counter % files_per_task == files_per_task - 1:
                splits.append(InputSplit(path=path, start=start_pos, length=reader.position - start_pos))
                start_pos = reader.position
            counter += 1

        # Residual records; also covers files_per_task never being reached
        if start_pos != reader.position:
            splits.append(InputSplit(path=path, start=start_pos, length=reader.position - start_pos))

        return splits

    def is_splitable(self, fs: FileSystem, path: str) -> bool:
        """Manifest files may be split between any two records."""
        return True

    def create_record_reader(self, split: InputSplit, fs: FileSystem) -> "SplitRecordReader":
        return SplitRecordReader(fs, split)


class SplitRecordReader:
    """
    Iterates the (key, value) records that start inside one split.

    Usage:
        with input_format.create_record_reader(split, fs) as records:
            for key, value in records:
                ...
    """

    def __init__(self, fs: FileSystem, split: InputSplit):
        self.split = split
        self._reader = open_reader(fs, split.path)
        self._reader.seek(max(split.start, self._reader.header_length))

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        while self._reader.position < self.split.end:
            record = self._reader.next()
            if record is None:
                return
            yield record

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> "SplitRecordReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ReconstructionInputFormat", "SplitRecordReader"]
