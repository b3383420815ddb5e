# ============================================================================
# SPLIT PLANNER TESTS
# ============================================================================
# STATUS: Tests - ReconstructionInputFormat
# PURPOSE: Verify split planning over staged manifests
# CREATED: 19 OCT 2026
# ============================================================================
"""
Split Planner Tests

Covers:
1. Single-record manifest -> one split covering the record
2. Multi-record manifests with FILES_PER_TASK > 1 (residual split)
3. Only <jobName>.in is read
4. Non-directory input paths are rejected
5. SplitRecordReader yields exactly the records of its split

Run with:
    pytest tests/test_input_format.py -v
"""

import pytest

from core.config.configuration import Configuration
from core.models.job import InputSplit, JobDescriptor
from infrastructure.record_file import create_writer, open_reader
from infrastructure.storage import LocalFileSystem
from worker.input_format import ReconstructionInputFormat, SplitRecordReader
from worker.mapper import ReconstructionMapper
from worker.output_format import RecordOutputFormat


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def fs(tmp_path):
    return LocalFileSystem(str(tmp_path))


def _job(name="a_1", in_dir="blockfixer/in/a_1"):
    return JobDescriptor(
        name=name,
        configuration=Configuration(),
        mapper_class=ReconstructionMapper,
        input_format_class=ReconstructionInputFormat,
        output_format_class=RecordOutputFormat,
        input_paths=[in_dir],
        output_path="blockfixer/out/" + name,
    )


def _stage(fs, path, values):
    with create_writer(fs, path, "long", "text") as writer:
        for index, value in enumerate(values):
            writer.append(index, value)


class _GroupedInputFormat(ReconstructionInputFormat):
    FILES_PER_TASK = 2


# ============================================================================
# SPLIT PLANNING
# ============================================================================

class TestGetSplits:

    def test_single_record_manifest_gives_one_split(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a"])

        splits = ReconstructionInputFormat().get_splits(_job(), fs)

        assert len(splits) == 1
        split = splits[0]
        assert split.path == "blockfixer/in/a_1/a_1.in"
        with open_reader(fs, split.path) as reader:
            assert split.start == reader.header_length
            reader.next()
            assert split.end == reader.position

    def test_one_split_per_record(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a", "/f/b", "/f/c"])

        splits = ReconstructionInputFormat().get_splits(_job(), fs)

        assert len(splits) == 3
        # Contiguous, non-overlapping
        for left, right in zip(splits, splits[1:]):
            assert left.end == right.start

    def test_residual_split(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a", "/f/b", "/f/c"])

        splits = _GroupedInputFormat().get_splits(_job(), fs)

        assert len(splits) == 2
        assert splits[0].end == splits[1].start

    def test_empty_manifest_gives_no_splits(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", [])
        assert ReconstructionInputFormat().get_splits(_job(), fs) == []

    def test_only_job_manifest_is_read(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a"])
        _stage(fs, "blockfixer/in/a_1/other.in", ["/f/x", "/f/y"])
        fs.mkdirs("blockfixer/in/a_1/a_1.in.d")

        splits = ReconstructionInputFormat().get_splits(_job(), fs)

        assert [s.path for s in splits] == ["blockfixer/in/a_1/a_1.in"]

    def test_input_path_must_be_directory(self, fs):
        _stage(fs, "blockfixer/in/a_1.in", ["/f/a"])

        with pytest.raises(NotADirectoryError, match="is not a directory"):
            ReconstructionInputFormat().get_splits(_job(in_dir="blockfixer/in/a_1.in"), fs)

    def test_missing_input_path(self, fs):
        with pytest.raises(FileNotFoundError):
            ReconstructionInputFormat().get_splits(_job(), fs)

    def test_is_splitable(self, fs):
        assert ReconstructionInputFormat().is_splitable(fs, "any") is True


# ============================================================================
# RECORD READER
# ============================================================================

class TestSplitRecordReader:

    def test_reads_only_its_split(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a", "/f/b", "/f/c"])
        splits = ReconstructionInputFormat().get_splits(_job(), fs)

        seen = []
        for split in splits:
            with ReconstructionInputFormat().create_record_reader(split, fs) as records:
                seen.append(list(records))

        assert seen == [[(0, "/f/a")], [(1, "/f/b")], [(2, "/f/c")]]

    def test_split_starting_at_zero_skips_header(self, fs):
        _stage(fs, "blockfixer/in/a_1/a_1.in", ["/f/a"])
        length = fs.get_file_status("blockfixer/in/a_1/a_1.in").length

        split = InputSplit(path="blockfixer/in/a_1/a_1.in", start=0, length=length)
        with SplitRecordReader(fs, split) as records:
            assert list(records) == [(0, "/f/a")]
