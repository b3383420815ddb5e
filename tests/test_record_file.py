# ============================================================================
# RECORD FILE TESTS
# ============================================================================
# STATUS: Tests - Manifest / output record encoding
# PURPOSE: Verify record file writing, reading, positions and seeking
# CREATED: 19 OCT 2026
# ============================================================================
"""
Record File Tests

Covers:
1. Manifest read-back: (0, lostPath)
2. Header validation (magic, version, types)
3. Positions and seek for split planning
4. Truncated and malformed files

Run with:
    pytest tests/test_record_file.py -v
"""

import io

import pytest

from infrastructure.record_file import (
    MAGIC,
    RecordFileError,
    RecordReader,
    RecordWriter,
    create_writer,
    open_reader,
)
from infrastructure.storage import LocalFileSystem


# ============================================================================
# FIXTURES
# ============================================================================

class _KeepOpen(io.BytesIO):
    """BytesIO that survives RecordWriter.close() so tests can inspect it."""

    def close(self):
        pass


@pytest.fixture
def fs(tmp_path):
    return LocalFileSystem(str(tmp_path))


def _write(records, key_type="long", value_type="text") -> bytes:
    stream = _KeepOpen()
    with RecordWriter(stream, key_type, value_type) as writer:
        for key, value in records:
            writer.append(key, value)
    return stream.getvalue()


# ============================================================================
# ROUND TRIP
# ============================================================================

class TestManifestReadBack:
    """The manifest the manager stages is read back unchanged."""

    def test_single_record_manifest(self, fs):
        with create_writer(fs, "blockfixer/in/a_1/a_1.in", "long", "text") as writer:
            writer.append(0, "/f/a")

        with open_reader(fs, "blockfixer/in/a_1/a_1.in") as reader:
            assert reader.key_type == "long"
            assert reader.value_type == "text"
            assert list(reader) == [(0, "/f/a")]

    def test_text_text_records(self):
        data = _write([("/f/a", "failed"), ("/f/b", "failed")], "text", "text")
        reader = RecordReader(io.BytesIO(data))
        assert list(reader) == [("/f/a", "failed"), ("/f/b", "failed")]

    def test_unicode_and_negative_keys(self):
        data = _write([(-7, "/données/ü")])
        reader = RecordReader(io.BytesIO(data))
        assert reader.next() == (-7, "/données/ü")
        assert reader.next() is None

    def test_empty_file_has_no_records(self):
        data = _write([])
        reader = RecordReader(io.BytesIO(data))
        assert reader.position == reader.header_length
        assert reader.next() is None

    def test_records_written_counter(self):
        stream = _KeepOpen()
        writer = RecordWriter(stream, "long", "text")
        writer.append(0, "/f/a")
        writer.append(1, "/f/b")
        assert writer.records_written == 2


# ============================================================================
# POSITIONS
# ============================================================================

class TestPositions:
    """Reader positions are record boundaries."""

    def test_seek_to_recorded_position(self):
        data = _write([(0, "/f/a"), (1, "/f/b"), (2, "/f/c")])
        reader = RecordReader(io.BytesIO(data))

        reader.next()
        second = reader.position
        assert reader.next() == (1, "/f/b")

        reader.seek(second)
        assert reader.next() == (1, "/f/b")

    def test_seek_into_header_rejected(self):
        data = _write([(0, "/f/a")])
        reader = RecordReader(io.BytesIO(data))
        with pytest.raises(RecordFileError):
            reader.seek(reader.header_length - 1)

    def test_writer_position_matches_reader(self):
        stream = _KeepOpen()
        writer = RecordWriter(stream, "long", "text")
        header_end = writer.position
        writer.append(0, "/f/a")
        record_end = writer.position

        reader = RecordReader(io.BytesIO(stream.getvalue()))
        assert reader.header_length == header_end
        reader.next()
        assert reader.position == record_end


# ============================================================================
# VALIDATION
# ============================================================================

class TestValidation:
    """Malformed input is rejected with RecordFileError."""

    def test_bad_magic(self):
        with pytest.raises(RecordFileError, match="bad magic"):
            RecordReader(io.BytesIO(b"NOPE" + b"\x01"), name="x.in")

    def test_bad_version(self):
        data = bytearray(_write([]))
        data[len(MAGIC)] = 9
        with pytest.raises(RecordFileError, match="version"):
            RecordReader(io.BytesIO(bytes(data)))

    def test_truncated_record(self):
        data = _write([(0, "/f/a")])
        with pytest.raises(RecordFileError, match="truncated"):
            list(RecordReader(io.BytesIO(data[:-2])))

    def test_unknown_type(self):
        with pytest.raises(RecordFileError, match="Unsupported record type"):
            RecordWriter(_KeepOpen(), "float", "text")

    def test_wrong_value_type(self):
        writer = RecordWriter(_KeepOpen(), "long", "text")
        with pytest.raises(TypeError):
            writer.append("zero", "/f/a")

    def test_invalid_utf8_text(self):
        data = _write([(0, "ab")])
        corrupt = data[:-2] + b"\xff\xfe"
        with pytest.raises(RecordFileError, match="UTF-8"):
            list(RecordReader(io.BytesIO(corrupt)))

    def test_is_an_io_error(self):
        assert issubclass(RecordFileError, IOError)
