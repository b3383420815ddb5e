# ============================================================================
# RECORD FILE FORMAT
# ============================================================================
# STATUS: Infrastructure - Binary key/value record files
# PURPOSE: Manifest and job-output encoding shared by manager and tasks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Record File Format

A record file is a header followed by a sequence of (key, value) records.
The manager writes manifests as (long, text) records; mapper tasks write
their status output as (text, text) records.

Layout (all integers big-endian):

    header:
        magic          4 bytes   b"ECSQ"
        version        1 byte    1
        key type       u16 length + UTF-8 name ("long" | "text")
        value type     u16 length + UTF-8 name
    record (repeated):
        key length     i32
        value length   i32
        key bytes
        value bytes

"long" is a signed 64-bit integer (8 bytes), "text" is UTF-8.

Reader positions are byte offsets from the start of the file. The split
planner records them between records, so every split boundary is a record
boundary and a reader can seek straight to it.
"""

import struct
from typing import Any, BinaryIO, Callable, Dict, Iterator, Optional, Tuple

from infrastructure.storage import FileSystem

MAGIC = b"ECSQ"
VERSION = 1

_RECORD_HEAD = struct.Struct(">ii")
_LONG = struct.Struct(">q")
_U16 = struct.Struct(">H")


class RecordFileError(IOError):
    """Raised for malformed or truncated record files."""
    pass


# ============================================================================
# TYPE CODECS
# ============================================================================

def _encode_long(value: Any) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"long record field requires int, got {type(value).__name__}")
    return _LONG.pack(value)


def _decode_long(data: bytes) -> int:
    if len(data) != _LONG.size:
        raise RecordFileError(f"long field must be {_LONG.size} bytes, got {len(data)}")
    return _LONG.unpack(data)[0]


def _encode_text(value: Any) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"text record field requires str, got {type(value).__name__}")
    return value.encode("utf-8")


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RecordFileError(f"text field is not valid UTF-8: {e}") from e


_CODECS: Dict[str, Tuple[Callable[[Any], bytes], Callable[[bytes], Any]]] = {
    "long": (_encode_long, _decode_long),
    "text": (_encode_text, _decode_text),
}


def _codec(type_name: str) -> Tuple[Callable[[Any], bytes], Callable[[bytes], Any]]:
    try:
        return _CODECS[type_name]
    except KeyError:
        raise RecordFileError(f"Unsupported record type: {type_name}. Valid: {sorted(_CODECS)}")


# ============================================================================
# WRITER
# ============================================================================

class RecordWriter:
    """
    Appends typed records to a binary stream.

    Usage:
        with RecordWriter(stream, "long", "text") as writer:
            writer.append(0, "/f/a")
    """

    def __init__(self, stream: BinaryIO, key_type: str, value_type: str):
        self._stream = stream
        self.key_type = key_type
        self.value_type = value_type
        self._encode_key = _codec(key_type)[0]
        self._encode_value = _codec(value_type)[0]
        self.records_written = 0

        header = bytearray(MAGIC)
        header.append(VERSION)
        for type_name in (key_type, value_type):
            encoded = type_name.encode("utf-8")
            header += _U16.pack(len(encoded)) + encoded
        self._stream.write(bytes(header))

    def append(self, key: Any, value: Any) -> None:
        key_bytes = self._encode_key(key)
        value_bytes = self._encode_value(value)
        self._stream.write(_RECORD_HEAD.pack(len(key_bytes), len(value_bytes)))
        self._stream.write(key_bytes)
        self._stream.write(value_bytes)
        self.records_written += 1

    @property
    def position(self) -> int:
        return self._stream.tell()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "RecordWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# READER
# ============================================================================

class RecordReader:
    """
    Reads typed records from a seekable binary stream.

    ``position`` is the offset of the next record to be read.
    """

    def __init__(self, stream: BinaryIO, name: str = "<stream>"):
        self._stream = stream
        self.name = name

        magic = self._read_exact(len(MAGIC))
        if magic != MAGIC:
            raise RecordFileError(f"{name} is not a record file (bad magic)")
        version = self._read_exact(1)[0]
        if version != VERSION:
            raise RecordFileError(f"{name} has unsupported version {version}")

        self.key_type = self._read_type_name()
        self.value_type = self._read_type_name()
        self._decode_key = _codec(self.key_type)[1]
        self._decode_value = _codec(self.value_type)[1]
        self.header_length = self._stream.tell()

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise RecordFileError(f"{self.name} is truncated")
        return data

    def _read_type_name(self) -> str:
        (length,) = _U16.unpack(self._read_exact(_U16.size))
        try:
            return self._read_exact(length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise RecordFileError(f"{self.name} has an unreadable type name") from e

    @property
    def position(self) -> int:
        return self._stream.tell()

    def seek(self, position: int) -> None:
        if position < self.header_length:
            raise RecordFileError(
                f"Cannot seek to {position} in {self.name}: header ends at {self.header_length}"
            )
        self._stream.seek(position)

    def next(self) -> Optional[Tuple[Any, Any]]:
        """Read the next record, or None at end of file."""
        head = self._stream.read(_RECORD_HEAD.size)
        if not head:
            return None
        if len(head) != _RECORD_HEAD.size:
            raise RecordFileError(f"{self.name} is truncated")

        key_length, value_length = _RECORD_HEAD.unpack(head)
        if key_length < 0 or value_length < 0:
            raise RecordFileError(f"{self.name} has a negative record length")

        key = self._decode_key(self._read_exact(key_length))
        value = self._decode_value(self._read_exact(value_length))
        return key, value

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        while True:
            record = self.next()
            if record is None:
                return
            yield record

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "RecordReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def create_writer(fs: FileSystem, path: str, key_type: str, value_type: str) -> RecordWriter:
    """Create (or overwrite) a record file at ``path``."""
    stream = fs.create(path)
    try:
        return RecordWriter(stream, key_type, value_type)
    except Exception:
        stream.close()
        raise


def open_reader(fs: FileSystem, path: str) -> RecordReader:
    """Open the record file at ``path``."""
    stream = fs.open(path)
    try:
        return RecordReader(stream, name=path)
    except Exception:
        stream.close()
        raise


__all__ = [
    "MAGIC",
    "VERSION",
    "RecordFileError",
    "RecordWriter",
    "RecordReader",
    "create_writer",
    "open_reader",
]
