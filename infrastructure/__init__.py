# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Scratch storage and record files
# PURPOSE: File system seam (local / Azure Blob) and the manifest file format
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the block repair manager.

Provides:
- FileSystem: Scratch storage seam (LocalFileSystem, BlobFileSystem)
- RecordWriter / RecordReader: Typed key/value record files used for
  input manifests and task output

Usage:
    from infrastructure import LocalFileSystem, create_writer, open_reader

    fs = LocalFileSystem("/tmp/blockfix")
    with create_writer(fs, "blockfixer/in/a/a.in", "long", "text") as writer:
        writer.append(0, "/f/a")
"""

from infrastructure.storage import (
    FileStatus,
    FileSystem,
    LocalFileSystem,
    BlobFileSystem,
    get_filesystem,
    normalize_path,
)
from infrastructure.record_file import (
    RecordFileError,
    RecordWriter,
    RecordReader,
    create_writer,
    open_reader,
)

__all__ = [
    # Storage
    "FileStatus",
    "FileSystem",
    "LocalFileSystem",
    "BlobFileSystem",
    "get_filesystem",
    "normalize_path",
    # Record files
    "RecordFileError",
    "RecordWriter",
    "RecordReader",
    "create_writer",
    "open_reader",
]
