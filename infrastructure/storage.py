# ============================================================================
# SCRATCH STORAGE INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - File system seam for manifests and job output
# PURPOSE: Create, read, list and delete scratch paths for repair jobs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Scratch Storage Infrastructure

The repair manager stages manifests and the compute tasks write status
records through a FileSystem. Paths are POSIX-style strings such as
"blockfixer/in/a_0f3c.../a_0f3c....in"; a leading slash is ignored.

Implementations:
- LocalFileSystem: directories under a local root (tests, single host)
- BlobFileSystem: Azure Blob Storage container, directories are virtual
  prefixes. Uses DefaultAzureCredential (works with Managed Identity).

Usage:
    fs = get_filesystem(get_defaults())
    with fs.create("blockfixer/in/job/job.in") as out:
        out.write(b"...")
    for status in fs.list_status("blockfixer/in/job"):
        ...
    fs.delete("blockfixer/in/job", recursive=True)
"""

import io
import logging
import os
import posixpath
import shutil
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, List

from core.config.defaults import RepairDefaults

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Collapse a scratch path to 'a/b/c' form (no leading or trailing slash)."""
    normalized = posixpath.normpath("/" + path.strip()).lstrip("/")
    if normalized in ("", "."):
        raise ValueError(f"Invalid scratch path: '{path}'")
    return normalized


@dataclass(frozen=True)
class FileStatus:
    """Listing entry for one path."""
    path: str
    is_dir: bool
    length: int = 0

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)


# ============================================================================
# FILE SYSTEM INTERFACE
# ============================================================================

class FileSystem(ABC):
    """Minimal file system used for repair scratch data."""

    @abstractmethod
    def create(self, path: str) -> BinaryIO:
        """Open ``path`` for binary writing, creating parents. Overwrites."""

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """Open ``path`` for seekable binary reading."""

    @abstractmethod
    def get_file_status(self, path: str) -> FileStatus:
        """Status of ``path``; raises FileNotFoundError if missing."""

    @abstractmethod
    def list_status(self, path: str) -> List[FileStatus]:
        """Children of directory ``path``."""

    @abstractmethod
    def mkdirs(self, path: str) -> None:
        """Create ``path`` and its parents."""

    @abstractmethod
    def delete(self, path: str, recursive: bool = False) -> bool:
        """Delete ``path``. Returns False if nothing was there."""

    def exists(self, path: str) -> bool:
        try:
            self.get_file_status(path)
            return True
        except FileNotFoundError:
            return False

    def is_dir(self, path: str) -> bool:
        try:
            return self.get_file_status(path).is_dir
        except FileNotFoundError:
            return False


# ============================================================================
# LOCAL FILE SYSTEM
# ============================================================================

class LocalFileSystem(FileSystem):
    """
    Scratch paths mapped under a local root directory.

    Usage:
        fs = LocalFileSystem("/tmp/blockfix")
        fs.create("blockfixer/in/job/job.in")  # -> /tmp/blockfix/blockfixer/in/job/job.in
    """

    def __init__(self, root: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _local(self, path: str) -> Path:
        return self.root / normalize_path(path)

    def create(self, path: str) -> BinaryIO:
        local = self._local(path)
        local.parent.mkdir(parents=True, exist_ok=True)
        return open(local, "wb")

    def open(self, path: str) -> BinaryIO:
        return open(self._local(path), "rb")

    def get_file_status(self, path: str) -> FileStatus:
        local = self._local(path)
        if not local.exists():
            raise FileNotFoundError(f"File does not exist: {path}")
        if local.is_dir():
            return FileStatus(path=normalize_path(path), is_dir=True)
        return FileStatus(path=normalize_path(path), is_dir=False, length=local.stat().st_size)

    def list_status(self, path: str) -> List[FileStatus]:
        local = self._local(path)
        if not local.exists():
            raise FileNotFoundError(f"File does not exist: {path}")
        if not local.is_dir():
            return [self.get_file_status(path)]

        base = normalize_path(path)
        statuses = []
        for child in sorted(local.iterdir()):
            child_path = f"{base}/{child.name}"
            if child.is_dir():
                statuses.append(FileStatus(path=child_path, is_dir=True))
            else:
                statuses.append(FileStatus(path=child_path, is_dir=False, length=child.stat().st_size))
        return statuses

    def mkdirs(self, path: str) -> None:
        self._local(path).mkdir(parents=True, exist_ok=True)

    def delete(self, path: str, recursive: bool = False) -> bool:
        local = self._local(path)
        if not local.exists():
            return False
        if local.is_dir():
            if recursive:
                shutil.rmtree(local)
            else:
                # Raises OSError when not empty
                local.rmdir()
        else:
            local.unlink()
        logger.debug(f"Deleted {local}")
        return True


# ============================================================================
# AZURE BLOB FILE SYSTEM
# ============================================================================

class _BlobWriteStream(io.BytesIO):
    """Buffers writes and uploads the blob when closed."""

    def __init__(self, blob_client):
        super().__init__()
        self._blob_client = blob_client
        self._uploaded = False

    def close(self) -> None:
        if not self._uploaded and not self.closed:
            self._uploaded = True
            self._blob_client.upload_blob(self.getvalue(), overwrite=True)
        super().close()


class BlobFileSystem(FileSystem):
    """
    Scratch paths stored as blobs in one Azure container.

    Directories do not exist in blob storage; a path is a directory when
    at least one blob name starts with "<path>/". mkdirs is a no-op.
    Clients are created lazily and cached.
    """

    def __init__(self, account_name: str, container: str, container_client: Any = None):
        if not account_name:
            raise ValueError("BlobFileSystem requires an explicit account_name")
        self.account_name = account_name
        self.container = container

        self._container_client = container_client
        self._credential = None
        self._lock = threading.Lock()

        logger.info(f"BlobFileSystem initialized for {account_name}/{container}")

    # ========================================================================
    # AZURE CLIENT INITIALIZATION
    # ========================================================================

    def _get_credential(self):
        """Get Azure credential (lazy initialization)."""
        if self._credential is None:
            client_id = os.environ.get("AZURE_CLIENT_ID")
            if client_id:
                from azure.identity import ManagedIdentityCredential
                self._credential = ManagedIdentityCredential(client_id=client_id)
                logger.debug("ManagedIdentityCredential initialized with client_id")
            else:
                from azure.identity import DefaultAzureCredential
                self._credential = DefaultAzureCredential()
                logger.debug("DefaultAzureCredential initialized")
        return self._credential

    def _get_container_client(self):
        """Get or create the cached container client."""
        if self._container_client is not None:
            return self._container_client

        with self._lock:
            if self._container_client is None:
                from azure.storage.blob import BlobServiceClient
                account_url = f"https://{self.account_name}.blob.core.windows.net"
                service = BlobServiceClient(account_url=account_url, credential=self._get_credential())
                self._container_client = service.get_container_client(self.container)
                logger.debug(f"Created container client for: {self.container}")
        return self._container_client

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def create(self, path: str) -> BinaryIO:
        blob_client = self._get_container_client().get_blob_client(normalize_path(path))
        return _BlobWriteStream(blob_client)

    def open(self, path: str) -> BinaryIO:
        from azure.core.exceptions import ResourceNotFoundError

        blob_client = self._get_container_client().get_blob_client(normalize_path(path))
        try:
            data = blob_client.download_blob().readall()
        except ResourceNotFoundError as e:
            raise FileNotFoundError(f"File does not exist: {path}") from e
        return io.BytesIO(data)

    def get_file_status(self, path: str) -> FileStatus:
        name = normalize_path(path)
        container_client = self._get_container_client()

        blob_client = container_client.get_blob_client(name)
        if blob_client.exists():
            props = blob_client.get_blob_properties()
            return FileStatus(path=name, is_dir=False, length=props.size)

        for _ in container_client.list_blobs(name_starts_with=name + "/"):
            return FileStatus(path=name, is_dir=True)

        raise FileNotFoundError(f"File does not exist: {path}")

    def list_status(self, path: str) -> List[FileStatus]:
        status = self.get_file_status(path)
        if not status.is_dir:
            return [status]

        prefix = status.path + "/"
        statuses = []
        for item in self._get_container_client().walk_blobs(name_starts_with=prefix, delimiter="/"):
            # BlobPrefix entries end with the delimiter
            if item.name.endswith("/"):
                statuses.append(FileStatus(path=item.name.rstrip("/"), is_dir=True))
            else:
                statuses.append(FileStatus(path=item.name, is_dir=False, length=item.size))
        return statuses

    def mkdirs(self, path: str) -> None:
        normalize_path(path)

    def delete(self, path: str, recursive: bool = False) -> bool:
        name = normalize_path(path)
        container_client = self._get_container_client()
        deleted = False

        children = [blob.name for blob in container_client.list_blobs(name_starts_with=name + "/")]
        if children and not recursive:
            raise OSError(f"Directory is not empty: {path}")
        for child in children:
            container_client.delete_blob(child)
            deleted = True

        blob_client = container_client.get_blob_client(name)
        if blob_client.exists():
            blob_client.delete_blob()
            deleted = True

        if deleted:
            logger.info(f"Deleted blob path: {self.container}/{name}")
        return deleted


# ============================================================================
# FACTORY
# ============================================================================

def get_filesystem(defaults: RepairDefaults) -> FileSystem:
    """
    Build the scratch file system selected by BLOCKFIX_FILESYSTEM.

    Args:
        defaults: Process defaults (filesystem kind, root, blob account)

    Returns:
        FileSystem instance
    """
    if defaults.filesystem == "local":
        return LocalFileSystem(defaults.local_root)
    if defaults.filesystem == "blob":
        if not defaults.blob_account:
            raise ValueError(
                "Blob scratch storage not configured. "
                "Set BLOCKFIX_BLOB_ACCOUNT to the storage account name."
            )
        return BlobFileSystem(defaults.blob_account, defaults.blob_container)
    raise ValueError(f"Unknown filesystem: {defaults.filesystem}. Valid: ['local', 'blob']")


__all__ = [
    "FileStatus",
    "FileSystem",
    "LocalFileSystem",
    "BlobFileSystem",
    "get_filesystem",
    "normalize_path",
]
