# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Configuration keys and default values
# PURPOSE: Centralized keys, scratch layout and process-level defaults
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Two kinds of settings live here:

1. Job configuration keys. These travel inside a Configuration from the
   manager to the worker task and keep their historical names.
2. Process defaults (RepairDefaults). These are read once from BLOCKFIX_*
   environment variables when the service starts.

Design:
- Immutable dataclass for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional

from core.config.configuration import Configuration


# ============================================================================
# JOB CONFIGURATION KEYS
# ============================================================================

MAX_FIX_TIME_FOR_FILE = "io.hops.erasure_coding.blockfix.max.fix.time.for.file"
DEFAULT_MAX_FIX_TIME_FOR_FILE = 4 * 60 * 60 * 1000  # 4 hours, in ms

REPAIR_TYPE = "repair_type"
SOURCE_PATH = "source_path"
PARITY_PATH = "parity_path"
CODEC_ID = "codec_id"

RECONSTRUCTOR_CLASS_TAG = "hdfs.blockintegrity.reconstructor"

CODECS_JSON = "erasure_coding.codecs.json"

# Submitting principal for every repair job
JOB_USER = "erasure_coding"

# Scratch layout: <prefix>/in/<job>/<job>.in and <prefix>/out/<job>/
IN_FILE_SUFFIX = ".in"
CORRUPTION_WORKER_PREFIX = "blockfixer"


# ============================================================================
# PROCESS DEFAULTS
# ============================================================================

@dataclass(frozen=True)
class RepairDefaults:
    """
    Process-level defaults for the repair service.

    Controls the reconstructor used by the corruption worker, the repair
    time budget, the monitor loop, and which file system backs scratch data.
    """
    # Reconstructor registered in handlers.registry
    reconstructor_name: str = "echo"

    # Repair budget (ms) and submitting principal
    max_fix_time_ms: int = DEFAULT_MAX_FIX_TIME_FOR_FILE
    job_user: str = JOB_USER

    # Monitor loop
    poll_interval_seconds: float = 10.0
    monitor_enabled: bool = True

    # Local compute engine
    engine_max_workers: int = 4

    # Scratch file system: "local" or "blob"
    filesystem: str = "local"
    local_root: str = "/tmp/blockfix"
    blob_account: Optional[str] = None
    blob_container: str = "blockfix"

    # Optional YAML file with base configuration keys
    config_file: Optional[str] = None

    # Optional YAML file with codec definitions
    codecs_file: Optional[str] = None

    def apply_to(self, conf: Configuration) -> Configuration:
        """Write defaults into ``conf`` for keys it does not already carry."""
        if MAX_FIX_TIME_FOR_FILE not in conf:
            conf.set(MAX_FIX_TIME_FOR_FILE, self.max_fix_time_ms)
        return conf

    @classmethod
    def from_env(cls) -> "RepairDefaults":
        """Create from environment variables."""
        return cls(
            reconstructor_name=os.getenv("BLOCKFIX_RECONSTRUCTOR", "echo"),
            max_fix_time_ms=int(os.getenv("BLOCKFIX_MAX_FIX_TIME_MS", DEFAULT_MAX_FIX_TIME_FOR_FILE)),
            job_user=os.getenv("BLOCKFIX_JOB_USER", JOB_USER),
            poll_interval_seconds=float(os.getenv("BLOCKFIX_POLL_INTERVAL", 10.0)),
            monitor_enabled=os.getenv("BLOCKFIX_MONITOR_ENABLED", "true").lower() == "true",
            engine_max_workers=int(os.getenv("BLOCKFIX_ENGINE_WORKERS", 4)),
            filesystem=os.getenv("BLOCKFIX_FILESYSTEM", "local").lower(),
            local_root=os.getenv("BLOCKFIX_LOCAL_ROOT", "/tmp/blockfix"),
            blob_account=os.getenv("BLOCKFIX_BLOB_ACCOUNT"),
            blob_container=os.getenv("BLOCKFIX_BLOB_CONTAINER", "blockfix"),
            config_file=os.getenv("BLOCKFIX_CONFIG_FILE"),
            codecs_file=os.getenv("BLOCKFIX_CODECS_FILE"),
        )


_defaults: Optional[RepairDefaults] = None


def get_defaults() -> RepairDefaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = RepairDefaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


__all__ = [
    "MAX_FIX_TIME_FOR_FILE",
    "DEFAULT_MAX_FIX_TIME_FOR_FILE",
    "REPAIR_TYPE",
    "SOURCE_PATH",
    "PARITY_PATH",
    "CODEC_ID",
    "RECONSTRUCTOR_CLASS_TAG",
    "CODECS_JSON",
    "JOB_USER",
    "IN_FILE_SUFFIX",
    "CORRUPTION_WORKER_PREFIX",
    "RepairDefaults",
    "get_defaults",
    "reset_defaults",
]
