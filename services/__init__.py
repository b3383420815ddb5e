# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Repair orchestration layer
# PURPOSE: Repair manager and in-flight repair registry
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic for block repair.
The manager coordinates the file system, the compute engine and the registry.

Usage:
    from services import JobRepairManager

    manager = JobRepairManager(conf, engine, fs, reconstructor_name="echo")
    manager.repair_source_blocks("rs", "/f/a", "/p/a")
"""

from .repair_registry import RepairRegistry
from .repair_manager import (
    BlockRepairManager,
    JobRepairManager,
    RepairWorker,
    CorruptionWorker,
)

__all__ = [
    "RepairRegistry",
    "BlockRepairManager",
    "JobRepairManager",
    "RepairWorker",
    "CorruptionWorker",
]
