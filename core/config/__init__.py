# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Job configuration layers plus process-level defaults.
"""

from core.config.configuration import Configuration
from core.config.defaults import (
    MAX_FIX_TIME_FOR_FILE,
    DEFAULT_MAX_FIX_TIME_FOR_FILE,
    REPAIR_TYPE,
    SOURCE_PATH,
    PARITY_PATH,
    CODEC_ID,
    RECONSTRUCTOR_CLASS_TAG,
    CODECS_JSON,
    JOB_USER,
    IN_FILE_SUFFIX,
    CORRUPTION_WORKER_PREFIX,
    RepairDefaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "Configuration",
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
