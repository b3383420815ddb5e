# ============================================================================
# JOB CONFIGURATION
# ============================================================================
# STATUS: Core - Layered key/value configuration
# PURPOSE: String-keyed configuration carried from manager to worker tasks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Job Configuration

A flat mapping of dotted string keys to string values. The manager builds
one layer per submitted job on top of its base configuration, and the
worker task reads the same keys back during setup.

Values are always stored as strings; typed getters parse on read.

Usage:
    base = Configuration.from_yaml("blockfix.yaml")
    job_conf = Configuration(base)
    job_conf.set("repair_type", "SOURCE_FILE")
    job_conf.get_int(MAX_FIX_TIME_FOR_FILE, DEFAULT_MAX_FIX_TIME_FOR_FILE)
"""

from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

import yaml


class Configuration:
    """
    Copy-on-construct key/value configuration.

    ``Configuration(base)`` copies every value of ``base``; later changes
    to either object do not affect the other.
    """

    def __init__(
        self,
        base: Optional["Configuration"] = None,
        values: Optional[Mapping[str, Any]] = None,
    ):
        self._values: Dict[str, str] = {}
        if base is not None:
            self._values.update(base._values)
        if values:
            for key, value in values.items():
                self.set(key, value)

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Configuration":
        """
        Load a configuration from a YAML file.

        Nested mappings are flattened with dots, so
        ``{"io": {"hops": {"x": 1}}}`` becomes ``io.hops.x = "1"``.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")

        return cls(values=_flatten(data))

    # =========================================================================
    # ACCESS
    # =========================================================================

    def set(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError(f"Configuration value for '{key}' cannot be None")
        if isinstance(value, bool):
            value = "true" if value else "false"
        self._values[key] = str(value)

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        raw = self._values.get(key)
        if raw is None or raw.strip() == "":
            return default
        return int(raw.strip())

    def get_float(self, key: str, default: float) -> float:
        raw = self._values.get(key)
        if raw is None or raw.strip() == "":
            return default
        return float(raw.strip())

    def get_bool(self, key: str, default: bool) -> bool:
        raw = self._values.get(key)
        if raw is None:
            return default
        return raw.strip().lower() in ("true", "1", "yes", "on")

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._values.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Configuration({len(self._values)} keys)"


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, full_key))
        elif value is not None:
            flat[full_key] = value
    return flat


__all__ = ["Configuration"]
