# ============================================================================
# RECONSTRUCTOR REGISTRY
# ============================================================================
# STATUS: Core - Reconstructor registration and lookup
# PURPOSE: Resolve the configured reconstructor name to an implementation
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reconstructor Registry

Worker tasks read a reconstructor name from the job configuration
(hdfs.blockintegrity.reconstructor) and look it up here to get the class
that rebuilds blocks.

Design:
- Reconstructors are registered at import time via class decorator
- Registry is a simple dict (name -> class)
- A class is reachable by its short name and by "<module>.<QualName>"
- Fail-fast on duplicate registration
- Unknown names raise ReconstructorNotFoundError
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type

from core.config.configuration import Configuration

logger = logging.getLogger(__name__)


# ============================================================================
# RECONSTRUCTOR INTERFACE
# ============================================================================

class BlockReconstructor(ABC):
    """
    Rebuilds missing blocks of one erasure-coded file.

    Implementations take the job Configuration as their only constructor
    argument. Both operations raise on failure and return normally on
    success.
    """

    def __init__(self, conf: Configuration):
        self.conf = conf

    @abstractmethod
    def process_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        """Reconstruct missing data blocks of ``source_path``."""

    @abstractmethod
    def process_parity_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        """Reconstruct missing parity blocks of ``parity_path``."""


ReconstructorClass = Type[BlockReconstructor]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ReconstructorError(Exception):
    """Base exception for reconstructor registry errors."""
    pass


class ReconstructorNotFoundError(ReconstructorError):
    """Raised when a reconstructor name is not in the registry."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Reconstructor not found: {name}")


class DuplicateReconstructorError(ReconstructorError):
    """Raised when a reconstructor name is already registered."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Reconstructor already registered: {name}")


# ============================================================================
# REGISTRY
# ============================================================================

_reconstructors: Dict[str, ReconstructorClass] = {}
_reconstructor_metadata: Dict[str, Dict[str, Any]] = {}


def qualified_name(cls: type) -> str:
    """Class-name-style identifier, e.g. 'handlers.examples.EchoReconstructor'."""
    return f"{cls.__module__}.{cls.__qualname__}"


def register_reconstructor(
    name: str,
    *,
    description: str = "",
) -> Callable[[ReconstructorClass], ReconstructorClass]:
    """
    Class decorator to register a reconstructor.

    Args:
        name: Short name (must be unique)
        description: Human-readable description

    Example:
        @register_reconstructor("stripe", description="Rebuild by stripe")
        class StripeReconstructor(BlockReconstructor):
            ...
    """
    def decorator(cls: ReconstructorClass) -> ReconstructorClass:
        if not (isinstance(cls, type) and issubclass(cls, BlockReconstructor)):
            raise TypeError(f"{cls!r} is not a BlockReconstructor subclass")

        full_name = qualified_name(cls)
        for key in {name, full_name}:
            if key in _reconstructors:
                raise DuplicateReconstructorError(key)

        _reconstructors[name] = cls
        _reconstructors[full_name] = cls
        _reconstructor_metadata[name] = {
            "name": name,
            "class": full_name,
            "description": description,
            "registered_at": datetime.now(timezone.utc).isoformat(),
        }

        logger.debug(f"Registered reconstructor: {name} ({full_name})")
        return cls

    return decorator


def get_reconstructor(name: str) -> Optional[ReconstructorClass]:
    """Get a reconstructor class by short or qualified name, or None."""
    return _reconstructors.get(name)


def get_reconstructor_or_raise(name: str) -> ReconstructorClass:
    """
    Get a reconstructor class by name, raising if not found.

    Raises:
        ReconstructorNotFoundError if the name is unknown
    """
    cls = _reconstructors.get(name)
    if cls is None:
        raise ReconstructorNotFoundError(name)
    return cls


def create_reconstructor(name: str, conf: Configuration) -> BlockReconstructor:
    """
    Instantiate the named reconstructor with the job configuration.

    Raises:
        ReconstructorNotFoundError if the name is unknown
        OSError if the constructor fails
    """
    cls = get_reconstructor_or_raise(name)
    try:
        return cls(conf)
    except Exception as e:
        raise OSError(
            f"Could not instantiate a block reconstructor based on class {qualified_name(cls)}"
        ) from e


def list_reconstructors() -> List[Dict[str, Any]]:
    """List registered reconstructors with metadata."""
    return list(_reconstructor_metadata.values())


def clear_reconstructors() -> None:
    """
    Clear all registered reconstructors.

    Primarily for testing.
    """
    _reconstructors.clear()
    _reconstructor_metadata.clear()
    logger.debug("Cleared all reconstructors")


__all__ = [
    "BlockReconstructor",
    "ReconstructorClass",
    "register_reconstructor",
    "get_reconstructor",
    "get_reconstructor_or_raise",
    "create_reconstructor",
    "list_reconstructors",
    "clear_reconstructors",
    "qualified_name",
    "ReconstructorError",
    "ReconstructorNotFoundError",
    "DuplicateReconstructorError",
]
