# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with repair context
# PURPOSE: Consistent, queryable logging across manager, worker and API
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Log records carry the repair they belong to. The manager opens a context
for a repair key, the engine adds the job, the mapper adds the task, and
every line logged underneath is tagged with all of them.

Features:
- Component-tagged loggers
- Repair context (repair_key, job_name, job_id, task_id) held in a
  ContextVar, so it follows asyncio.to_thread and copied contexts
- JSON output for log aggregation (LOG_FORMAT=json)
- Named checkpoints marking repair lifecycle transitions

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("services.repair_manager")

    with log_context(repair_key="/f/a", job_name="a_3f2c..."):
        logger.info("Submitting job")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    MANAGER = "manager"
    WORKER = "worker"
    ENGINE = "engine"
    MONITOR = "monitor"
    API = "api"
    INFRASTRUCTURE = "infrastructure"


# ============================================================================
# REPAIR CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Repair identifiers attached to every record logged inside a context."""
    repair_key: Optional[str] = None
    job_name: Optional[str] = None
    job_id: Optional[str] = None
    task_id: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


_EMPTY = LogContext()
_current: ContextVar[LogContext] = ContextVar("blockfix_log_context", default=_EMPTY)


def get_current_context() -> LogContext:
    """Context in effect for the caller."""
    return _current.get()


@contextmanager
def log_context(**kwargs: Optional[str]) -> Iterator[LogContext]:
    """
    Narrow the logging context for the enclosed block.

    Fields not given are inherited from the enclosing context.

    Example:
        with log_context(job_name="a_3f2c", task_id="task_local_0001_m_000000"):
            logger.info("Reconstructing")
    """
    updates = {k: v for k, v in kwargs.items() if v is not None}
    context = replace(_current.get(), **updates)
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# FORMATTERS
# ============================================================================

# Order and labels used by the human formatter
_SHORT_LABELS = (
    ("repair_key", "repair"),
    ("job_name", "job"),
    ("task_id", "task"),
)


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp, level, logger, message, plus component, context,
    checkpoint and data when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        component = getattr(record, "component", None)
        if component:
            log_data["component"] = component

        context = get_current_context().to_dict()
        if context:
            log_data["context"] = context

        checkpoint = getattr(record, "checkpoint", None)
        if checkpoint:
            log_data["checkpoint"] = checkpoint
            if getattr(record, "checkpoint_data", None):
                log_data["data"] = record.checkpoint_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for development, repair context inline."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = _utcnow().strftime("%Y-%m-%d %H:%M:%S")
        context = get_current_context()

        parts = [
            f"{label}={getattr(context, attr)}"
            for attr, label in _SHORT_LABELS
            if getattr(context, attr) is not None
        ]
        context_str = f" [{', '.join(parts)}]" if parts else ""

        result = (
            f"{timestamp} {record.levelname.ljust(8)} "
            f"{record.name}{context_str}: {record.getMessage()}"
        )
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter stamping the component onto every record it emits."""

    def process(self, msg, kwargs):
        component = self.extra.get("component")
        if component is not None:
            extra = dict(kwargs.get("extra") or {})
            extra.setdefault("component", getattr(component, "value", component))
            kwargs["extra"] = extra
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a component-tagged logger.

    Args:
        name: Logger name (e.g., "services.repair_manager")
        component: Optional component type for categorization
    """
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int, None] = None,
    json_output: bool = False,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level; defaults to LOG_LEVEL or INFO
        json_output: Force JSON output; LOG_FORMAT=json does the same
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
) -> None:
    """
    Log a named checkpoint.

    Checkpoints ("repair_submitted", "repair_terminal", "repair_canceled")
    let a single repair be followed through its lifecycle by name.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    logger.info(
        f"CHECKPOINT: {name}",
        extra={"checkpoint": name, "checkpoint_data": data or {}},
    )


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
