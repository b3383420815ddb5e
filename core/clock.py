# ============================================================================
# CLOCK
# ============================================================================
# STATUS: Core - Wall clock in milliseconds
# PURPOSE: Single injectable time source for start times and timeouts
# CREATED: 19 OCT 2026
# ============================================================================
"""Wall-clock helpers. Components accept a ``clock`` callable so tests can pin time."""

import time
from typing import Callable

Clock = Callable[[], int]


def current_time_millis() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


__all__ = ["Clock", "current_time_millis"]
