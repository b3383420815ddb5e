# ============================================================================
# REPAIR REGISTRY
# ============================================================================
# STATUS: Core - In-flight repair tracking
# PURPOSE: Map repair keys to the job handles repairing them
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repair Registry

In-memory mapping from repair key (source path for SOURCE_FILE repairs,
parity path for PARITY_FILE repairs) to the JobHandle doing the work.

At most one entry per key. All mutations happen under an RLock so the
HTTP surface and the monitor loop can share one manager.
"""

import threading
from typing import Dict, List, Optional

from worker.engine import JobHandle


class RepairRegistry:
    """Thread-safe {repair_key -> JobHandle} map."""

    def __init__(self):
        self._jobs: Dict[str, JobHandle] = {}
        self._lock = threading.RLock()

    def put(self, key: str, job: JobHandle) -> Optional[JobHandle]:
        """Register ``job`` under ``key``. Returns the handle it replaced, if any."""
        with self._lock:
            previous = self._jobs.get(key)
            self._jobs[key] = job
            return previous

    def get(self, key: str) -> Optional[JobHandle]:
        with self._lock:
            return self._jobs.get(key)

    def pop(self, key: str) -> Optional[JobHandle]:
        with self._lock:
            return self._jobs.pop(key, None)

    def remove_if_same(self, key: str, job: JobHandle) -> bool:
        """Remove ``key`` only if it still maps to ``job``."""
        with self._lock:
            if self._jobs.get(key) is job:
                del self._jobs[key]
                return True
            return False

    def snapshot(self) -> Dict[str, JobHandle]:
        with self._lock:
            return dict(self._jobs)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._jobs.keys())

    def clear(self) -> List[JobHandle]:
        """Remove every entry and return the removed handles."""
        with self._lock:
            jobs = list(self._jobs.values())
            self._jobs.clear()
            return jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._jobs


__all__ = ["RepairRegistry"]
