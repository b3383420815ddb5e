# ============================================================================
# TEST FAKES
# ============================================================================
# STATUS: Tests - Shared fakes
# PURPOSE: Scriptable JobHandle / ComputeEngine / clock for manager tests
# CREATED: 19 OCT 2026
# ============================================================================
"""Fakes shared by the manager and route tests."""

import threading
import time
from typing import Dict, List, Optional

from core.models.job import JobDescriptor
from worker.engine import ComputeEngine, JobHandle


class FakeJob(JobHandle):
    """JobHandle whose state is set by the test."""

    def __init__(self, job_id: str, descriptor: JobDescriptor):
        super().__init__(job_id, descriptor.name, descriptor.input_paths, descriptor.output_path, descriptor.user)
        self.descriptor = descriptor
        self.complete = False
        self.successful = False
        self.start_time = 0
        self.kill_calls = 0
        self.check_error: Optional[Exception] = None
        self.kill_error: Optional[Exception] = None

    def is_complete(self) -> bool:
        if self.check_error is not None:
            raise self.check_error
        return self.complete

    def is_successful(self) -> bool:
        return self.successful

    def start_time_millis(self) -> int:
        return self.start_time

    def kill(self) -> None:
        self.kill_calls += 1
        if self.kill_error is not None:
            raise self.kill_error

    def counters(self) -> Dict[str, int]:
        return {}


class FakeEngine(ComputeEngine):
    """Records submitted descriptors and hands out FakeJobs."""

    def __init__(self):
        self.submitted: List[FakeJob] = []
        self.submit_error: Optional[Exception] = None

    def submit(self, job: JobDescriptor) -> FakeJob:
        if self.submit_error is not None:
            raise self.submit_error
        handle = FakeJob(f"job_fake_{len(self.submitted) + 1:04d}", job)
        self.submitted.append(handle)
        return handle


class FakeClock:
    """Millisecond clock pinned by the test."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class SlowCheck:
    """
    Makes a FakeJob's is_complete() slow and records how many callers
    were inside it at once.
    """

    def __init__(self, job: FakeJob, delay: float = 0.05):
        self.delay = delay
        self.calls = 0
        self.max_active = 0
        self._active = 0
        self._lock = threading.Lock()
        self._wrapped = job.is_complete
        job.is_complete = self

    def __call__(self) -> bool:
        with self._lock:
            self.calls += 1
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            time.sleep(self.delay)
            return self._wrapped()
        finally:
            with self._lock:
                self._active -= 1
