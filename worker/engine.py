# ============================================================================
# COMPUTE ENGINE
# ============================================================================
# STATUS: Core - Job submission and execution
# PURPOSE: Run map-only repair jobs and expose their status as JobHandles
# CREATED: 19 OCT 2026
# ============================================================================
"""
Compute Engine

The repair manager only needs two things from a compute fabric:

- ComputeEngine.submit(JobDescriptor) -> JobHandle
- JobHandle status queries and kill()

LocalComputeEngine is the in-process implementation. Each submitted job
runs on a ThreadPoolExecutor thread:

    PREP -> RUNNING (start time recorded)
         -> plan splits (input format)
         -> one mapper task per split, sequentially
         -> commit output (_SUCCESS)
         -> SUCCEEDED | FAILED | KILLED

kill() is honoured between records and between tasks.

Usage:
    engine = LocalComputeEngine(fs, max_workers=4)
    handle = engine.submit(descriptor)
    handle.wait_for_completion(timeout=30)
"""

import itertools
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from core.clock import Clock, current_time_millis
from core.config.configuration import Configuration
from core.contracts import JobState
from core.logging import ComponentType, get_logger, log_context
from core.models.job import InputSplit, JobDescriptor
from infrastructure.storage import FileSystem
from worker.mapper import TaskContext

logger = get_logger(__name__, ComponentType.ENGINE)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class SubmissionError(Exception):
    """Raised when a job is rejected at submission."""
    def __init__(self, job_name: str, reason: str):
        self.job_name = job_name
        self.reason = reason
        super().__init__(f"Could not submit job {job_name}: {reason}")


class JobNotFoundError(Exception):
    """Raised when a job id is unknown to the engine."""
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


# ============================================================================
# ABSTRACTIONS
# ============================================================================

class JobHandle(ABC):
    """
    Handle on a submitted job.

    Identity fields are fixed at submission. Status methods may raise
    if the engine cannot be reached; callers treat that as a failed check.
    """

    def __init__(
        self,
        job_id: str,
        name: str,
        input_paths: List[str],
        output_path: Optional[str],
        user: Optional[str] = None,
    ):
        self.job_id = job_id
        self.name = name
        self.input_paths = list(input_paths)
        self.output_path = output_path
        self.user = user

    @abstractmethod
    def is_complete(self) -> bool:
        """True once the job reached a terminal state."""

    @abstractmethod
    def is_successful(self) -> bool:
        """True if the job completed successfully."""

    @abstractmethod
    def start_time_millis(self) -> int:
        """Wall-clock start time, 0 if the job has not started running."""

    @abstractmethod
    def kill(self) -> None:
        """Request termination."""

    @abstractmethod
    def counters(self) -> Dict[str, int]:
        """Aggregated task counters."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.job_id}, {self.name})"


class ComputeEngine(ABC):
    """Accepts job descriptors and returns handles."""

    @abstractmethod
    def submit(self, job: JobDescriptor) -> JobHandle:
        """
        Submit a job.

        Raises:
            SubmissionError if the job is rejected
        """


# ============================================================================
# LOCAL IMPLEMENTATION
# ============================================================================

class LocalJob(JobHandle):
    """JobHandle for a job running inside LocalComputeEngine."""

    def __init__(self, job_id: str, descriptor: JobDescriptor):
        super().__init__(
            job_id=job_id,
            name=descriptor.name,
            input_paths=descriptor.input_paths,
            output_path=descriptor.output_path,
            user=descriptor.user,
        )
        self.state = JobState.PREP
        self.error: Optional[str] = None
        self._start_time = 0
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._kill_requested = threading.Event()
        self._done = threading.Event()

    def is_complete(self) -> bool:
        return self.state.is_terminal()

    def is_successful(self) -> bool:
        return self.state == JobState.SUCCEEDED

    def start_time_millis(self) -> int:
        return self._start_time

    def kill(self) -> None:
        if self.is_complete():
            return
        logger.info(f"Kill requested for job {self.job_id}({self.name})")
        self._kill_requested.set()

    @property
    def kill_requested(self) -> bool:
        return self._kill_requested.is_set()

    def counters(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def wait_for_completion(self, timeout: Optional[float] = None) -> bool:
        """Block until the job is terminal. Returns False on timeout."""
        return self._done.wait(timeout)

    def _mark_running(self, start_time: int) -> None:
        self._start_time = start_time
        self.state = JobState.RUNNING

    def _merge_counters(self, counters: Dict[str, int]) -> None:
        with self._lock:
            for name, value in counters.items():
                self._counters[name] = self._counters.get(name, 0) + value

    def _finish(self, state: JobState, error: Optional[str] = None) -> None:
        self.error = error
        self.state = state
        self._done.set()


class LocalComputeEngine(ComputeEngine):
    """
    In-process compute engine.

    Jobs run concurrently (up to max_workers); the tasks of one job run
    sequentially on its thread.
    """

    def __init__(self, fs: FileSystem, max_workers: int = 4, clock: Optional[Clock] = None):
        self.fs = fs
        self._clock = clock or current_time_millis
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="repair-job")
        self._jobs: Dict[str, LocalJob] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------------
    # SUBMISSION
    # ------------------------------------------------------------------------

    def submit(self, job: JobDescriptor) -> LocalJob:
        if job.num_reduce_tasks != 0:
            raise SubmissionError(job.name, "only map-only jobs are supported")

        output_format = job.output_format_class()
        try:
            output_format.check_output_specs(job, self.fs)
        except (ValueError, FileExistsError) as e:
            raise SubmissionError(job.name, str(e)) from e

        with self._lock:
            job_id = f"job_local_{next(self._ids):04d}"
            handle = LocalJob(job_id, job)
            self._jobs[job_id] = handle

        self._executor.submit(self._run_job, handle, job)
        logger.debug(f"Queued job {job_id}({job.name}) for user {job.user}")
        return handle

    def get_job(self, job_id: str) -> LocalJob:
        with self._lock:
            handle = self._jobs.get(job_id)
        if handle is None:
            raise JobNotFoundError(job_id)
        return handle

    def list_jobs(self) -> List[LocalJob]:
        with self._lock:
            return list(self._jobs.values())

    def shutdown(self, wait: bool = True) -> None:
        """Kill unfinished jobs and stop the worker threads."""
        for handle in self.list_jobs():
            handle.kill()
        self._executor.shutdown(wait=wait)
        logger.info("Local compute engine shut down")

    # ------------------------------------------------------------------------
    # EXECUTION
    # ------------------------------------------------------------------------

    def _run_job(self, handle: LocalJob, job: JobDescriptor) -> None:
        with log_context(job_name=job.name, job_id=handle.job_id):
            if handle.kill_requested:
                handle._finish(JobState.KILLED)
                return

            handle._mark_running(self._clock())
            logger.info(f"Job {handle.job_id} running")

            try:
                input_format = job.input_format_class()
                output_format = job.output_format_class()
                splits = input_format.get_splits(job, self.fs)

                for index, split in enumerate(splits):
                    if handle.kill_requested:
                        break
                    self._run_task(handle, job, input_format, output_format, index, split)

                if handle.kill_requested:
                    logger.info(f"Job {handle.job_id} killed")
                    handle._finish(JobState.KILLED)
                    return

                output_format.commit_job(job, self.fs)
            except Exception as e:
                logger.error(f"Job {handle.job_id} failed: {e}")
                handle._finish(JobState.FAILED, str(e))
                return

            logger.info(f"Job {handle.job_id} succeeded")
            handle._finish(JobState.SUCCEEDED)

    def _run_task(
        self,
        handle: LocalJob,
        job: JobDescriptor,
        input_format: Any,
        output_format: Any,
        index: int,
        split: InputSplit,
    ) -> None:
        task_id = f"task_{handle.job_id[len('job_'):]}_m_{index:06d}"
        mapper = job.mapper_class()

        with output_format.get_record_writer(job, self.fs, index) as writer:
            context = TaskContext(
                task_id=task_id,
                configuration=Configuration(job.configuration),
                output=writer.append,
            )
            try:
                with input_format.create_record_reader(split, self.fs) as records:
                    mapper.run(context, self._until_killed(handle, records))
            finally:
                handle._merge_counters(context.counters)

    @staticmethod
    def _until_killed(handle: LocalJob, records: Iterable[Tuple[Any, Any]]) -> Iterator[Tuple[Any, Any]]:
        for record in records:
            if handle.kill_requested:
                return
            yield record


__all__ = [
    "JobHandle",
    "ComputeEngine",
    "LocalJob",
    "LocalComputeEngine",
    "SubmissionError",
    "JobNotFoundError",
]
