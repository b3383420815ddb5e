# ============================================================================
# REPAIR MANAGER
# ============================================================================
# STATUS: Core - Block repair orchestration
# PURPOSE: Stage, launch, track, time out and clean up repair jobs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repair Manager

Dispatches one compute job per file whose data or parity blocks need to be
rebuilt, and reports on those jobs when asked.

Submission:
    repair_source_blocks / repair_parity_blocks
        -> stage manifest <prefix>/in/<job>/<job>.in
        -> build job descriptor (per-job configuration layer)
        -> engine.submit()
        -> registry[repair_key] = handle

Polling (compute_reports), per tracked repair:
    complete & successful              -> cleanup, FINISHED
    complete & not successful          -> cleanup, FAILED
    started & running > max fix time   -> kill, cleanup, CANCELED
    error while checking               -> kill (best effort), cleanup, FAILED
    otherwise                          -> ACTIVE

Terminal repairs are evicted from the registry after each poll.

Usage:
    manager = JobRepairManager(conf, engine, fs)
    manager.repair_source_blocks("rs", "/f/a", "/p/a")
    for report in manager.compute_reports():
        ...
"""

import posixpath
import threading
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from core.clock import Clock, current_time_millis
from core.config.configuration import Configuration
from core.config.defaults import (
    CODEC_ID,
    CORRUPTION_WORKER_PREFIX,
    DEFAULT_MAX_FIX_TIME_FOR_FILE,
    IN_FILE_SUFFIX,
    JOB_USER,
    MAX_FIX_TIME_FOR_FILE,
    PARITY_PATH,
    RECONSTRUCTOR_CLASS_TAG,
    REPAIR_TYPE,
    SOURCE_PATH,
)
from core.contracts import RepairType, ReportStatus
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.job import JobDescriptor
from core.models.repair import RepairRequest, Report
from infrastructure.record_file import create_writer
from infrastructure.storage import FileSystem
from services.repair_registry import RepairRegistry
from worker.engine import ComputeEngine, JobHandle
from worker.input_format import ReconstructionInputFormat
from worker.mapper import ReconstructionMapper
from worker.output_format import RecordOutputFormat

logger = get_logger(__name__, ComponentType.MANAGER)


# ============================================================================
# MANAGER INTERFACE
# ============================================================================

class BlockRepairManager(ABC):
    """Management surface shared by every repair manager."""

    def __init__(self, conf: Configuration):
        self.conf = conf

    @abstractmethod
    def repair_source_blocks(self, codec_id: str, source_path: str, parity_path: str) -> None:
        """Rebuild lost data blocks of ``source_path``. Never raises."""

    @abstractmethod
    def repair_parity_blocks(self, codec_id: str, source_path: str, parity_path: str) -> None:
        """Rebuild lost parity blocks of ``parity_path``. Never raises."""

    @abstractmethod
    def compute_reports(self) -> List[Report]:
        """One report per tracked repair. Never raises."""

    @abstractmethod
    def cancel(self, repair_key: str) -> None:
        """Kill and forget one repair. Unknown keys are ignored."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Kill and forget every repair."""


# ============================================================================
# WORKERS
# ============================================================================

class RepairWorker:
    """
    Stages and launches repair jobs under one scratch prefix.

    Scratch layout:
        <prefix>/in/<job_name>/<job_name>.in
        <prefix>/out/<job_name>/
    """

    def __init__(self, manager: "JobRepairManager", prefix: str, reconstructor_name: Optional[str]):
        self.manager = manager
        self.prefix = prefix.rstrip("/")
        self.reconstructor_name = reconstructor_name

    def start_job(self, job_name: str, request: RepairRequest) -> JobHandle:
        """
        Create and submit a job, then register it under the repair key.

        Raises:
            OSError if the manifest cannot be written
            SubmissionError if the engine rejects the job
        """
        manager = self.manager
        in_dir = f"{self.prefix}/in/{job_name}"
        out_dir = f"{self.prefix}/out/{job_name}"

        self._create_input_file(job_name, in_dir, request.source_path)

        job_conf = Configuration(manager.conf)
        job_conf.set(REPAIR_TYPE, request.kind.value)
        job_conf.set(SOURCE_PATH, request.source_path)
        job_conf.set(PARITY_PATH, request.parity_path)
        job_conf.set(CODEC_ID, request.codec_id)

        descriptor = JobDescriptor(
            name=job_name,
            configuration=job_conf,
            mapper_class=ReconstructionMapper,
            input_format_class=ReconstructionInputFormat,
            output_format_class=RecordOutputFormat,
            input_paths=[in_dir],
            output_path=out_dir,
            num_reduce_tasks=0,
            output_key_type="text",
            output_value_type="text",
        )
        manager.configure_job(descriptor, self.reconstructor_name)

        handle = self.submit_job(descriptor)

        previous = manager.registry.put(request.repair_key, handle)
        if previous is not None and previous is not handle:
            logger.warning(
                f"Repair of {request.repair_key} resubmitted; job {previous.job_id}"
                f"({previous.name}) is no longer tracked"
            )
        return handle

    def submit_job(self, descriptor: JobDescriptor) -> JobHandle:
        logger.info("Submitting job")
        return self.manager.submit_job(descriptor)

    def _create_input_file(self, job_name: str, in_dir: str, lost_file: str) -> None:
        """Write the single-record manifest (0, lost_file)."""
        path = f"{in_dir}/{job_name}{IN_FILE_SUFFIX}"
        with create_writer(self.manager.fs, path, "long", "text") as writer:
            writer.append(0, lost_file)


class CorruptionWorker(RepairWorker):
    """Worker for files with corrupt or missing blocks."""

    def __init__(self, manager: "JobRepairManager", reconstructor_name: Optional[str]):
        super().__init__(manager, CORRUPTION_WORKER_PREFIX, reconstructor_name)


# ============================================================================
# JOB-BASED MANAGER
# ============================================================================

class JobRepairManager(BlockRepairManager):
    """
    Repair manager backed by a ComputeEngine.

    compute_reports(), cancel() and cancel_all() hold one lock for their
    whole snapshot, check and evict sequence, so concurrent pollers (the
    monitor and the HTTP API) see each terminal repair exactly once.
    """

    def __init__(
        self,
        conf: Configuration,
        engine: ComputeEngine,
        fs: FileSystem,
        reconstructor_name: Optional[str] = "echo",
        job_user: str = JOB_USER,
        clock: Optional[Clock] = None,
    ):
        super().__init__(conf)
        self.engine = engine
        self.fs = fs
        self.job_user = job_user
        self.registry = RepairRegistry()
        self._poll_lock = threading.Lock()
        self._clock = clock or current_time_millis
        self.corruption_worker = CorruptionWorker(self, reconstructor_name)

    # ------------------------------------------------------------------------
    # SUBMISSION
    # ------------------------------------------------------------------------

    def repair_source_blocks(self, codec_id: str, source_path: str, parity_path: str) -> None:
        self._repair(RepairType.SOURCE_FILE, codec_id, source_path, parity_path)

    def repair_parity_blocks(self, codec_id: str, source_path: str, parity_path: str) -> None:
        self._repair(RepairType.PARITY_FILE, codec_id, source_path, parity_path)

    def _repair(self, kind: RepairType, codec_id: str, source_path: str, parity_path: str) -> None:
        try:
            request = RepairRequest(
                kind=kind,
                source_path=source_path,
                parity_path=parity_path,
                codec_id=codec_id,
            )
            job_name = self.unique_job_name(source_path)
            with log_context(repair_key=request.repair_key, job_name=job_name):
                handle = self.corruption_worker.start_job(job_name, request)
                log_checkpoint("repair_submitted", {
                    "kind": kind.value,
                    "job_id": handle.job_id,
                    "codec_id": codec_id,
                }, logger)
        except Exception:
            logger.exception(f"Could not start {kind.value} repair of {source_path} / {parity_path}")

    @staticmethod
    def unique_job_name(source_path: str) -> str:
        """<leaf of source path>_<128-bit random hex>."""
        base_name = posixpath.basename(source_path.rstrip("/"))
        return f"{base_name}_{uuid.uuid4().hex}"

    def configure_job(self, descriptor: JobDescriptor, reconstructor_name: Optional[str]) -> None:
        """Tag the job with the submitting principal and the reconstructor to use."""
        descriptor.user = self.job_user
        if reconstructor_name:
            descriptor.configuration.set(RECONSTRUCTOR_CLASS_TAG, reconstructor_name)
        else:
            descriptor.configuration.unset(RECONSTRUCTOR_CLASS_TAG)

    def submit_job(self, descriptor: JobDescriptor) -> JobHandle:
        handle = self.engine.submit(descriptor)
        logger.info(f"Job {handle.job_id}({descriptor.name}) started")
        return handle

    def get_max_fix_time_for_file(self) -> int:
        return self.conf.get_int(MAX_FIX_TIME_FOR_FILE, DEFAULT_MAX_FIX_TIME_FOR_FILE)

    # ------------------------------------------------------------------------
    # REPORTING
    # ------------------------------------------------------------------------

    def compute_reports(self) -> List[Report]:
        with self._poll_lock:
            return self._compute_reports()

    def _compute_reports(self) -> List[Report]:
        snapshot = self.registry.snapshot()
        reports: List[Report] = []

        for repair_key, job in snapshot.items():
            with log_context(repair_key=repair_key, job_name=job.name, job_id=job.job_id):
                status = self._check_job(job)
            reports.append(Report(file_path=repair_key, status=status))

        for report in reports:
            if report.status.is_terminal():
                self.registry.remove_if_same(report.file_path, snapshot[report.file_path])
                log_checkpoint("repair_terminal", {
                    "repair_key": report.file_path,
                    "status": report.status.value,
                }, logger)

        return reports

    def _check_job(self, job: JobHandle) -> ReportStatus:
        try:
            if job.is_complete() and job.is_successful():
                logger.info("REPAIR COMPLETE")
                self._cleanup(job)
                return ReportStatus.FINISHED

            if job.is_complete():
                logger.info("REPAIR FAILED")
                self._cleanup(job)
                return ReportStatus.FAILED

            start_time = job.start_time_millis()
            elapsed = self._clock() - start_time
            if start_time > 0 and elapsed >= self.get_max_fix_time_for_file():
                logger.info(f"Timeout: {elapsed} {start_time}")
                job.kill()
                self._cleanup(job)
                return ReportStatus.CANCELED

            logger.info("REPAIR RUNNING")
            return ReportStatus.ACTIVE

        except Exception:
            logger.info("Exception during completeness check", exc_info=True)
            self._kill_quietly(job)
            self._cleanup(job)
            return ReportStatus.FAILED

    # ------------------------------------------------------------------------
    # CANCELLATION
    # ------------------------------------------------------------------------

    def cancel(self, repair_key: str) -> None:
        with self._poll_lock:
            job = self.registry.pop(repair_key)
            if job is not None:
                self._cancel_job(repair_key, job)
                return
        logger.debug(f"No repair tracked for {repair_key}")

    def _cancel_job(self, repair_key: str, job: JobHandle) -> None:
        with log_context(repair_key=repair_key, job_name=job.name, job_id=job.job_id):
            self._kill_quietly(job)
            self._cleanup(job)
            log_checkpoint("repair_canceled", {"repair_key": repair_key}, logger)

    def cancel_all(self) -> None:
        with self._poll_lock:
            jobs = self.registry.clear()
            for job in jobs:
                self._kill_quietly(job)
                self._cleanup(job)
        if jobs:
            logger.info(f"Canceled {len(jobs)} repairs")

    def tracked_job(self, repair_key: str) -> Optional[JobHandle]:
        return self.registry.get(repair_key)

    def is_repairing(self, repair_key: str) -> bool:
        return repair_key in self.registry

    def active_repairs(self) -> List[str]:
        return sorted(self.registry.keys())

    @staticmethod
    def _kill_quietly(job: JobHandle) -> None:
        try:
            job.kill()
        except Exception as e:
            logger.error(f"Could not kill job {job.job_id}: {e}")

    # ------------------------------------------------------------------------
    # CLEANUP
    # ------------------------------------------------------------------------

    def _cleanup(self, job: JobHandle) -> None:
        """Delete the job's output directory and its (single) input directory."""
        out_dir = job.output_path
        try:
            if out_dir:
                self.fs.delete(out_dir, recursive=True)
        except Exception as e:
            logger.warning(f"Could not delete output dir {out_dir}: {e}")

        in_dir = job.input_paths[0] if job.input_paths else None
        try:
            if in_dir:
                self.fs.delete(in_dir, recursive=True)
        except Exception as e:
            logger.warning(f"Could not delete input dir {in_dir}: {e}")


__all__ = [
    "BlockRepairManager",
    "JobRepairManager",
    "RepairWorker",
    "CorruptionWorker",
]
