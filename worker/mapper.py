# ============================================================================
# RECONSTRUCTION MAPPER
# ============================================================================
# STATUS: Core - Per-split task body
# PURPOSE: Run the configured reconstructor for each manifest record
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reconstruction Mapper

Runs on a compute node, once per input split:

1. setup: read the repair parameters from the job configuration, load
   the codec registry, build a Decoder, and instantiate the reconstructor
   named by hdfs.blockintegrity.reconstructor.
2. map: for every (key, path) record, rebuild the data blocks (SOURCE_FILE)
   or parity blocks (PARITY_FILE) of the job's file. A failure increments
   FILES_FAILED, writes (path -> "failed") and fails the task.

The reconstructor receives the job-level source/parity paths, not the
record's path. Each manifest holds a single record naming the same file,
so the record path is only logged and reported on failure.
"""

import time
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from core.config.configuration import Configuration
from core.config.defaults import CODEC_ID, PARITY_PATH, RECONSTRUCTOR_CLASS_TAG, REPAIR_TYPE, SOURCE_PATH
from core.contracts import RepairCounter, RepairType
from core.logging import get_logger, log_context
from handlers.codecs import Decoder, get_codec, initialize_codecs
from handlers.registry import BlockReconstructor, create_reconstructor

logger = get_logger(__name__)

FAILED_MARKER = "failed"


class ReconstructionError(RuntimeError):
    """Raised by map() when the reconstructor fails for a file."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Reconstructing file {path} failed")


# ============================================================================
# TASK CONTEXT
# ============================================================================

class TaskContext:
    """
    What a mapper sees of the engine: configuration, counters, output
    and a heartbeat.
    """

    def __init__(
        self,
        task_id: str,
        configuration: Configuration,
        output: Optional[Callable[[str, str], None]] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        self.task_id = task_id
        self.configuration = configuration
        self.counters: Dict[str, int] = {}
        self.last_progress_at: Optional[float] = None
        self._output = output
        self._progress_callback = progress_callback

    def increment_counter(self, counter: RepairCounter, amount: int = 1) -> None:
        self.counters[counter.value] = self.counters.get(counter.value, 0) + amount

    def get_counter(self, counter: RepairCounter) -> int:
        return self.counters.get(counter.value, 0)

    def write(self, key: str, value: str) -> None:
        if self._output is not None:
            self._output(key, value)

    def progress(self) -> None:
        """Heartbeat: tells the engine the task is alive."""
        self.last_progress_at = time.time()
        if self._progress_callback is not None:
            self._progress_callback(self.task_id)


# ============================================================================
# MAPPER
# ============================================================================

class ReconstructionMapper:
    """Mapper for reconstructing files with lost blocks."""

    RECONSTRUCTOR_CLASS_TAG = RECONSTRUCTOR_CLASS_TAG

    def __init__(self):
        self.reconstructor: Optional[BlockReconstructor] = None
        self.repair_type: Optional[RepairType] = None
        self.source_path: Optional[str] = None
        self.parity_path: Optional[str] = None
        self.decoder: Optional[Decoder] = None

    def setup(self, context: TaskContext) -> None:
        """
        Read repair parameters and build the reconstructor.

        Raises:
            ValueError if repair_type is missing or unknown
            CodecError / CodecNotFoundError if the codec cannot be resolved
            ReconstructorNotFoundError if the configured name is not registered
            OSError if the reconstructor cannot be constructed
        """
        conf = context.configuration
        initialize_codecs(conf)

        self.repair_type = RepairType(conf.get(REPAIR_TYPE))
        self.source_path = conf.get(SOURCE_PATH)
        self.parity_path = conf.get(PARITY_PATH)
        self.decoder = Decoder(conf, get_codec(conf.get(CODEC_ID)))

        reconstructor_name = conf.get(self.RECONSTRUCTOR_CLASS_TAG)
        if not reconstructor_name:
            logger.error(
                f"No class supplied for reconstructor (prop {self.RECONSTRUCTOR_CLASS_TAG})"
            )
            context.progress()
            return

        self.reconstructor = create_reconstructor(reconstructor_name, conf)

    def map(self, key: Any, value: str, context: TaskContext) -> None:
        """
        Reconstruct the job's file.

        Raises:
            ReconstructionError if the reconstructor raises
        """
        logger.info(f"reconstructing {value}")
        try:
            if self.repair_type == RepairType.SOURCE_FILE:
                self.reconstructor.process_file(self.source_path, self.parity_path, self.decoder)
            elif self.repair_type == RepairType.PARITY_FILE:
                self.reconstructor.process_parity_file(self.source_path, self.parity_path, self.decoder)
        except Exception as e:
            logger.error(f"Reconstructing file {value} failed: {e}")

            # report file as failed
            context.increment_counter(RepairCounter.FILES_FAILED)
            context.write(value, FAILED_MARKER)
            raise ReconstructionError(value) from e

        context.increment_counter(RepairCounter.FILES_SUCCEEDED)
        context.progress()

    def cleanup(self, context: TaskContext) -> None:
        pass

    def run(self, context: TaskContext, records: Iterable[Tuple[Any, str]]) -> None:
        """Drive setup, map over ``records``, cleanup."""
        with log_context(task_id=context.task_id):
            self.setup(context)
            if self.reconstructor is None:
                # No reconstructor configured: nothing is processed
                return
            try:
                for key, value in records:
                    self.map(key, value, context)
            finally:
                self.cleanup(context)


__all__ = [
    "ReconstructionMapper",
    "ReconstructionError",
    "TaskContext",
    "FAILED_MARKER",
]
