# ============================================================================
# EXAMPLE RECONSTRUCTORS
# ============================================================================
# STATUS: Examples - Sample reconstructor implementations
# PURPOSE: Demonstrate reconstructor registration; drive tests and local runs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Example Reconstructors

Sample implementations showing how to register a reconstructor. None of
them touch block data; they are for testing the repair pipeline and as
templates for real implementations.

Behaviour is tuned through the job configuration:
    blockfix.examples.sleep.seconds       (sleep, default 1.0)
    blockfix.examples.flaky.failure_rate  (flaky, default 0.2)
    blockfix.examples.fail.message        (fail)
"""

import logging
import random
import time
from typing import Any, List, Tuple

from handlers.registry import BlockReconstructor, register_reconstructor

logger = logging.getLogger(__name__)

SLEEP_SECONDS = "blockfix.examples.sleep.seconds"
FLAKY_FAILURE_RATE = "blockfix.examples.flaky.failure_rate"
FAIL_MESSAGE = "blockfix.examples.fail.message"


# ============================================================================
# BASIC RECONSTRUCTORS
# ============================================================================

@register_reconstructor("echo", description="Logs the request and succeeds")
class EchoReconstructor(BlockReconstructor):
    """
    Succeeds without doing any work.

    Every call is appended to ``history`` as (operation, source, parity).
    """

    history: List[Tuple[str, str, str]] = []

    def process_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        logger.info(f"Echo reconstructor: source file {source_path} (parity {parity_path}, {decoder})")
        self.history.append(("process_file", source_path, parity_path))

    def process_parity_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        logger.info(f"Echo reconstructor: parity file {parity_path} (source {source_path}, {decoder})")
        self.history.append(("process_parity_file", source_path, parity_path))

    @classmethod
    def reset_history(cls) -> None:
        cls.history.clear()


@register_reconstructor("sleep", description="Sleeps before succeeding (for testing timeouts)")
class SleepReconstructor(BlockReconstructor):
    """Sleeps for blockfix.examples.sleep.seconds, then succeeds."""

    def _sleep(self) -> None:
        duration = self.conf.get_float(SLEEP_SECONDS, 1.0)
        logger.info(f"Sleeping for {duration} seconds")
        time.sleep(duration)

    def process_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._sleep()

    def process_parity_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._sleep()


@register_reconstructor("fail", description="Always fails (for testing error handling)")
class FailReconstructor(BlockReconstructor):
    """Raises on every call."""

    def _fail(self, path: str) -> None:
        message = self.conf.get(FAIL_MESSAGE, "Intentional failure for testing")
        raise RuntimeError(f"{message}: {path}")

    def process_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._fail(source_path)

    def process_parity_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._fail(parity_path)


@register_reconstructor("flaky", description="Fails at a configurable rate")
class FlakyReconstructor(BlockReconstructor):
    """
    Fails randomly at blockfix.examples.flaky.failure_rate.

    Used to exercise the FAILED path and caller-side reissue logic.
    """

    def _maybe_fail(self, path: str) -> None:
        failure_rate = self.conf.get_float(FLAKY_FAILURE_RATE, 0.2)
        if random.random() < failure_rate:
            logger.warning(f"Flaky reconstructor: random failure (rate={failure_rate}) for {path}")
            raise RuntimeError(f"Random failure (rate={failure_rate})")
        logger.info(f"Flaky reconstructor: success (rate={failure_rate}) for {path}")

    def process_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._maybe_fail(source_path)

    def process_parity_file(self, source_path: str, parity_path: str, decoder: Any) -> None:
        self._maybe_fail(parity_path)


__all__ = [
    "EchoReconstructor",
    "SleepReconstructor",
    "FailReconstructor",
    "FlakyReconstructor",
    "SLEEP_SECONDS",
    "FLAKY_FAILURE_RATE",
    "FAIL_MESSAGE",
]
