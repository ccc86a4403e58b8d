"""Periodic trigger for outcome evaluation passes."""

import asyncio
import logging

from quantdesk.services.evaluation_runner import BatchCounters, EvaluationBatchRunner

logger = logging.getLogger(__name__)


class EvaluationScheduler:
    """Run an evaluation pass every ``interval_seconds`` in the background.

    Passes never overlap within one process: the next pass starts only after
    the previous one finished and the interval elapsed.
    """

    def __init__(self, runner: EvaluationBatchRunner, interval_seconds: float = 3600.0):
        self._runner = runner
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None
        self.last_result: BatchCounters | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Evaluation scheduler started (every {self.interval_seconds:.0f}s)")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Evaluation scheduler stopped")

    async def _loop(self) -> None:
        while True:
            try:
                self.last_result = await self._runner.evaluate_batch()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Scheduled evaluation pass failed: {e}")
            await asyncio.sleep(self.interval_seconds)
