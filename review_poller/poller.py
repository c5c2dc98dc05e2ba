"""
Poller Service.

Drives repeated repository poll cycles on a fixed interval until cancelled.
"""

import asyncio
import logging

from review_poller.repository import ReviewsRepository

logger = logging.getLogger(__name__)


class PollerService:
    """
    Runs update cycles back to back: update, wait the poll interval, repeat.

    Cycles never overlap. An unexpected error in one cycle is logged and the
    next cycle still runs; only cancellation stops the loop.
    """

    def __init__(self, repository: ReviewsRepository, poll_interval_seconds: float):
        """
        Initialize poller.

        Args:
            repository: Repository whose update_reviews() runs each cycle
            poll_interval_seconds: Wait between the end of one cycle and the next

        Raises:
            ValueError: If the interval is not positive
        """
        if poll_interval_seconds <= 0:
            raise ValueError(f"Poll interval must be positive, got {poll_interval_seconds}")

        self.repository = repository
        self.poll_interval_seconds = poll_interval_seconds
        self.cycles_completed = 0

    async def start(self) -> None:
        """
        Poll until cancelled. The first cycle runs immediately.

        Raises:
            asyncio.CancelledError: Always, once the poller is cancelled
        """
        logger.info(f"Starting poller service (interval={self.poll_interval_seconds}s)...")
        try:
            while True:
                await self.run_once()
                await asyncio.sleep(self.poll_interval_seconds)
        except asyncio.CancelledError:
            logger.info("Polling service was cancelled.")
            raise
        finally:
            logger.info("Polling service stopped.")

    async def run_once(self) -> bool:
        """
        Run a single poll cycle.

        Returns:
            True if the cycle completed, False if it failed and was abandoned
        """
        try:
            await self.repository.update_reviews()
        except asyncio.CancelledError:
            if asyncio.current_task().cancelling():
                raise
            logger.error("Poll cycle was aborted without a cancel request, retrying next interval")
            return False
        except Exception as e:
            logger.error(f"Poll cycle failed, retrying next interval: {e}", exc_info=True)
            return False

        self.cycles_completed += 1
        return True


def launch_poller(poller: PollerService) -> asyncio.Task:
    """Start the poller as a background task on the running event loop."""
    return asyncio.create_task(poller.start(), name="review-poller")


async def stop_poller(task: asyncio.Task) -> None:
    """
    Cancel the poller task and wait for it to finish.

    The task's own cancellation is the expected outcome and is not re-raised.
    If the caller itself is being cancelled, that cancellation still propagates.
    """
    if task.done():
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Poller task had already failed: {task.exception()}")
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise
    logger.info("Poller task joined.")
