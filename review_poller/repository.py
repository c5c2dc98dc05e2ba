"""
Reviews Repository.

Runs one poll cycle: concurrent fetch for every configured app, then a single
snapshot flush.
"""

import asyncio
import logging
import time
from typing import Iterable, List

from review_poller.fetchers.base import ReviewsFetcher
from review_poller.models.review import Review
from review_poller.storage.base import ReviewsStorage

logger = logging.getLogger(__name__)


class ReviewsRepository:
    """
    Coordinates fetchers and storage for the configured set of apps.

    Per-app failures are contained: one app's provider error never stops the
    other apps from being fetched and stored, or the cycle from being flushed.
    """

    def __init__(
        self,
        fetcher: ReviewsFetcher,
        storage: ReviewsStorage,
        app_ids: Iterable[str]
    ):
        """
        Initialize repository.

        Args:
            fetcher: Fetch capability used for every app
            storage: Review store receiving the fetched reviews
            app_ids: App identifiers to poll (duplicates are dropped)
        """
        self.fetcher = fetcher
        self.storage = storage
        self.app_ids = frozenset(app_ids)

    async def update_reviews(self) -> None:
        """
        Fetch reviews for all apps concurrently, then persist one snapshot.

        Raises:
            asyncio.CancelledError: If the cycle is cancelled from outside
            OSError: If the end-of-cycle snapshot could not be written
        """
        logger.info(f"Updating reviews for {len(self.app_ids)} apps...")
        start_time = time.monotonic()

        app_ids = sorted(self.app_ids)
        tasks = [
            asyncio.create_task(self._update_app(app_id), name=f"fetch-{app_id}")
            for app_id in app_ids
        ]

        # Cancelling this coroutine cancels the children; a child ending on its own never aborts siblings
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for app_id, result in zip(app_ids, results):
            if isinstance(result, BaseException):
                logger.error(f"Fetch task for {app_id} ended abnormally: {result!r}")

        await self.storage.save_state()

        elapsed = time.monotonic() - start_time
        logger.info(f"Review update complete in {elapsed:.2f}s")

    async def _update_app(self, app_id: str) -> None:
        try:
            logger.debug(f"Fetching reviews for {app_id}")
            reviews = await self.fetcher.fetch_reviews(app_id)
            self.storage.save_reviews(reviews)
            logger.info(f"Stored {len(reviews)} reviews for {app_id}")
        except asyncio.CancelledError:
            if asyncio.current_task().cancelling():
                logger.debug(f"Review fetch cancelled for {app_id}")
                raise
            # Raised by the fetch itself, not a cancel request: a failure of this app only
            logger.error(f"Fetch for {app_id} was aborted without a cancel request")
        except Exception as e:
            logger.error(f"Failed to fetch reviews for {app_id}: {e}", exc_info=True)

    def get_all_reviews(self) -> List[Review]:
        return self.storage.get_all_reviews()


# Design Rationale and Trade-offs:
#
# 1. Why one task per app instead of sequential fetches?
#    - Cycle time is bounded by the slowest app, not the sum of all apps
#    - Trade-off: No rate limiting against the provider
#
# 2. Why upsert per app but save once per cycle?
#    - One disk write per poll interval regardless of app count
#    - Trade-off: A crash mid-cycle loses that cycle's upserts until the next save
#
# 3. Why tell self-raised CancelledError apart from a cancel request?
#    - Only a cancel of the cycle itself may stop siblings and skip the flush
