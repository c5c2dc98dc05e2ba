"""
Fetch capability contract.
"""

from abc import ABC, abstractmethod
from typing import List

from review_poller.models.review import Review


class FetchError(Exception):
    """Raised when the review provider returns an unusable response."""


class ReviewsFetcher(ABC):
    """
    Retrieves the current reviews for one app from an upstream provider.

    Implementations do not retry; a failed call raises and the caller
    decides what to do with it.
    """

    @abstractmethod
    async def fetch_reviews(self, app_id: str) -> List[Review]:
        """
        Fetch reviews for a single app.

        Args:
            app_id: Store identifier of the app

        Returns:
            List of Review objects stamped with the fetch time

        Raises:
            FetchError: If the provider response cannot be used
        """
