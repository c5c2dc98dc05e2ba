"""
Storage contract for reviews.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from review_poller.models.review import Review


class ReviewsStorage(ABC):
    """
    Keyed store of reviews (by review id, last write wins) with snapshot load/save.
    """

    @abstractmethod
    def save_reviews(self, reviews: List[Review]) -> None:
        """Insert or overwrite each review by id."""

    @abstractmethod
    def get_all_reviews(self) -> List[Review]:
        """Return a copy of all stored reviews, in no particular order."""

    @abstractmethod
    def get_recent_reviews(self, app_id: Optional[str], since: datetime) -> List[Review]:
        """Return reviews submitted at or after `since`, optionally for one app only."""

    def count(self) -> int:
        """Number of stored reviews."""
        return len(self.get_all_reviews())

    @abstractmethod
    async def load_state(self) -> None:
        """Populate the store from the persisted snapshot, if any."""

    @abstractmethod
    async def save_state(self) -> None:
        """Persist the full store as one snapshot."""
