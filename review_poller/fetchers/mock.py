"""
Mock reviews fetcher.

Generates synthetic reviews so the poller can run without network access.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

from review_poller.fetchers.base import ReviewsFetcher
from review_poller.models.review import Review

logger = logging.getLogger(__name__)

# (content, rating) templates modelled on typical App Store reviews
TEMPLATES = [
    ("App crashes every time I open the camera.", 1),
    ("Latest update broke notifications, please fix.", 2),
    ("Keeps logging me out after the update.", 1),
    ("Too many ads between posts.", 2),
    ("Decent app but the feed loads slowly.", 3),
    ("Please add a dark mode schedule option.", 4),
    ("Would love an option to hide read messages.", 4),
    ("Works great, use it every day!", 5),
    ("Love the new design, very clean.", 5),
    ("Good app, occasional sync issues.", 3),
]


class MockReviewsFetcher(ReviewsFetcher):
    """
    Deterministic fetcher for demos and offline runs.

    Review ids are derived from the app id and a template index, so polling
    the same app twice overwrites the same records instead of adding new ones.
    """

    def __init__(self, reviews_per_app: int = 20):
        self.reviews_per_app = reviews_per_app
        logger.info(f"Initialized MockReviewsFetcher ({reviews_per_app} reviews per app)")

    async def fetch_reviews(self, app_id: str) -> List[Review]:
        now = datetime.now(timezone.utc)
        # Vary the starting template per app so apps don't look identical
        app_seed = sum(ord(c) for c in app_id)

        reviews = []
        for i in range(self.reviews_per_app):
            content, rating = TEMPLATES[(i + app_seed) % len(TEMPLATES)]
            reviews.append(Review(
                id=f"mock-{app_id}-{i}",
                app_id=app_id,
                author=f"user_{i}",
                content=content,
                rating=rating,
                # Spread reviews over the last few days, newest first
                submitted_at=now - timedelta(hours=6 * i),
                fetched_at=now
            ))

        logger.debug(f"Generated {len(reviews)} mock reviews for {app_id}")
        return reviews
