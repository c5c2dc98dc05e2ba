"""
Shared fixtures for the review poller test suite.
"""

from datetime import datetime, timezone

import pytest

from review_poller.models.review import Review


@pytest.fixture
def make_review():
    """Factory for Review objects with sensible defaults."""
    def _make(review_id="r1", app_id="app1", rating=5,
              submitted_at=None, content="Great app", author="Test User"):
        return Review(
            id=review_id,
            app_id=app_id,
            author=author,
            content=content,
            rating=rating,
            submitted_at=submitted_at or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
            fetched_at=datetime(2024, 6, 2, 8, 30, tzinfo=timezone.utc)
        )
    return _make
