"""
File-backed review storage.

Keeps all reviews in memory and persists them as a single JSON snapshot file.
"""

import asyncio
import json
import logging
import os
import threading
from datetime import datetime
from typing import Dict, List, Optional

from review_poller.models.review import Review, as_utc
from review_poller.storage.base import ReviewsStorage

logger = logging.getLogger(__name__)


class ReviewsFileStorage(ReviewsStorage):
    """
    Concurrency-safe review store backed by a JSON snapshot file.

    Handles:
    - Upserts from concurrent fetch tasks (and API reads from worker threads)
    - One-time snapshot load at startup
    - Atomic snapshot writes (temp file + rename)
    """

    def __init__(self, storage_file_path: str):
        """
        Initialize storage and create the snapshot directory if needed.

        Args:
            storage_file_path: Path of the JSON snapshot (e.g., data/reviews.json)
        """
        self.storage_file_path = storage_file_path
        self.temp_file_path = f"{storage_file_path}.tmp"

        self._reviews: Dict[str, Review] = {}  # review id -> Review
        self._lock = threading.Lock()

        parent_dir = os.path.dirname(storage_file_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)
            logger.info(f"Storage directory ready: {parent_dir}")
        else:
            logger.info("Storage path is a bare file name, no directory to create")

    def save_reviews(self, reviews: List[Review]) -> None:
        with self._lock:
            for review in reviews:
                self._reviews[review.id] = review

    def get_all_reviews(self) -> List[Review]:
        with self._lock:
            return list(self._reviews.values())

    def get_recent_reviews(self, app_id: Optional[str], since: datetime) -> List[Review]:
        """
        Filter stored reviews by submission time and, optionally, app.

        Args:
            app_id: Only return reviews for this app (None for all apps)
            since: Inclusive lower bound on submitted_at

        Returns:
            Matching reviews, newest first. Empty list if nothing matches.
        """
        since = as_utc(since)
        recent = [
            review for review in self.get_all_reviews()
            if review.submitted_at >= since
            and (app_id is None or review.app_id == app_id)
        ]
        recent.sort(key=lambda r: r.submitted_at, reverse=True)
        return recent

    def count(self) -> int:
        """Number of stored reviews."""
        with self._lock:
            return len(self._reviews)

    async def load_state(self) -> None:
        """
        Load the snapshot into memory.

        A missing file is not an error (first run). A corrupt file is logged
        and the store starts empty.
        """
        if not os.path.exists(self.storage_file_path):
            logger.info(f"No snapshot found at {self.storage_file_path}, starting with empty storage")
            return

        try:
            data = await asyncio.to_thread(self._read_snapshot)
            if not isinstance(data, list):
                raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
            reviews = [Review.from_dict(item) for item in data]
        except Exception as e:
            logger.error(f"Failed to load reviews from {self.storage_file_path}: {e}", exc_info=True)
            with self._lock:
                self._reviews = {}
            return

        with self._lock:
            self._reviews = {}
            for review in reviews:
                self._reviews[review.id] = review

        logger.info(f"Loaded {len(reviews)} reviews from {self.storage_file_path}")

    async def save_state(self) -> None:
        """
        Persist all reviews with the atomic write pattern.

        Raises:
            OSError: If the snapshot could not be written or renamed into place
        """
        data = [review.to_dict() for review in self.get_all_reviews()]

        try:
            await asyncio.to_thread(self._write_snapshot, data)
        except Exception as e:
            logger.error(
                f"CRITICAL: Failed to persist reviews to {self.storage_file_path}: {e}. "
                "Updates since the last successful save are not durable."
            )
            raise

        logger.info(f"Persisted {len(data)} reviews to {self.storage_file_path}")

    def _read_snapshot(self):
        with open(self.storage_file_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_snapshot(self, data: List[dict]) -> None:
        # Atomic write: write to temp file, then rename
        try:
            with open(self.temp_file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())

            # May fail across filesystem boundaries
            os.replace(self.temp_file_path, self.storage_file_path)
        except Exception:
            if os.path.exists(self.temp_file_path):
                os.remove(self.temp_file_path)
            raise
