"""
iTunes reviews fetcher.

Reads the public customer-reviews RSS feed (JSON flavour) of the App Store.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from review_poller.fetchers.base import FetchError, ReviewsFetcher
from review_poller.models.review import Review, parse_timestamp

logger = logging.getLogger(__name__)

FEED_URL_TEMPLATE = (
    "https://itunes.apple.com/{country}/rss/customerreviews/"
    "id={app_id}/sortBy=mostRecent/page=1/json"
)
DEFAULT_USER_AGENT = "AppReviewPoller/1.0"


class ITunesReviewsFetcher(ReviewsFetcher):
    """
    Fetches the most recent page of reviews for an App Store app.

    The HTTP client is owned by the caller, which is responsible for closing it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        country: str = "us",
        user_agent: str = DEFAULT_USER_AGENT
    ):
        self.client = client
        self.country = country
        self.user_agent = user_agent

    async def fetch_reviews(self, app_id: str) -> List[Review]:
        url = FEED_URL_TEMPLATE.format(country=self.country, app_id=app_id)
        response = await self.client.get(url, headers={"User-Agent": self.user_agent})

        if response.status_code != 200:
            raise FetchError(f"Unexpected status code for {app_id}: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Response for {app_id} is not valid JSON: {e}") from e

        fetched_at = datetime.now(timezone.utc)
        reviews = []
        for entry in _feed_entries(payload, app_id):
            review = _parse_entry(entry, app_id, fetched_at)
            if review is not None:
                reviews.append(review)

        logger.debug(f"Parsed {len(reviews)} reviews from iTunes feed for {app_id}")
        return reviews


def _feed_entries(payload: dict, app_id: str) -> List[dict]:
    """Extract feed.entry, which the feed emits as a list, a single object, or not at all."""
    if not isinstance(payload, dict) or not isinstance(payload.get("feed"), dict):
        raise FetchError(f"Response for {app_id} has no 'feed' object")

    entries = payload["feed"].get("entry")
    if entries is None:
        return []
    if isinstance(entries, dict):
        return [entries]
    if isinstance(entries, list):
        return entries

    raise FetchError(f"Unexpected 'entry' type for {app_id}: {type(entries).__name__}")


def _parse_entry(entry: dict, app_id: str, fetched_at: datetime) -> Optional[Review]:
    # App metadata entries carry no rating
    if "im:rating" not in entry:
        return None

    try:
        return Review(
            id=_label(entry["id"]),
            app_id=app_id,
            author=_label(entry["author"]["name"]),
            content=_label(entry["content"]),
            rating=int(_label(entry["im:rating"])),
            submitted_at=parse_timestamp(_label(entry["updated"])),
            fetched_at=fetched_at
        )
    except (KeyError, TypeError, ValueError) as e:
        raise FetchError(f"Malformed review entry for {app_id}: {e}") from e


def _label(node: dict) -> str:
    return node["label"]
