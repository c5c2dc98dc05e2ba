"""
Review data model.

Represents one customer review as fetched from the upstream review feed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Review:
    """
    Immutable review record exchanged between fetchers, storage and the API.

    Identity for deduplication is `id` alone.
    """
    id: str  # Provider-assigned review identifier
    app_id: str  # Store identifier of the reviewed app
    author: str
    content: str
    rating: int  # 1-5 star rating
    submitted_at: datetime  # When the user submitted the review (UTC)
    fetched_at: datetime  # When we ingested the review (UTC)

    def __post_init__(self):
        # Validate rating
        if not (1 <= self.rating <= 5):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 1-5")

        # Frozen dataclass, so normalize through object.__setattr__
        object.__setattr__(self, "submitted_at", as_utc(self.submitted_at))
        object.__setattr__(self, "fetched_at", as_utc(self.fetched_at))

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        """Create Review from JSON dict."""
        return cls(
            id=str(data["id"]),
            app_id=str(data["app_id"]),
            author=data.get("author", ""),
            content=data.get("content", ""),
            rating=int(data["rating"]),
            submitted_at=parse_timestamp(data["submitted_at"]),
            fetched_at=parse_timestamp(data["fetched_at"])
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "app_id": self.app_id,
            "author": self.author,
            "content": self.content,
            "rating": self.rating,
            "submitted_at": format_timestamp(self.submitted_at),
            "fetched_at": format_timestamp(self.fetched_at)
        }


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with a trailing 'Z'."""
    return as_utc(value).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts both 'Z' and numeric offsets (e.g. '-07:00' as used by the iTunes feed).

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    return as_utc(datetime.fromisoformat(text))


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if not isinstance(value, datetime):
        raise ValueError(f"Expected datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
