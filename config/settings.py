"""
Configuration settings for the review poller.

Centralized configuration for polling, storage, fetching and the HTTP API.
Every value can be overridden from the environment (or a local .env file).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = PROJECT_ROOT / "data"

# Apps to poll
APPS_CONFIG_PATH = os.getenv("APPS_CONFIG_PATH", str(PROJECT_ROOT / "config" / "apps.json"))

# Storage
STORAGE_FILE_PATH = os.getenv("STORAGE_FILE_PATH", str(DATA_ROOT / "reviews.json"))

# Polling
POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", "300"))

# Fetching
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
ITUNES_COUNTRY = os.getenv("ITUNES_COUNTRY", "us")
USER_AGENT = "AppReviewPoller/1.0"
USE_MOCK_DATA = _env_bool("USE_MOCK_DATA", False)  # Set to True to run without network access
MOCK_REVIEWS_PER_APP = 20

# API
DEFAULT_RECENT_HOURS = 48
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "review_poller.log"


# Design Rationale and Trade-offs:
#
# 1. Why module constants with environment overrides?
#    - Single source of truth, readable defaults next to their names
#    - Deployment can change paths and intervals without editing code
#    - Trade-off: Values are read once at import, no live reload
#
# 2. Why a fixed poll interval instead of adaptive polling?
#    - The feed only exposes the most recent page, so a stable cadence is enough
#    - Trade-off: Busy apps may lose reviews that scroll off between polls
