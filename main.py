"""
App Review Poller

CLI entry point: serves the review API with a background poller,
or runs a single poll cycle.
"""

import argparse
import asyncio
import logging
import sys

import httpx
import uvicorn

import config.settings as settings
from review_poller.api.web_server import create_app
from review_poller.fetchers.base import ReviewsFetcher
from review_poller.fetchers.itunes import ITunesReviewsFetcher
from review_poller.fetchers.mock import MockReviewsFetcher
from review_poller.poller import PollerService
from review_poller.repository import ReviewsRepository
from review_poller.storage.file_storage import ReviewsFileStorage
from review_poller.utils.app_config import load_app_ids, load_app_names


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_fetcher(use_mock: bool, client: httpx.AsyncClient) -> ReviewsFetcher:
    if use_mock:
        return MockReviewsFetcher(reviews_per_app=settings.MOCK_REVIEWS_PER_APP)
    return ITunesReviewsFetcher(
        client,
        country=settings.ITUNES_COUNTRY,
        user_agent=settings.USER_AGENT
    )


async def run_single_cycle(repository: ReviewsRepository, storage: ReviewsFileStorage,
                           client: httpx.AsyncClient, poll_interval: float) -> bool:
    """Load the snapshot, run one poll cycle and close the client."""
    try:
        await storage.load_state()
        return await PollerService(repository, poll_interval).run_once()
    finally:
        await client.aclose()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="App Review Poller - periodically fetch App Store reviews and serve them as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the API and poll every 5 minutes
  python main.py

  # Poll every minute using mock reviews (no network)
  python main.py --poll-interval 60 --mock

  # Run one poll cycle and exit
  python main.py --once
        """
    )

    parser.add_argument(
        "--apps-config",
        default=settings.APPS_CONFIG_PATH,
        help=f"JSON file listing the apps to poll (default: {settings.APPS_CONFIG_PATH})"
    )

    parser.add_argument(
        "--storage-path",
        default=settings.STORAGE_FILE_PATH,
        help=f"Review snapshot file (default: {settings.STORAGE_FILE_PATH})"
    )

    parser.add_argument(
        "--poll-interval",
        type=int,
        default=settings.POLL_INTERVAL_SECONDS,
        help=f"Seconds between poll cycles (default: {settings.POLL_INTERVAL_SECONDS})"
    )

    parser.add_argument("--host", default=settings.HOST, help=f"Bind address (default: {settings.HOST})")
    parser.add_argument("--port", type=int, default=settings.PORT, help=f"Bind port (default: {settings.PORT})")

    parser.add_argument(
        "--mock",
        action="store_true",
        default=settings.USE_MOCK_DATA,
        help="Generate mock reviews instead of calling the iTunes feed"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.poll_interval <= 0:
        logger.error(f"--poll-interval must be positive, got {args.poll_interval}")
        sys.exit(1)

    try:
        app_ids = load_app_ids(args.apps_config)
        app_names = load_app_names(args.apps_config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if not app_ids:
        logger.warning("No apps configured, the poller will have nothing to fetch")

    client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    storage = ReviewsFileStorage(args.storage_path)
    repository = ReviewsRepository(build_fetcher(args.mock, client), storage, app_ids)

    try:
        if args.once:
            logger.info(f"Running one poll cycle for {len(app_ids)} apps")
            ok = asyncio.run(run_single_cycle(repository, storage, client, args.poll_interval))
            sys.exit(0 if ok else 1)

        app = create_app(
            storage,
            repository=repository,
            app_ids=app_ids,
            app_names=app_names,
            poll_interval_seconds=args.poll_interval,
            http_client=client,
            default_recent_hours=settings.DEFAULT_RECENT_HOURS
        )
        logger.info(f"Serving on http://{args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Review poller failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()


# Design Rationale and Trade-offs:
#
# 1. Why run the poller inside the web app lifespan?
#    - Poller and API share one event loop and one storage instance
#    - Shutdown order is explicit: stop poller, close client, final save
#    - Trade-off: The API cannot be scaled out as separate processes
#
# 2. Why a --once mode?
#    - Lets cron or CI drive polling without a long-running server
#    - Trade-off: Exit code only reflects the cycle, not per-app failures
#
# 3. Why exit 1 on configuration errors?
#    - An empty or broken app list would otherwise poll nothing silently
