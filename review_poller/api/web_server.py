"""
FastAPI Web Application - Review Viewer
=======================================

JSON API over the review store, plus a small viewer page.
The poller runs inside the application lifespan.
"""

import html
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from review_poller.models.review import format_timestamp
from review_poller.poller import PollerService, launch_poller, stop_poller
from review_poller.repository import ReviewsRepository
from review_poller.storage.base import ReviewsStorage

logger = logging.getLogger(__name__)

DEFAULT_RECENT_HOURS = 48


def create_app(
    storage: ReviewsStorage,
    repository: Optional[ReviewsRepository] = None,
    app_ids: Iterable[str] = (),
    app_names: Optional[Dict[str, str]] = None,
    poll_interval_seconds: Optional[float] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    default_recent_hours: int = DEFAULT_RECENT_HOURS,
    lifecycle: bool = True
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        storage: Review store served by the API
        repository: Repository to poll; without it (or an interval) no poller runs
        app_ids: Configured app ids (listed under their own id unless named)
        app_names: Configured app id -> display name
        poll_interval_seconds: Poll interval for the background poller
        http_client: Client used by the fetcher, closed on shutdown
        default_recent_hours: Window used when the request omits `hours`
        lifecycle: Load/save the snapshot and run the poller in the app lifespan
    """
    app_names = {**{app_id: app_id for app_id in app_ids}, **(app_names or {})}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not lifecycle:
            yield
            return

        poller_task = None
        await storage.load_state()
        if repository is not None:
            initial_count = len(repository.get_all_reviews())
        else:
            initial_count = storage.count()
        logger.info(f"Initial number of reviews is: {initial_count}")

        if repository is not None and poll_interval_seconds:
            poller = PollerService(repository, poll_interval_seconds)
            poller_task = launch_poller(poller)

        yield

        if poller_task is not None:
            await stop_poller(poller_task)
        # Close the client only after polling is done
        if http_client is not None:
            await http_client.aclose()
        try:
            await storage.save_state()
        except Exception as e:
            logger.error(f"Final save on shutdown failed: {e}")

    app = FastAPI(title="App Review Poller", description="App Store review feed viewer", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Request {request.url.path} could not be finished: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/api/reviews")
    def get_recent_reviews(app_id: Optional[str] = None, hours: Optional[str] = None):
        if app_id is None:
            logger.error("Missing app_id in request")
            raise HTTPException(status_code=400, detail="app_id query parameter is required")

        window_hours = default_recent_hours
        if hours is not None:
            try:
                window_hours = int(hours)
            except ValueError:
                window_hours = -1
            if window_hours < 0:
                logger.error(f"Parameter hours is not a non-negative integer: {hours!r}")
                raise HTTPException(status_code=400, detail="hours must be a non-negative integer")

        since = datetime.now(timezone.utc) - timedelta(hours=window_hours)
        reviews = storage.get_recent_reviews(app_id, since)
        return [review.to_dict() for review in reviews]

    @app.get("/api/health")
    def health_check():
        return {
            "status": "healthy",
            "timestamp": format_timestamp(datetime.now(timezone.utc)),
            "total_reviews": storage.count()
        }

    @app.get("/api/apps")
    def list_apps():
        return [{"id": app_id, "name": name} for app_id, name in sorted(app_names.items())]

    @app.get("/", response_class=HTMLResponse)
    def index():
        options = "\n".join(
            f'<option value="{html.escape(app_id)}">{html.escape(name)}</option>'
            for app_id, name in sorted(app_names.items(), key=lambda item: item[1])
        )
        return INDEX_HTML.replace("{{APP_OPTIONS}}", options)

    return app


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>App Store Reviews Viewer</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, sans-serif; margin: 0; background: #f5f5f7; color: #1d1d1f; }
        header { display: flex; justify-content: space-between; align-items: center; padding: 16px 32px; background: #fff; border-bottom: 1px solid #ddd; }
        main { max-width: 820px; margin: 24px auto; padding: 0 16px; }
        .review { background: #fff; border-radius: 10px; padding: 16px; margin-bottom: 12px; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }
        .meta { color: #6e6e73; font-size: 13px; margin-bottom: 8px; }
        .stars { color: #ff9500; }
        .empty, .error { text-align: center; color: #6e6e73; padding: 32px; }
        .auto-refresh { text-align: center; font-size: 12px; color: #6e6e73; }
    </style>
</head>
<body>
    <header>
        <h1>App Store Reviews Viewer</h1>
        <label>Select App:
            <select id="app-selector" onchange="loadReviews(this.value)">
{{APP_OPTIONS}}
            </select>
        </label>
    </header>
    <main>
        <div id="reviews-list"><div class="empty">Loading reviews...</div></div>
        <div class="auto-refresh">Auto-refreshing every 5 minutes</div>
    </main>
    <script>
        function escapeHtml(text) {
            const div = document.createElement("div");
            div.textContent = text;
            return div.innerHTML;
        }

        async function loadReviews(appId) {
            const list = document.getElementById("reviews-list");
            if (!appId) {
                list.innerHTML = '<div class="empty">No apps configured</div>';
                return;
            }
            try {
                const response = await fetch(`/api/reviews?app_id=${encodeURIComponent(appId)}&hours=48`);
                if (!response.ok) throw new Error(await response.text());
                const reviews = await response.json();
                if (reviews.length === 0) {
                    list.innerHTML = '<div class="empty">No reviews in the last 48 hours</div>';
                    return;
                }
                list.innerHTML = reviews.map(r => `
                    <div class="review">
                        <div class="meta">
                            <span class="stars">${"★".repeat(r.rating)}${"☆".repeat(5 - r.rating)}</span>
                            ${escapeHtml(r.author)} &middot; ${new Date(r.submitted_at).toLocaleString()}
                        </div>
                        <div>${escapeHtml(r.content)}</div>
                    </div>`).join("");
            } catch (err) {
                list.innerHTML = `<div class="error">Failed to load reviews: ${escapeHtml(String(err))}</div>`;
            }
        }

        const selector = document.getElementById("app-selector");
        loadReviews(selector.value);
        setInterval(() => loadReviews(selector.value), 5 * 60 * 1000);
    </script>
</body>
</html>
"""
