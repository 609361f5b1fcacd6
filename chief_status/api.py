"""Fetching, caching, and retry logic for the upstream train status sources."""

import logging
from datetime import date, datetime, timedelta
from time import sleep
from typing import Any

import httpx

from .config import (
    CACHE_MAX_AGE,
    MAP_FEED_URL,
    MAX_RETRIES,
    RETRY_DELAY,
    TIMETABLE_URL,
    TRANSIT_API_URL,
)
from .models import _now

logger = logging.getLogger(__name__)

# The timetable site intermittently answers with this page instead of the data
AUTH_NOTICE = "You don't have the necessary authorization"


class FetchCache:
    """Last good payload per (source, train, date), plus the last fetch error."""

    def __init__(self):
        self.last_error: str | None = None
        self.entries: dict[tuple[str, str, str], dict[str, Any]] = {}

    def store(self, key: tuple[str, str, str], payload: Any) -> None:
        self.entries[key] = {"payload": payload, "fetch_time": _now()}
        self.last_error = None

    def recent(self, key: tuple[str, str, str]) -> Any | None:
        """Cached payload for key if it is younger than CACHE_MAX_AGE."""
        entry = self.entries.get(key)
        if not entry:
            return None
        age = (_now() - entry["fetch_time"]).total_seconds()
        if age < CACHE_MAX_AGE:
            return entry["payload"]
        return None


def timetable_url(train_id: str, day: date) -> str:
    """Timetable page URL for one service date of a train."""
    return (
        f"{TIMETABLE_URL}?seltrain={train_id}"
        f"&selyear={day.year}&selmonth={day.month:02d}&selday={day.day:02d}"
    )


def transit_api_url(train_id: str, day: date) -> str:
    """Transit API URL for one service date of a train."""
    return f"{TRANSIT_API_URL}/{day:%Y/%m/%d}/AMTRAK/{train_id}?points=true"


def _request(source: str, train_id: str, day: date) -> Any:
    """Perform one GET and decode the body for the given source."""
    if source == "timetable":
        url = timetable_url(train_id, day)
    elif source == "transit":
        url = transit_api_url(train_id, day)
    else:
        url = MAP_FEED_URL

    with httpx.Client(timeout=10.0) as client:
        response = client.get(url)
        response.raise_for_status()
        if source == "timetable":
            return response.text
        return response.json()


def fetch_payload(source: str, train_id: str, day: date, cache: FetchCache) -> Any:
    """
    Fetch the raw payload for a train and service date with retry logic.

    Returns the page text (timetable) or decoded JSON (transit, map). When
    every attempt fails, returns the cached payload if it is recent enough,
    otherwise ``{"error": message}``.
    """
    key = (source, str(train_id), day.isoformat())
    error_msg = "No data"

    for attempt in range(MAX_RETRIES):
        try:
            payload = _request(source, train_id, day)
        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}"
        except httpx.HTTPError as e:
            error_msg = str(e) or type(e).__name__
        except ValueError as e:
            # Body was not valid JSON
            error_msg = f"Invalid response: {e}"
        else:
            if source == "timetable" and AUTH_NOTICE in payload:
                error_msg = "Timetable site refused the request"
            else:
                cache.store(key, payload)
                return payload

        logger.debug("Fetch %s #%s %s failed (attempt %d): %s", source, train_id, day, attempt + 1, error_msg)
        if attempt < MAX_RETRIES - 1:
            sleep(RETRY_DELAY * (attempt + 1))

    cached = cache.recent(key)
    if cached is not None:
        cache.last_error = f"{error_msg} (using cached data)"
        return cached

    logger.warning("Fetch %s #%s %s failed: %s", source, train_id, day, error_msg)
    cache.last_error = error_msg
    return {"error": error_msg}


def fetch_runs(source: str, train_id: str, days: list[date], cache: FetchCache) -> list[tuple[date, Any]]:
    """Fetch one payload per service date, oldest first."""
    if source == "map":
        # The map feed is a single live snapshot covering every running train
        today = days[-1] if days else _now().date()
        return [(today, fetch_payload(source, train_id, today, cache))]
    return [(day, fetch_payload(source, train_id, day, cache)) for day in days]


def service_dates(today: date, lookback_days: int) -> list[date]:
    """Service dates to check, oldest first: lookback_days ago through today."""
    return [today - timedelta(days=n) for n in range(lookback_days, -1, -1)]


def last_fetch_time(cache: FetchCache) -> datetime | None:
    """Most recent successful fetch across all cached payloads."""
    times = [entry["fetch_time"] for entry in cache.entries.values()]
    return max(times) if times else None
