"""Configuration constants and dataclass for chief-status."""

from dataclasses import dataclass, field
from datetime import date

# Tracked trains: Southwest Chief #3 runs Chicago -> Los Angeles, #4 the reverse
TRAIN_IDS = ("3", "4")
WESTBOUND = "westbound"
EASTBOUND = "eastbound"

# Upstream sources
TIMETABLE_URL = "https://dixielandsoftware.net/cgi-bin/gettrain.pl"
TRANSIT_API_URL = "https://asm-backend.transitdocs.com/train"
MAP_FEED_URL = "https://maps.amtrak.com/services/MapDataService/trains/getTrainsData"
SOURCES = ("timetable", "transit", "map")
DEFAULT_SOURCE = "timetable"

# Fetch behaviour
REFRESH_INTERVAL = 60  # seconds
MAX_RETRIES = 3
RETRY_DELAY = 2  # seconds
CACHE_MAX_AGE = 300  # seconds
LOOKBACK_DAYS = 2  # two days ago, yesterday and today

# Stations without a known zone are assumed to be on Mountain time
DEFAULT_TIMEZONE = "America/Denver"

# Railcam windows (in minutes)
APPROACH_WINDOW_MINUTES = 30
POST_ARRIVAL_WINDOW_MINUTES = 30


@dataclass
class Config:
    """Runtime configuration built from CLI arguments."""
    train_ids: list[str] = field(default_factory=lambda: list(TRAIN_IDS))
    source: str = DEFAULT_SOURCE
    service_date: date | None = None
    lookback_days: int = LOOKBACK_DAYS
    refresh_interval: int = REFRESH_INTERVAL
    compact_mode: bool = False
    json_output: bool = False
    notify: bool = False
    verbose: bool = False
