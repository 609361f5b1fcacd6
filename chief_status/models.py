"""Record types shared by the engine, plus pure time helpers."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_CLOCK_RE = re.compile(r"(\d{1,2}):?(\d{2})\s*([AP])M?\b", re.IGNORECASE)


def _now() -> datetime:
    """Current UTC time. Extracted for test patching."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StationInteractionRecord:
    """One row of source evidence about a station on a run."""
    name: str
    code: str | None = None
    scheduled: str = ""  # scheduled time text, e.g. "225P" or "2:25P"
    actual: str = ""  # actual time/status text, empty until the train gets there
    run_id: str | None = None
    arrival: datetime | None = None  # upstream arrival estimate, when the source has one
    source_next: bool = False  # the source claims this is the next station

    @property
    def has_data(self) -> bool:
        return bool(self.actual and self.actual.strip())

    @property
    def label(self) -> str:
        return self.name or self.code or ""


@dataclass
class TrainInstance:
    """Records believed to belong to one physical run of a train number."""
    instance_id: int
    records: list[StationInteractionRecord] = field(default_factory=list)
    run_id: str | None = None


@dataclass
class TrainStatus:
    """Resolved status of one train instance."""
    train_id: str
    direction: str
    last_updated: datetime
    status: str = "On time"
    current_location: str | None = None
    next_station: str | None = None
    estimated_arrival: datetime | None = None
    delay_minutes: int | None = None
    departed: bool = False
    timezone: str | None = None
    instance_id: int = 1
    is_next: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the public camelCase field names."""
        return {
            "trainId": self.train_id,
            "direction": self.direction,
            "lastUpdated": self.last_updated.isoformat(),
            "currentLocation": self.current_location,
            "nextStation": self.next_station,
            "estimatedArrival": self.estimated_arrival.isoformat() if self.estimated_arrival else None,
            "status": self.status,
            "delayMinutes": self.delay_minutes,
            "departed": self.departed,
            "timezone": self.timezone,
            "instanceId": self.instance_id,
            "isNext": self.is_next,
        }


def parse_clock(text: str | None) -> tuple[int, int] | None:
    """
    Parse timetable clock text into a 24-hour (hour, minute) pair.

    Handles the compact forms used by the timetable page ("225P", "1205A")
    as well as "2:25P" and "2:25 PM".
    """
    if not text:
        return None
    match = _CLOCK_RE.search(text)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    if hour > 12 or minute > 59:
        return None
    am_pm = match.group(3).upper()
    if am_pm == "P" and hour < 12:
        hour += 12
    elif am_pm == "A" and hour == 12:
        hour = 0
    return hour, minute


def format_clock(dt: datetime) -> str:
    """Format a datetime the way the timetable page writes times ("2:25P")."""
    return dt.strftime("%I:%M").lstrip("0") + ("A" if dt.hour < 12 else "P")


def parse_epoch(value: Any) -> datetime | None:
    """Parse an epoch value in seconds (or milliseconds) to an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if seconds <= 0:
        return None
    if seconds > 1e11:  # milliseconds
        seconds /= 1000
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_time(time_val: Any) -> datetime | None:
    """
    Parse an ISO 8601 string or epoch value from a JSON source.

    Always returns an aware datetime: ISO strings without an offset are read
    as UTC, like the feeds' "Z" timestamps.
    """
    if time_val is None:
        return None
    if isinstance(time_val, (int, float)):
        return parse_epoch(time_val)
    if not isinstance(time_val, str) or not time_val.strip():
        return None
    if time_val.strip().isdigit():
        return parse_epoch(time_val.strip())
    try:
        parsed = datetime.fromisoformat(time_val.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_time(dt: datetime | None) -> str:
    """Format datetime for display."""
    if not dt:
        return "—"
    return dt.strftime("%I:%M %p").lstrip("0")
