"""Assemble TrainStatus records from resolver output and source timing text."""

import re
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from .models import StationInteractionRecord, TrainInstance, TrainStatus, parse_clock
from .progression import Progression, ProgressionState
from .route import timezone_for

_HOURS_MINUTES_RE = re.compile(r"(\d+)\s+hours?(?:,?\s+(\d+)\s+minutes?)?\s+late", re.IGNORECASE)
_HR_MIN_RE = re.compile(r"(\d+)\s*hrs?\.?(?:\s*(\d+)\s*min\.?)?\s*late", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s+min(?:ute)?s?\.?\s+late", re.IGNORECASE)
_EARLY_RE = re.compile(r"\bearly\b", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*(\d+)\s*(?:min(?:ute)?s?\.?)?\s*$", re.IGNORECASE)


def parse_delay(text: str | None) -> int | None:
    """
    Minutes late stated in a delay or status text.

    Returns None when the text states no lateness ("On time", "5 minutes
    early", empty). A bare leading integer ("55") is read as minutes late.
    """
    if not text:
        return None
    match = _HOURS_MINUTES_RE.search(text) or _HR_MIN_RE.search(text)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2) or 0)
    match = _MINUTES_RE.search(text)
    if match:
        return int(match.group(1))
    match = _LEADING_INT_RE.match(text)
    if match:
        return int(match.group(1))
    return None


def is_early(text: str | None) -> bool:
    return bool(text and _EARLY_RE.search(text))


def _delay_evidence(records: Sequence[StationInteractionRecord], last_position: int | None) -> tuple[int | None, bool]:
    """Delay from the most recent record that states one, scanning back from the last data."""
    if last_position is None:
        return None, False
    for record in reversed(records[:last_position + 1]):
        if not record.has_data:
            continue
        delay = parse_delay(record.actual)
        if delay is not None:
            return delay, False
        if is_early(record.actual) or "on time" in record.actual.lower():
            return None, is_early(record.actual)
    return None, False


def scheduled_datetimes(records: Sequence[StationInteractionRecord], reference_date: date) -> list[datetime | None]:
    """
    Place each record's scheduled clock time on the calendar.

    The first scheduled stop is placed on ``reference_date`` in its station's
    time zone; later stops roll forward a day whenever the clock would go
    backwards, since a run never moves back in time.
    """
    placed: list[datetime | None] = []
    previous: datetime | None = None
    for record in records:
        clock = parse_clock(record.scheduled)
        if clock is None:
            placed.append(None)
            continue
        zone = ZoneInfo(timezone_for(record.label))
        day = previous.astimezone(zone).date() if previous else reference_date
        when = datetime(day.year, day.month, day.day, clock[0], clock[1], tzinfo=zone)
        while previous is not None and when < previous:
            when += timedelta(days=1)
        placed.append(when)
        previous = when
    return placed


def _estimated_arrival(
    instance: TrainInstance,
    progression: Progression,
    reference_date: date,
    delay: int | None,
) -> datetime | None:
    target = progression.next_record
    if target is None:
        return None
    if target.arrival is not None:
        return target.arrival

    schedule = scheduled_datetimes(instance.records, reference_date)
    for record, when in zip(instance.records, schedule):
        if record is target:
            if when is None:
                return None
            return when + timedelta(minutes=delay or 0)
    return None


def _status_text(delay: int | None, early: bool) -> str:
    if delay and delay > 0:
        return f"Delayed {delay} min"
    if early:
        return "Early"
    return "On time"


def build_status(
    train_id: str,
    direction: str,
    instance: TrainInstance,
    progression: Progression,
    reference_date: date,
    now: datetime,
) -> TrainStatus:
    """Combine one instance's progression with its delay and timing evidence."""
    delay, early = _delay_evidence(instance.records, progression.last_position)
    delay = delay if delay and delay > 0 else None

    estimated = None
    if progression.state in (ProgressionState.EN_ROUTE, ProgressionState.AT_TERMINAL):
        estimated = _estimated_arrival(instance, progression, reference_date, delay)

    tz_name = None
    if progression.next_station:
        zone = ZoneInfo(timezone_for(progression.next_station))
        tz_name = (estimated or now).astimezone(zone).tzname()

    current_location = None
    if progression.last_record is not None:
        current_location = progression.last_record.label

    return TrainStatus(
        train_id=train_id,
        direction=direction,
        last_updated=now,
        status=_status_text(delay, early),
        current_location=current_location,
        next_station=progression.next_station,
        estimated_arrival=estimated,
        delay_minutes=delay,
        departed=progression.departed,
        timezone=tz_name,
        instance_id=instance.instance_id,
    )
