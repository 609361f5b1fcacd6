"""Adapter for the TransitDocs JSON train API."""

import json
import logging
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..models import StationInteractionRecord, format_clock, parse_epoch
from ..route import timezone_for
from .base import SourceAdapter

logger = logging.getLogger(__name__)


def _delay_text(minutes: int | None) -> str:
    if minutes is None:
        return ""
    if minutes > 0:
        return f"{minutes} minutes late"
    if minutes < 0:
        return f"{-minutes} minutes early"
    return "On time"


def _station_delay(actual: datetime | None, scheduled: datetime | None) -> int | None:
    if not actual or not scheduled:
        return None
    return int((actual - scheduled).total_seconds() // 60)


class TransitApiAdapter(SourceAdapter):
    """
    Parses a TransitDocs train document.

    Each entry of ``stations`` may carry ``arr_timestamp`` / ``dep_timestamp``
    (epoch seconds, actual for past events and estimated for future ones) and
    optionally ``sched_arr_timestamp`` / ``sched_dep_timestamp``. A station is
    departed once its departure lies in the past; the source's own next station
    is the first one whose arrival lies in the future.
    """

    name = "transit"

    def parse(self, payload: Any, train_id: str) -> list[StationInteractionRecord]:
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError:
                logger.warning("Transit API payload for train #%s is not JSON", train_id)
                return []

        if not isinstance(payload, dict):
            return []
        stations = payload.get("stations")
        if not isinstance(stations, list) or not stations:
            logger.warning("Transit API payload for train #%s has no stations", train_id)
            return []

        train_delay = payload.get("delay_minutes")
        if not isinstance(train_delay, (int, float)) or isinstance(train_delay, bool):
            train_delay = None

        records = []
        next_claimed = False
        for station in stations:
            if not isinstance(station, dict):
                continue
            name = station.get("name") or ""
            code = station.get("code") or None
            if not name and not code:
                continue

            zone = ZoneInfo(timezone_for(name))
            arr = parse_epoch(station.get("arr_timestamp"))
            dep = parse_epoch(station.get("dep_timestamp"))
            sch_arr = parse_epoch(station.get("sched_arr_timestamp"))
            sch_dep = parse_epoch(station.get("sched_dep_timestamp"))

            scheduled_at = sch_arr or sch_dep
            scheduled = format_clock(scheduled_at.astimezone(zone)) if scheduled_at else ""

            actual = ""
            delay = None
            if dep and dep < self.now:
                actual = f"Dp {format_clock(dep.astimezone(zone))}"
                delay = _station_delay(dep, sch_dep)
            elif arr and arr < self.now:
                actual = f"Ar {format_clock(arr.astimezone(zone))}"
                delay = _station_delay(arr, sch_arr)
            if actual:
                if delay is None and train_delay is not None:
                    delay = int(train_delay)
                actual = " ".join(filter(None, [actual, _delay_text(delay)]))

            source_next = False
            if not next_claimed and arr and arr > self.now:
                source_next = next_claimed = True

            records.append(StationInteractionRecord(
                name=name or code,
                code=code.upper() if code else None,
                scheduled=scheduled,
                actual=actual,
                arrival=arr if arr and arr > self.now else None,
                source_next=source_next,
            ))

        return records
