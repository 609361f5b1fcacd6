"""Decide where a train instance is headed from its last station with data."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .matching import matches, resolve
from .models import StationInteractionRecord
from .route import stations_for

logger = logging.getLogger(__name__)


class ProgressionState(Enum):
    NO_DATA = "no_data"
    AT_TERMINAL = "at_terminal"
    EN_ROUTE = "en_route"
    STALE_OR_UNKNOWN = "stale_or_unknown"


@dataclass
class Progression:
    """
    Resolver output for one instance.

    ``next_station`` is the value that gets reported. ``source_next_station``
    is what the upstream source itself claimed, kept for diagnostics only.
    """
    state: ProgressionState
    next_station: str | None = None
    departed: bool = False
    last_record: StationInteractionRecord | None = None
    last_position: int | None = None  # index into the instance's records
    route_index: int | None = None
    next_record: StationInteractionRecord | None = None
    source_next_station: str | None = None


def last_record_with_data(records: Sequence[StationInteractionRecord]) -> int | None:
    """Position of the last record carrying actual time or status text."""
    for i in range(len(records) - 1, -1, -1):
        if records[i].has_data:
            return i
    return None


def _source_claim(records: Sequence[StationInteractionRecord], last_position: int | None) -> str | None:
    """The next station according to the source: an explicit claim, else the first pending row."""
    for record in records:
        if record.source_next:
            return record.label
    start = 0 if last_position is None else last_position + 1
    for record in records[start:]:
        if not record.has_data:
            return record.label
    return None


def _find_record(records: Sequence[StationInteractionRecord], station: str, start: int) -> StationInteractionRecord | None:
    for record in records[start:]:
        if matches(record.label, station):
            return record
    return None


def resolve_progression(records: Sequence[StationInteractionRecord], direction: str) -> Progression:
    """
    Resolve the next station of one instance against the canonical route.

    States:
      NO_DATA           no record has actual data yet
      AT_TERMINAL       last data is at the route's terminal; the run is complete
      EN_ROUTE          last data is at route[i]; next station is route[i + 1]
      STALE_OR_UNKNOWN  last data names a station that is not on the route
    """
    route = stations_for(direction)
    last_position = last_record_with_data(records)
    source_next = _source_claim(records, last_position)

    if last_position is None:
        return Progression(state=ProgressionState.NO_DATA, source_next_station=source_next)

    last = records[last_position]
    label = last.label

    # Arrival evidence at the terminal completes the run even without a departure
    if route and matches(label, route[-1]):
        return Progression(
            state=ProgressionState.AT_TERMINAL,
            next_station=label,
            departed=True,
            last_record=last,
            last_position=last_position,
            route_index=len(route) - 1,
            next_record=last,
            source_next_station=source_next,
        )

    index = resolve(label, route)
    if index is None:
        logger.info("Station %r is not on the %s route", label, direction)
        return Progression(
            state=ProgressionState.STALE_OR_UNKNOWN,
            last_record=last,
            last_position=last_position,
            source_next_station=source_next,
        )

    next_station = route[index + 1]
    if source_next and not matches(source_next, next_station):
        logger.debug(
            "Source claims next station %r after %r; route says %r",
            source_next, label, next_station,
        )

    return Progression(
        state=ProgressionState.EN_ROUTE,
        next_station=next_station,
        departed=False,
        last_record=last,
        last_position=last_position,
        route_index=index,
        next_record=_find_record(records, next_station, last_position + 1),
        source_next_station=source_next,
    )
