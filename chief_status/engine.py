"""
Train status resolution: raw source payload in, TrainStatus records out.

Nothing here performs I/O or raises on bad input. A missing payload, a fetch
error, an unknown train or source, or a payload of the wrong shape all
resolve to an empty list so that one bad source never blocks the other train.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from .adapters import ADAPTERS
from .config import DEFAULT_SOURCE
from .instances import group_instances, select_next
from .models import StationInteractionRecord, TrainStatus, _now
from .progression import resolve_progression
from .route import direction_for
from .status import build_status

logger = logging.getLogger(__name__)


def is_missing(payload: Any) -> bool:
    """A payload the fetch layer could not produce, or reported as failed."""
    if payload is None:
        return True
    if isinstance(payload, dict) and "error" in payload:
        return True
    return isinstance(payload, (str, bytes)) and not payload.strip()


def parse_payload(payload: Any, train_id: str, source: str = DEFAULT_SOURCE,
                  now: datetime | None = None) -> list[StationInteractionRecord]:
    """Run the named adapter over a payload, returning [] on any failure."""
    adapter_cls = ADAPTERS.get(source)
    if adapter_cls is None:
        logger.warning("Unknown source %r (expected one of %s)", source, ", ".join(ADAPTERS))
        return []
    if is_missing(payload):
        if isinstance(payload, dict):
            logger.warning("No %s data for train #%s: %s", source, train_id, payload["error"])
        return []

    try:
        return adapter_cls(now=now).parse(payload, train_id)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Could not parse %s payload for train #%s: %s", source, train_id, e)
        return []


def resolve_records(records: Iterable[StationInteractionRecord], train_id: str,
                    reference_date: date | None = None,
                    now: datetime | None = None) -> list[TrainStatus]:
    """Group, resolve and aggregate already-parsed records for one train number."""
    now = now or _now()
    direction = direction_for(train_id)
    if direction is None:
        logger.warning("Train #%s is not a tracked train", train_id)
        return []
    reference_date = reference_date or now.date()

    statuses = []
    candidates = []
    for instance in group_instances(records, direction):
        progression = resolve_progression(instance.records, direction)
        day = reference_date
        if instance.run_id:
            try:
                day = date.fromisoformat(instance.run_id)
            except ValueError:
                pass  # source run ids are not always dates
        status = build_status(train_id, direction, instance, progression, day, now)
        statuses.append(status)
        candidates.append((instance.instance_id, progression, status.estimated_arrival))

    current = select_next(candidates)
    for status in statuses:
        status.is_next = status.instance_id == current
    return statuses


def resolve_train_status(payload: Any, train_id: str, reference_date: date | None = None,
                         source: str = DEFAULT_SOURCE,
                         now: datetime | None = None) -> list[TrainStatus]:
    """
    Resolve one raw payload into TrainStatus records for a train number.

    ``reference_date`` is the service date the payload describes; scheduled
    clock times are placed on it. ``source`` names the adapter to use.
    """
    now = now or _now()
    records = parse_payload(payload, train_id, source, now)
    if not records:
        return []
    return resolve_records(records, train_id, reference_date, now)


def resolve_runs(runs: Iterable[tuple[date, Any]], train_id: str,
                 source: str = DEFAULT_SOURCE,
                 now: datetime | None = None) -> list[TrainStatus]:
    """
    Resolve several dated payloads of the same train in one pass.

    Each payload describes the run that started on its service date; its
    records are tagged with that date so every run becomes its own instance.
    """
    now = now or _now()
    records = []
    for service_date, payload in runs:
        run_id = service_date.isoformat()
        for record in parse_payload(payload, train_id, source, now):
            records.append(record if record.run_id else replace(record, run_id=run_id))
    if not records:
        return []
    return resolve_records(records, train_id, now=now)
