"""Split a train number's records into concurrently tracked runs."""

from collections.abc import Iterable, Sequence
from datetime import datetime

from .matching import resolve
from .models import StationInteractionRecord, TrainInstance
from .progression import Progression, ProgressionState
from .route import stations_for


def group_instances(records: Iterable[StationInteractionRecord], direction: str) -> list[TrainInstance]:
    """
    Group ordered records into TrainInstances, numbered from 1 in encounter order.

    Records tagged with source run ids are grouped by run id. Untagged records
    belong to the current instance while their route positions keep moving
    forward; a record that falls back behind the furthest position seen (a
    restart towards the origin) opens a new instance. Records that do not
    match the route stay with the current instance.
    """
    route = stations_for(direction)
    instances: list[TrainInstance] = []
    furthest: int | None = None

    for record in records:
        current = instances[-1] if instances else None
        position = resolve(record.label, route)

        if current is None:
            starts_new = True
        elif record.run_id is not None or current.run_id is not None:
            starts_new = record.run_id != current.run_id
        else:
            starts_new = position is not None and furthest is not None and position < furthest

        if starts_new:
            current = TrainInstance(instance_id=len(instances) + 1, run_id=record.run_id)
            instances.append(current)
            furthest = None

        current.records.append(record)
        if position is not None and (furthest is None or position > furthest):
            furthest = position

    return instances


def select_next(candidates: Sequence[tuple[int, Progression, datetime | None]]) -> int | None:
    """
    Pick the operationally current instance of a train number.

    ``candidates`` holds (instance_id, progression, estimated_arrival) in
    creation order. The EN_ROUTE instance arriving soonest wins (an EN_ROUTE
    instance without an estimate ranks after those with one); with nothing
    EN_ROUTE the most recently created instance is current.
    """
    if not candidates:
        return None

    en_route = [c for c in candidates if c[1].state is ProgressionState.EN_ROUTE]
    if not en_route:
        return candidates[-1][0]

    timed = [c for c in en_route if c[2] is not None]
    if timed:
        return min(timed, key=lambda c: c[2])[0]
    return en_route[0][0]
