"""Adapter for the Amtrak map feed (GeoJSON of all active trains)."""

import json
import logging
from typing import Any

from ..models import StationInteractionRecord, parse_time
from ..route import name_for_code
from .base import SourceAdapter

logger = logging.getLogger(__name__)


def _delay_minutes(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(str(value).strip()))
    except ValueError:
        return None


class MapFeedAdapter(SourceAdapter):
    """
    Extracts already-summarized fields from the map feed.

    The feed has no per-station history: each feature for the train number
    yields the station of its last event (carrying the status text and delay)
    followed by the station the feed names as next. Lowest-fidelity source.
    """

    name = "map"

    def parse(self, payload: Any, train_id: str) -> list[StationInteractionRecord]:
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError:
                logger.warning("Map feed payload is not JSON")
                return []

        if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
            logger.warning("Map feed payload has no feature collection")
            return []

        records = []
        runs = 0
        for feature in payload["features"]:
            props = feature.get("properties") if isinstance(feature, dict) else None
            if not isinstance(props, dict):
                continue
            if str(props.get("TrainNum", "")).strip() != str(train_id):
                continue

            runs += 1
            run_id = str(props.get("ID") or props.get("TrainID") or f"{train_id}-{runs}")

            event_code = (props.get("EventCode") or "").strip().upper() or None
            if event_code:
                status_msg = (props.get("StatusMsg") or "").strip()
                delay = _delay_minutes(props.get("Delay"))
                delay_text = f"{delay} minutes late" if delay and delay > 0 else ""
                records.append(StationInteractionRecord(
                    name=name_for_code(event_code) or props.get("EventName") or event_code,
                    code=event_code,
                    actual=" ".join(filter(None, [status_msg, delay_text])) or "Reported",
                    run_id=run_id,
                ))

            next_name = (props.get("NextStnName") or "").strip()
            if next_name:
                next_code = (props.get("NextStnCode") or "").strip().upper() or None
                records.append(StationInteractionRecord(
                    name=next_name,
                    code=next_code,
                    run_id=run_id,
                    arrival=parse_time(props.get("ETA")),
                    source_next=True,
                ))

        if not runs:
            logger.info("Train #%s not present in map feed", train_id)
        return records
