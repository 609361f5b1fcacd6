"""Shared test fixtures and helpers for chief-status tests."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

from rich.console import Console

from chief_status.models import StationInteractionRecord, TrainStatus


# =============================================================================
# Constants
# =============================================================================


# A fixed "now" for deterministic time-based tests: 4:00 PM CDT / 3:00 PM MDT
FIXED_NOW = datetime(2025, 3, 15, 21, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Test data helpers
# =============================================================================


def make_record(
    name="Test Station",
    code=None,
    scheduled="",
    actual="",
    run_id=None,
    arrival=None,
    source_next=False,
):
    """Build a StationInteractionRecord."""
    return StationInteractionRecord(
        name=name,
        code=code,
        scheduled=scheduled,
        actual=actual,
        run_id=run_id,
        arrival=arrival,
        source_next=source_next,
    )


def make_status(
    train_id="3",
    direction="westbound",
    next_station="Mendota",
    current_location="Naperville, IL",
    estimated_arrival=None,
    status="On time",
    delay_minutes=None,
    departed=False,
    timezone_name="CDT",
    instance_id=1,
    is_next=True,
):
    """Build a TrainStatus as the engine would emit it."""
    return TrainStatus(
        train_id=train_id,
        direction=direction,
        last_updated=FIXED_NOW,
        status=status,
        current_location=current_location,
        next_station=next_station,
        estimated_arrival=estimated_arrival,
        delay_minutes=delay_minutes,
        departed=departed,
        timezone=timezone_name,
        instance_id=instance_id,
        is_next=is_next,
    )


def make_timetable_html(rows, container_id="m1", train_id="3"):
    """
    Build a timetable status page.

    ``rows`` holds (station label, schedule cell, actual cell) triples, e.g.
    ("Chicago, IL (CHI)", "Dp 3:00P", "Dp 3:05P 5 minutes late.").
    """
    body = "\n".join(
        f"<tr><td>{label}</td><td>{scheduled}</td><td>{actual}</td></tr>"
        for label, scheduled, actual in rows
    )
    return f"""<html>
<head><title>Train {train_id} status</title></head>
<body>
<div id="banner">Amtrak Status Maps Archive</div>
<div id="{container_id}">
<table>
<tr><th>Station</th><th>Schedule</th><th>Actual</th></tr>
{body}
</table>
</div>
</body>
</html>"""


def ts(dt: datetime) -> int:
    """Convert datetime to Unix timestamp in seconds (transit API format)."""
    return int(dt.timestamp())


def make_transit_station(name, code=None, sched_arr=None, sched_dep=None, arr=None, dep=None):
    """Build one entry of a transit API ``stations`` list from datetimes."""
    station = {"name": name, "code": code}
    for key, value in (
        ("sched_arr_timestamp", sched_arr),
        ("sched_dep_timestamp", sched_dep),
        ("arr_timestamp", arr),
        ("dep_timestamp", dep),
    ):
        if value is not None:
            station[key] = ts(value)
    return station


def make_transit_payload(stations, delay_minutes=None, train_id="3"):
    """Build a transit API train document."""
    payload = {"train_number": train_id, "railroad": "AMTRAK", "stations": stations}
    if delay_minutes is not None:
        payload["delay_minutes"] = delay_minutes
    return payload


def make_map_feature(
    train_num="3",
    run_id=None,
    event_code="NDL",
    status_msg="",
    delay=None,
    next_name="Barstow",
    next_code="BAR",
    eta=None,
):
    """Build one map feed feature for a running train."""
    props = {
        "TrainNum": train_num,
        "EventCode": event_code,
        "StatusMsg": status_msg,
        "NextStnName": next_name,
        "NextStnCode": next_code,
    }
    if run_id is not None:
        props["ID"] = run_id
    if delay is not None:
        props["Delay"] = delay
    if eta is not None:
        props["ETA"] = eta
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0, 0]}, "properties": props}


def make_map_feed(features):
    """Build a map feed feature collection."""
    return {"type": "FeatureCollection", "features": features}


def sample_westbound_rows():
    """Train #3 out of Chicago, departed Naperville, Mendota pending."""
    return [
        ("Chicago, IL (CHI)", "Dp 3:00P", "Dp 3:05P 5 minutes late."),
        ("Naperville, IL (NPV)", "Dp 3:28P", "Dp 3:35P 7 minutes late."),
        ("Mendota, IL (MDT)", "Dp 4:44P", ""),
        ("Princeton, IL (PCT)", "Dp 5:05P", ""),
        ("Galesburg, IL (GBB)", "Dp 5:57P", ""),
    ]


def render_to_text(renderable, width=120, height=None) -> str:
    """Capture a Rich renderable as plain text for assertion."""
    console = Console(record=True, width=width, height=height, force_terminal=False)
    console.print(renderable)
    return console.export_text()


def load_fixture(name: str):
    """Load a fixture file from tests/fixtures/: JSON decoded, anything else as text."""
    fixture_path = Path(__file__).parent / "fixtures" / name
    with open(fixture_path, encoding="utf-8") as f:
        if fixture_path.suffix == ".json":
            return json.load(f)
        return f.read()


def make_mock_httpx_client(json_response=None, text=None):
    """Create a mock httpx.Client whose .get() answers with the given JSON or text."""
    mock_response = MagicMock()
    mock_response.json.return_value = json_response
    mock_response.text = text if text is not None else json.dumps(json_response)
    mock_response.raise_for_status.return_value = None
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    mock_client.get.return_value = mock_response
    return mock_client


def minutes_from_now(minutes: float) -> datetime:
    return FIXED_NOW + timedelta(minutes=minutes)
