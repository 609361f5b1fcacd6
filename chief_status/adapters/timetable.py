"""Adapter for the dixielandsoftware.net timetable page."""

import logging
import re
from typing import Any

from bs4 import BeautifulSoup

from ..models import StationInteractionRecord
from .base import SourceAdapter

logger = logging.getLogger(__name__)

RESULTS_CONTAINER_ID = "m1"

_CODE_RE = re.compile(r"\(([A-Z]{3})\)\s*$")
_SCHEDULED_RE = re.compile(r"\b(Ar|Dp)\s*(\d{1,2}:?\d{2}\s*[AP])")


def _cell_text(cell) -> str:
    """Visible text of a cell with whitespace collapsed."""
    return " ".join(cell.get_text(" ").split())


def split_station_label(text: str) -> tuple[str, str | None]:
    """Split "Chicago, IL (CHI)" into ("Chicago, IL", "CHI")."""
    match = _CODE_RE.search(text)
    if not match:
        return text.strip(), None
    return text[:match.start()].strip(), match.group(1)


def extract_scheduled_time(text: str) -> str:
    """
    Pull the scheduled time out of a schedule cell.

    The cell marks times with "Ar" (arrival) and "Dp" (departure). The arrival
    time is preferred because it is what estimated arrivals are built from;
    origin stations only have a departure time.
    """
    found = {marker: time.replace(" ", "") for marker, time in _SCHEDULED_RE.findall(text)}
    return found.get("Ar") or found.get("Dp") or ""


class TimetableAdapter(SourceAdapter):
    """Parses the per-date status page: one table row per station, in route order."""

    name = "timetable"

    def parse(self, payload: Any, train_id: str) -> list[StationInteractionRecord]:
        if not payload or not isinstance(payload, (str, bytes)):
            return []

        soup = BeautifulSoup(payload, "html.parser")
        container = soup.find(id=RESULTS_CONTAINER_ID)
        if container is None:
            div_ids = [div.get("id") for div in soup.find_all("div", id=True)]
            logger.warning(
                "No results container #%s for train #%s (page divs: %s)",
                RESULTS_CONTAINER_ID, train_id, ", ".join(div_ids) or "none",
            )
            return []

        records = []
        rows = container.find_all("tr")
        # First row is the column header
        for row in rows[1:]:
            cells = row.find_all("td")
            if len(cells) < 3:
                continue

            name, code = split_station_label(_cell_text(cells[0]))
            if not name and not code:
                continue

            records.append(StationInteractionRecord(
                name=name,
                code=code,
                scheduled=extract_scheduled_time(_cell_text(cells[1])),
                actual=_cell_text(cells[2]),
            ))

        logger.debug("Parsed %d timetable rows for train #%s", len(records), train_id)
        return records
