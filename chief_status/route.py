"""Canonical Southwest Chief route: ordered stations per direction."""

from .config import DEFAULT_TIMEZONE, EASTBOUND, WESTBOUND

# (name, code, time zone), Chicago to Los Angeles
_WESTBOUND_STOPS = (
    ("Chicago", "CHI", "America/Chicago"),
    ("Naperville", "NPV", "America/Chicago"),
    ("Mendota", "MDT", "America/Chicago"),
    ("Princeton", "PCT", "America/Chicago"),
    ("Galesburg", "GBB", "America/Chicago"),
    ("Fort Madison", "FMG", "America/Chicago"),
    ("La Plata", "LAP", "America/Chicago"),
    ("Kansas City", "KCY", "America/Chicago"),
    ("Lawrence", "LRC", "America/Chicago"),
    ("Topeka", "TOP", "America/Chicago"),
    ("Newton", "NEW", "America/Chicago"),
    ("Hutchinson", "HUT", "America/Chicago"),
    ("Dodge City", "DDG", "America/Chicago"),
    ("Garden City", "GCK", "America/Chicago"),
    ("Lamar", "LMR", "America/Denver"),
    ("La Junta", "LAJ", "America/Denver"),
    ("Trinidad", "TRI", "America/Denver"),
    ("Raton", "RAT", "America/Denver"),
    ("Las Vegas", "LSV", "America/Denver"),
    ("Lamy", "LMY", "America/Denver"),
    ("Albuquerque", "ABQ", "America/Denver"),
    ("Gallup", "GLP", "America/Denver"),
    ("Winslow", "WLO", "America/Phoenix"),
    ("Flagstaff", "FLG", "America/Phoenix"),
    ("Kingman", "KNG", "America/Phoenix"),
    ("Needles", "NDL", "America/Los_Angeles"),
    ("Barstow", "BAR", "America/Los_Angeles"),
    ("Victorville", "VRV", "America/Los_Angeles"),
    ("San Bernardino", "SNB", "America/Los_Angeles"),
    ("Riverside", "RIV", "America/Los_Angeles"),
    ("Fullerton", "FUL", "America/Los_Angeles"),
    ("Los Angeles", "LAX", "America/Los_Angeles"),
)

WESTBOUND_ROUTE: tuple[str, ...] = tuple(name for name, _, _ in _WESTBOUND_STOPS)
EASTBOUND_ROUTE: tuple[str, ...] = tuple(reversed(WESTBOUND_ROUTE))

_ROUTES = {
    WESTBOUND: WESTBOUND_ROUTE,
    EASTBOUND: EASTBOUND_ROUTE,
}

_TRAIN_DIRECTIONS = {
    "3": WESTBOUND,
    "4": EASTBOUND,
}

_CODES = {name.lower(): code for name, code, _ in _WESTBOUND_STOPS}
_NAMES_BY_CODE = {code: name for name, code, _ in _WESTBOUND_STOPS}
_ZONES = {name.lower(): zone for name, _, zone in _WESTBOUND_STOPS}


def direction_for(train_id: str) -> str | None:
    """Direction of travel for a tracked train number, None if untracked."""
    return _TRAIN_DIRECTIONS.get(str(train_id).strip())


def stations_for(direction: str) -> tuple[str, ...]:
    """Ordered station names for a direction; empty for an unknown direction."""
    return _ROUTES.get(direction, ())


def index_of(name: str | None, direction: str) -> int | None:
    """Exact (case-insensitive) position of a canonical station name."""
    if not name:
        return None
    wanted = name.strip().lower()
    for i, station in enumerate(stations_for(direction)):
        if station.lower() == wanted:
            return i
    return None


def is_terminal(index: int | None, direction: str) -> bool:
    stations = stations_for(direction)
    return index is not None and bool(stations) and index == len(stations) - 1


def terminal_for(direction: str) -> str | None:
    stations = stations_for(direction)
    return stations[-1] if stations else None


def code_for(name: str | None) -> str | None:
    """Amtrak station code for a canonical name."""
    if not name:
        return None
    return _CODES.get(name.strip().lower())


def name_for_code(code: str | None) -> str | None:
    """Canonical station name for an Amtrak station code."""
    if not code:
        return None
    return _NAMES_BY_CODE.get(code.strip().upper())


def timezone_for(name: str | None) -> str:
    """
    IANA time zone of a station.

    Accepts source labels such as "Flagstaff, AZ": the text before the first
    comma is tried when the full label is not a canonical name.
    """
    if not name:
        return DEFAULT_TIMEZONE
    label = name.strip().lower()
    zone = _ZONES.get(label) or _ZONES.get(label.split(",")[0].strip())
    return zone or DEFAULT_TIMEZONE
