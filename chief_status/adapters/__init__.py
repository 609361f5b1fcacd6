"""Source adapters: one per upstream data shape."""

from .base import SourceAdapter
from .mapfeed import MapFeedAdapter
from .timetable import TimetableAdapter
from .transit import TransitApiAdapter

# Selected by name by the caller; the engine never inspects payload types.
ADAPTERS: dict[str, type[SourceAdapter]] = {
    TimetableAdapter.name: TimetableAdapter,
    TransitApiAdapter.name: TransitApiAdapter,
    MapFeedAdapter.name: MapFeedAdapter,
}

__all__ = [
    "ADAPTERS",
    "SourceAdapter",
    "TimetableAdapter",
    "TransitApiAdapter",
    "MapFeedAdapter",
]
