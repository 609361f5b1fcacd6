"""Common shape of a source adapter."""

from datetime import datetime
from typing import Any

from ..models import StationInteractionRecord, _now


class SourceAdapter:
    """
    Turns one raw upstream payload into ordered StationInteractionRecords.

    Subclasses implement parse(). Adapters never raise for a payload that
    lacks the expected structure; they return an empty list instead.
    """

    name = "base"

    def __init__(self, now: datetime | None = None):
        self.now = now or _now()

    def parse(self, payload: Any, train_id: str) -> list[StationInteractionRecord]:
        raise NotImplementedError
