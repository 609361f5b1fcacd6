"""Tolerant station-name matching against the canonical route."""

from collections.abc import Sequence


def _head(label: str) -> str:
    """Text before the first comma ("las vegas, nm" -> "las vegas")."""
    return label.split(",")[0].strip()


def matches(raw_label: str | None, candidate: str) -> bool:
    """
    Check whether a raw source label refers to a canonical station.

    Both sides are lower-cased; they match when either contains the other or
    when their text before the first comma is equal. This absorbs state
    suffixes ("Gallup, NM"), station codes ("Gallup (GLP)") and similar noise.
    """
    if not raw_label or not raw_label.strip():
        return False
    label = raw_label.strip().lower()
    station = candidate.strip().lower()
    return (
        station in label
        or label in station
        or _head(label) == _head(station)
    )


def resolve(raw_label: str | None, route: Sequence[str]) -> int | None:
    """Index of the first route station matching raw_label, None if nothing does."""
    for i, station in enumerate(route):
        if matches(raw_label, station):
            return i
    return None
