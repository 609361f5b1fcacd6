"""Railcam stations along the route and train-approach prediction."""

from dataclasses import dataclass
from datetime import datetime
from urllib.parse import parse_qs, urlparse

from .config import APPROACH_WINDOW_MINUTES, POST_ARRIVAL_WINDOW_MINUTES
from .matching import matches
from .models import TrainStatus, _now


@dataclass(frozen=True)
class Railcam:
    station: str
    link: str
    description: str = ""


RAILCAMS = (
    Railcam("Fullerton", "https://railstream.net/live-cameras/item/fullerton-guest"),
    Railcam("Barstow", "https://www.youtube.com/watch?v=_DUQnPjPC_8", "Harvey House Railroad Depot"),
    Railcam("Needles", "https://www.youtube.com/watch?v=sg3kp4pn9fU"),
    Railcam("Kingman", "https://www.youtube.com/watch?v=h8-J3JGU7g4"),
    Railcam("Flagstaff", "https://www.youtube.com/watch?v=7xdHH9KMSVk", "Amtrak Station"),
    Railcam("Winslow", "https://www.youtube.com/watch?v=NzOG3U9LZMw"),
    Railcam("Gallup", "https://www.youtube.com/watch?v=hbmeqWdDLjk"),
    Railcam("Las Vegas", "https://www.youtube.com/watch?v=BgmZJ-NUqiY"),
    Railcam("Lawrence", "https://www.youtube.com/watch?v=PAU2JtU4WCo"),
    Railcam("Kansas City", "https://www.youtube.com/watch?v=u6UbwlQQ3QU", "Union Station"),
    Railcam("La Plata", "https://www.youtube.com/watch?v=X-ir2KfXMX0"),
    Railcam("Fort Madison", "https://www.youtube.com/watch?v=L6eG4ahJc_Q"),
    Railcam("Galesburg", "https://www.youtube.com/watch?v=On1MRt0NqFs"),
    Railcam("Mendota", "https://www.youtube.com/watch?v=UE63jwH4XSs"),
)


@dataclass
class Approach:
    """A train heading for (or just past) a railcam station."""
    railcam: Railcam
    train_id: str
    instance_id: int
    eta: datetime
    minutes_away: int

    @property
    def embed_url(self) -> str:
        return youtube_embed_url(self.railcam.link)


def railcam_for(station: str | None) -> Railcam | None:
    """The railcam at a station, matched exactly first and then fuzzily."""
    if not station:
        return None
    wanted = station.strip().lower()
    for cam in RAILCAMS:
        if cam.station.lower() == wanted:
            return cam
    for cam in RAILCAMS:
        if matches(station, cam.station):
            return cam
    return None


def youtube_embed_url(link: str) -> str:
    """
    Convert a YouTube watch or live link into an autoplaying embed link.

    Links that are not YouTube (railstream.net pages) are returned unchanged.
    """
    if "youtube.com/watch" in link:
        video_id = parse_qs(urlparse(link).query).get("v", [""])[0]
        return f"https://www.youtube.com/embed/{video_id}?autoplay=1"
    if "youtube.com/live" in link:
        video_id = urlparse(link).path.rstrip("/").split("/")[-1]
        return f"https://www.youtube.com/embed/{video_id}?autoplay=1"
    return link


def minutes_until(eta: datetime, now: datetime) -> int:
    """Whole minutes from now until eta, negative once it has passed."""
    return int((eta - now).total_seconds() // 60)


def check_train_approaching(status: TrainStatus, now: datetime | None = None) -> Approach | None:
    """
    Whether a train is within the railcam window of its next station.

    The window opens APPROACH_WINDOW_MINUTES before the estimated arrival and
    closes POST_ARRIVAL_WINDOW_MINUTES after it.
    """
    if not status.next_station or not status.estimated_arrival:
        return None
    cam = railcam_for(status.next_station)
    if cam is None:
        return None

    now = now or _now()
    minutes_away = minutes_until(status.estimated_arrival, now)
    if -POST_ARRIVAL_WINDOW_MINUTES <= minutes_away <= APPROACH_WINDOW_MINUTES:
        return Approach(cam, status.train_id, status.instance_id, status.estimated_arrival, minutes_away)
    return None


def find_next_railcam(statuses: list[TrainStatus], now: datetime | None = None) -> Approach | None:
    """The closest upcoming railcam arrival among all instances, if any."""
    now = now or _now()
    upcoming = []
    for status in statuses:
        if not status.next_station or not status.estimated_arrival:
            continue
        cam = railcam_for(status.next_station)
        if cam is None:
            continue
        minutes_away = max(minutes_until(status.estimated_arrival, now), 0)
        upcoming.append(Approach(cam, status.train_id, status.instance_id, status.estimated_arrival, minutes_away))

    if not upcoming:
        return None
    return min(upcoming, key=lambda a: a.minutes_away)


def describe(status: TrainStatus, approach: Approach | None) -> str:
    """Human-readable one-line summary of where a train is."""
    if approach is not None:
        if approach.minutes_away >= 0:
            return (
                f"Train #{status.train_id} is approaching {approach.railcam.station} "
                f"and will arrive in approximately {approach.minutes_away} minutes."
            )
        return (
            f"Train #{status.train_id} arrived at {approach.railcam.station} "
            f"approximately {abs(approach.minutes_away)} minutes ago."
        )
    if status.current_location and status.next_station:
        return (
            f"Train #{status.train_id} is currently at {status.current_location} "
            f"and heading to {status.next_station}."
        )
    return f"Train #{status.train_id} status: {status.status}"
