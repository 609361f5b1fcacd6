"""Notification system: snapshot diffing and cross-platform system alerts."""

import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime

from .models import TrainStatus
from .railcams import check_train_approaching, describe


@dataclass
class Change:
    """Something worth telling the user about between two resolution passes."""
    train_id: str
    kind: str  # "next_station", "arrived" or "approaching"
    title: str
    message: str


@dataclass
class NotificationState:
    """Caller-held memory of what has already been announced."""
    previous: list[TrainStatus] = field(default_factory=list)
    announced: set[tuple[str, str, str]] = field(default_factory=set)
    initialized: bool = False


def _current_by_train(statuses: list[TrainStatus]) -> dict[str, TrainStatus]:
    return {s.train_id: s for s in statuses if s.is_next}


def diff_snapshots(previous: list[TrainStatus], current: list[TrainStatus]) -> list[Change]:
    """
    Compare the isNext instance of each train across two passes.

    Reports a next-station change while the train is under way, and a single
    arrival once its run completes at the terminal.
    """
    before = _current_by_train(previous)
    changes = []

    for train_id, now_status in sorted(_current_by_train(current).items()):
        old = before.get(train_id)
        if old is None or not now_status.next_station:
            continue

        if now_status.departed and not old.departed:
            changes.append(Change(
                train_id, "arrived",
                f"🚂 Southwest Chief #{train_id} Arrived",
                f"Arrived at {now_status.next_station}",
            ))
        elif not now_status.departed and now_status.next_station != old.next_station:
            left = now_status.current_location or old.next_station or "the last stop"
            changes.append(Change(
                train_id, "next_station",
                f"🚂 Southwest Chief #{train_id} Departed",
                f"Left {left}, next stop {now_status.next_station}",
            ))

    return changes


def send_notification(title: str, message: str) -> bool:
    """
    Send a system notification with fallback to terminal bell.
    Returns True if system notification was sent, False if fell back to bell.
    """
    try:
        if sys.platform == "darwin":
            subprocess.run(
                ["osascript", "-e", f'display notification "{message}" with title "{title}"'],
                check=True,
                capture_output=True,
                timeout=5
            )
            return True
        elif sys.platform.startswith("linux"):
            subprocess.run(
                ["notify-send", "-a", "Chief Status", title, message],
                check=True,
                capture_output=True,
                timeout=5
            )
            return True
        elif sys.platform == "win32":
            ps_script = f'''
            Add-Type -AssemblyName System.Windows.Forms
            $balloon = New-Object System.Windows.Forms.NotifyIcon
            $balloon.Icon = [System.Drawing.SystemIcons]::Information
            $balloon.BalloonTipTitle = "{title}"
            $balloon.BalloonTipText = "{message}"
            $balloon.Visible = $true
            $balloon.ShowBalloonTip(5000)
            '''
            subprocess.run(
                ["powershell", "-Command", ps_script],
                check=True,
                capture_output=True,
                timeout=5
            )
            return True
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        pass

    print("\a", end="", flush=True)
    return False


def check_and_notify(current: list[TrainStatus], state: NotificationState,
                     now: datetime | None = None) -> list[Change]:
    """
    Announce changes since the last pass, plus railcam approaches.

    The first pass only records a baseline so that nothing that happened
    before the tracker started is announced. Each railcam approach is
    announced once per train, instance and station.
    """
    if not state.initialized:
        state.previous = list(current)
        state.initialized = True
        for status in current:
            approach = check_train_approaching(status, now)
            if approach is not None:
                state.announced.add((status.train_id, str(status.instance_id), approach.railcam.station))
        return []

    changes = diff_snapshots(state.previous, current)

    for status in current:
        approach = check_train_approaching(status, now)
        if approach is None:
            continue
        key = (status.train_id, str(status.instance_id), approach.railcam.station)
        if key in state.announced:
            continue
        state.announced.add(key)
        changes.append(Change(
            status.train_id, "approaching",
            f"🎥 Train #{status.train_id} Approaching {approach.railcam.station}",
            describe(status, approach),
        ))

    for change in changes:
        send_notification(change.title, change.message)

    state.previous = list(current)
    return changes
