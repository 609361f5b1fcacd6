"""Single-line compact display mode."""

from datetime import datetime

from rich.text import Text

from ..models import TrainStatus
from .progress import route_progress
from .status_table import format_eta


def build_compact_display(status: TrainStatus, last_fetch_time: datetime | None = None) -> Text:
    """Build a single-line compact display for one train instance."""
    compact = Text()
    compact.append(f"🚂 Southwest Chief #{status.train_id}", style="bold")
    if status.instance_id > 1:
        compact.append(f" (run {status.instance_id})", style="dim")
    compact.append(" | ")

    if status.departed:
        compact.append(f"Arrived {status.next_station}", style="green")
    elif status.next_station:
        compact.append(f"{status.current_location or '?'}", style="green")
        compact.append("→")
        compact.append(f"{status.next_station}", style="cyan")
        compact.append(f" @ {format_eta(status)}")
        if status.timezone:
            compact.append(f" {status.timezone}")
    else:
        compact.append(f"At {status.current_location or '—'}", style="dim")

    if status.delay_minutes:
        compact.append_text(Text.from_markup(f" [red]+{status.delay_minutes}m[/]"))

    position = route_progress(status)
    if position:
        completed, total = position
        compact.append(f" | {completed / total * 100:.0f}%")

    compact.append(f" | {status.status}", style="yellow")

    if last_fetch_time:
        compact.append(f" | Updated {last_fetch_time.strftime('%H:%M:%S')}", style="dim")

    return compact
