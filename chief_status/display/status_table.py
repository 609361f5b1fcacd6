"""Per-train status table: one row per tracked instance."""

from datetime import datetime
from zoneinfo import ZoneInfo

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import TrainStatus, format_time
from ..railcams import check_train_approaching, railcam_for
from ..route import direction_for, stations_for, timezone_for


def get_status_style(status: TrainStatus) -> tuple[str, str]:
    """Return (style, icon) for a status row."""
    if status.departed:
        return "green", "✓"
    if status.next_station is None:
        return "dim", "?"
    if status.delay_minutes:
        return "red", "●"
    if status.status == "Early":
        return "green", "●"
    return "cyan", "○"


def format_eta(status: TrainStatus) -> str:
    """ETA in the local time of the next station."""
    if status.estimated_arrival is None:
        return "—"
    local = status.estimated_arrival
    if status.next_station:
        local = local.astimezone(ZoneInfo(timezone_for(status.next_station)))
    return format_time(local)


def _railcam_cell(status: TrainStatus, now: datetime | None) -> Text:
    approach = check_train_approaching(status, now)
    if approach is not None:
        if approach.minutes_away >= 0:
            return Text(f"🎥 live in {approach.minutes_away}m", style="bold magenta")
        return Text("🎥 live now", style="bold magenta")
    if railcam_for(status.next_station):
        return Text("🎥", style="dim")
    return Text("")


def build_status_table(train_id: str, statuses: list[TrainStatus], now: datetime | None = None) -> Panel:
    """Build the status panel for one train number."""
    direction = direction_for(train_id) or "unknown"
    route = stations_for(direction)
    span = f"{route[0]} → {route[-1]}" if route else ""

    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
        expand=True,
    )

    table.add_column("", width=2, justify="center")
    table.add_column("Run", width=4, justify="center")
    table.add_column("Location", min_width=16)
    table.add_column("Next Station", min_width=16)
    table.add_column("ETA", width=10, justify="center")
    table.add_column("Status", width=16, justify="center")
    table.add_column("TZ", width=5, justify="center")
    table.add_column("Railcam", width=14, justify="center")

    for status in statuses:
        style, icon = get_status_style(status)

        if status.departed:
            next_text = Text(f"{status.next_station} (arrived)", style="green")
        elif status.next_station:
            next_text = Text(status.next_station, style="bold cyan" if status.is_next else "cyan")
        else:
            next_text = Text("Unresolved", style="dim italic")

        table.add_row(
            Text("▶" if status.is_next else "", style="bold yellow"),
            Text(str(status.instance_id), style=style),
            Text(status.current_location or "—"),
            next_text,
            format_eta(status),
            Text(f"{icon} {status.status}", style=style),
            status.timezone or "",
            _railcam_cell(status, now),
        )

    return Panel(
        table,
        title=f"[bold cyan]🚂 Southwest Chief #{train_id}[/] [dim]{direction} · {span}[/]",
        border_style="cyan",
    )
