"""Header panel: refresh state and the next railcam to watch."""

from datetime import datetime

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import TrainStatus
from ..railcams import check_train_approaching, find_next_railcam


def _railcam_line(statuses: list[TrainStatus], now: datetime | None) -> Text:
    for status in statuses:
        approach = check_train_approaching(status, now)
        if approach is not None:
            return Text.from_markup(
                f"🎥 [bold magenta]Watch now:[/] {approach.railcam.station} "
                f"[dim]{approach.embed_url}[/]"
            )

    upcoming = find_next_railcam(statuses, now)
    if upcoming is None:
        return Text("🎥 No railcam ahead of any tracked run", style="dim")
    return Text.from_markup(
        f"🎥 Next railcam: [cyan]{upcoming.railcam.station}[/] "
        f"in {upcoming.minutes_away} min [dim](train #{upcoming.train_id})[/]"
    )


def build_header(
    statuses: list[TrainStatus],
    source: str,
    now: datetime | None = None,
    last_fetch_time: datetime | None = None,
    last_error: str | None = None,
    refresh_interval: int = 60,
) -> Panel:
    """Build the header panel shown above the train tables."""
    header = Table.grid(padding=(0, 2))
    header.add_column(justify="left", style="bold white")

    current = [s for s in statuses if s.is_next]
    header.add_row(Text.from_markup(f"Southwest Chief [dim]Chicago ⇄ Los Angeles · source: {source}[/]"))
    header.add_row(_railcam_line(current or statuses, now))

    if last_fetch_time:
        update_str = f"Updated: {last_fetch_time.strftime('%H:%M:%S')}"
    else:
        update_str = "Updated: —"

    status_parts = [update_str]
    if last_error:
        status_parts.append(f"[yellow]⚠ {last_error}[/]")
    status_parts.append(f"Refresh: {refresh_interval}s")
    status_parts.append("Press Ctrl+C to quit")
    subtitle = " | ".join(status_parts)

    return Panel(
        header,
        title="[bold cyan]Chief Status[/]",
        subtitle=f"[dim]{subtitle}[/]",
        border_style="cyan"
    )
