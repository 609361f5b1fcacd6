"""Route progress bar display."""

from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn

from ..matching import resolve
from ..models import TrainStatus
from ..route import stations_for


def route_progress(status: TrainStatus) -> tuple[int, int] | None:
    """(stops completed, total stops) along the canonical route, None if unknown."""
    route = stations_for(status.direction)
    if not route or not status.next_station:
        return None
    index = resolve(status.next_station, route)
    if index is None:
        return None
    total = len(route) - 1
    completed = total if status.departed else index
    return completed, total


def build_progress_bar(status: TrainStatus) -> Panel:
    """Build a visual progress bar for one run along the route."""
    route = stations_for(status.direction)
    position = route_progress(status)

    if position is None:
        return Panel("No position yet", title="Progress")

    completed, total = position
    progress = Progress(
        TextColumn("[bold blue]{task.fields[origin]}"),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TextColumn("[bold blue]{task.fields[dest]}"),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
    )

    progress.add_task(
        "journey",
        total=total,
        completed=completed,
        origin=route[0][:15],
        dest=route[-1][:15]
    )

    return Panel(progress, title=f"[bold]#{status.train_id} Progress[/]", border_style="blue")
