"""Error and not-found display panels."""

from datetime import date

from rich.panel import Panel
from rich.text import Text


def build_error_panel(error: str, source: str | None = None, dates: list[date] | None = None) -> Panel:
    """Build the panel shown when a train's source could not be fetched."""
    content = Text()
    content.append(f"Error: {error}\n", style="bold red")
    if source:
        content.append(f"\nSource: {source}", style="white")
    if dates:
        checked = ", ".join(day.isoformat() for day in dates)
        content.append(f"\nService dates checked: {checked}", style="dim")
    if source:
        content.append("\n\nRetrying on the next refresh; try another --source meanwhile.", style="dim")

    return Panel(
        content,
        title="[bold red]Fetch Failed[/]",
        border_style="red"
    )


def build_not_found_panel(train_id: str, source: str = "timetable") -> Panel:
    """Build the panel shown when a train resolves to no status at all."""
    content = Text()
    content.append(f"No status for Southwest Chief #{train_id}.\n\n", style="bold yellow")
    content.append("This could mean:\n", style="white")
    content.append("• No run of this train has started in the dates checked\n", style="dim")
    content.append(f"• The {source} source has no page for these dates yet\n", style="dim")
    content.append("• The source answered with something that could not be read\n", style="dim")
    content.append("\nTry another --source or a wider --lookback.", style="white")

    return Panel(
        content,
        title="[bold yellow]No Data[/]",
        border_style="yellow"
    )
