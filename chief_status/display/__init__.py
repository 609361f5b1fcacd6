"""Display rendering components for chief-status."""

from .header import build_header
from .status_table import build_status_table, format_eta, get_status_style
from .progress import build_progress_bar, route_progress
from .compact import build_compact_display
from .errors import build_error_panel, build_not_found_panel

__all__ = [
    "build_header",
    "build_status_table",
    "format_eta",
    "get_status_style",
    "build_progress_bar",
    "route_progress",
    "build_compact_display",
    "build_error_panel",
    "build_not_found_panel",
]
