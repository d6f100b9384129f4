"""Display formatting for blame attributions."""

from .label import calendar_date, format_label, relative_time, short_hash, truncate_summary

__all__ = [
    "calendar_date",
    "format_label",
    "relative_time",
    "short_hash",
    "truncate_summary",
]
