"""Console UI for audiocatalog."""

from .library_screen import LibraryScreen, format_duration, format_timestamp

__all__ = ["LibraryScreen", "format_duration", "format_timestamp"]
