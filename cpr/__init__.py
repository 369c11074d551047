"""Campaign Performance Report: active-window aware campaign rollups."""

__version__ = "0.1.0"
