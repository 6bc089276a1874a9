"""TimeSense: automated time awareness for the focused application."""

__version__ = "0.3.0"
