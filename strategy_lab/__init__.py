"""Rule-based strategy evaluation on daily price bars."""

__version__ = "0.1.0"
