"""inkwell — a one-entry-per-day diary engine."""

__version__ = "0.1.0"
