"""Resilience core for the bookmarking client: error monitoring, crash detection and auto-recovery."""

__version__ = "0.1.0"
