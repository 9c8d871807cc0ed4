"""Normalize coding-assistant CLI output into a chronological turn timeline."""

__version__ = "0.1.0"
