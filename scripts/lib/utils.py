"""
Utility functions for Leads Analytics Hub.
Timestamp parsing and zero-safe arithmetic shared by the fetch boundary
and the analyzers.

Usage:
    from scripts.lib.utils import parse_timestamp, day_key, safe_div
"""
from datetime import datetime
from typing import Optional


def parse_timestamp(ts_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp string, or return None if it isn't one."""
    if not ts_str or not isinstance(ts_str, str):
        return None
    try:
        # Handle ISO format with or without trailing Z / offset
        cleaned = ts_str.strip().replace("Z", "+00:00")
        return datetime.fromisoformat(cleaned)
    except (ValueError, TypeError):
        return None


def day_key(ts_str: Optional[str]) -> Optional[str]:
    """Calendar day of a timestamp as 'YYYY-MM-DD'.

    The day is the timestamp's own date component; no timezone
    conversion is applied.
    """
    dt = parse_timestamp(ts_str)
    if dt is None:
        return None
    return dt.date().isoformat()


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Zero-safe division."""
    if denominator == 0:
        return default
    return numerator / denominator
