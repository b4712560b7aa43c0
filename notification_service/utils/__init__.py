"""Utility helpers for reusable functionality."""

from .datetime import ensure_utc, isoformat_or_none, parse_timestamp, utc_now
from .payload import first_value

__all__ = [
    "ensure_utc",
    "first_value",
    "isoformat_or_none",
    "parse_timestamp",
    "utc_now",
]
