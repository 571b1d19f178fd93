"""Utilities package"""
from .helpers import (
    sanitize_filename,
    format_duration,
    truncate_text,
    timestamp_now,
    to_plain,
    compact_json,
    is_number,
)

__all__ = [
    "sanitize_filename",
    "format_duration",
    "truncate_text",
    "timestamp_now",
    "to_plain",
    "compact_json",
    "is_number",
]
