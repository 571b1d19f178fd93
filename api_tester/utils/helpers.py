"""
Utility helper functions
"""
import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


def sanitize_filename(name: str) -> str:
    """
    Sanitize a string to be used as a filename.

    Args:
        name: Original name

    Returns:
        Sanitized filename
    """
    # Remove invalid characters
    sanitized = re.sub(r'[<>:"/\\|?*]', '', name)
    # Replace spaces with underscores
    sanitized = sanitized.replace(' ', '_')
    # Limit length
    return sanitized[:100]


def format_duration(ms: int) -> str:
    """
    Format duration in milliseconds to human-readable string.

    Args:
        ms: Duration in milliseconds

    Returns:
        Formatted duration string
    """
    if ms < 1000:
        return f"{ms}ms"
    elif ms < 60000:
        return f"{ms / 1000:.1f}s"
    else:
        minutes = ms // 60000
        seconds = (ms % 60000) / 1000
        return f"{minutes}m {seconds:.0f}s"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def timestamp_now() -> str:
    """Get current timestamp as ISO format string."""
    return datetime.now().isoformat()


def file_timestamp() -> str:
    """Timestamp safe for file names, e.g. 2024-05-01T10-22-03."""
    return datetime.now().strftime("%Y-%m-%dT%H-%M-%S")


def parse_timestamp(ts: str) -> Optional[datetime]:
    """Parse an ISO format timestamp string."""
    try:
        return datetime.fromisoformat(ts)
    except (TypeError, ValueError):
        return None


def duration_ms(start: str, end: str) -> int:
    """Milliseconds between two ISO timestamps, 0 if either is unparseable."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return 0
    return int((end_dt - start_dt).total_seconds() * 1000)


def to_plain(test: Any) -> Dict[str, Any]:
    """Return a test as a plain dict, whether it came in as a model or as raw JSON."""
    if isinstance(test, BaseModel):
        return test.model_dump(mode="json")
    if isinstance(test, dict):
        return test
    return {}


def compact_json(value: Any) -> str:
    """Serialize without whitespace, the way the generated payloads are compared."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def is_number(value: Any) -> bool:
    """True for int/float values; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def tag_list(test: Dict[str, Any]) -> List[str]:
    """String tags of a test dict; anything but a list of tags yields []."""
    tags = test.get("tags")
    if not isinstance(tags, list):
        return []
    return [t for t in tags if isinstance(t, str)]
