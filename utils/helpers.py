"""
Helper utilities for the RF Online server.

This module contains utility functions used throughout the application
for id generation, input coercion and bounds checking.
"""

import math
import random
import string
import time
from typing import Any, Optional

BASE36 = string.digits + string.ascii_lowercase

def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)

def generate_room_id(timestamp_ms: Optional[int] = None, suffix_length: int = 9) -> str:
    """
    Generate a room identifier.

    The id combines the creation time with a random base36 suffix,
    e.g. ``room_1718000000000_k3j9x0a2b``.

    Args:
        timestamp_ms: Creation time in epoch milliseconds (defaults to now)
        suffix_length: Number of random characters

    Returns:
        Room identifier string
    """
    if timestamp_ms is None:
        timestamp_ms = now_ms()
    suffix = ''.join(random.choices(BASE36, k=suffix_length))
    return f"room_{timestamp_ms}_{suffix}"

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a number into [lower, upper]."""
    return max(lower, min(upper, value))

def safe_int(value: Any, default: int = 0, lower: Optional[int] = None,
             upper: Optional[int] = None) -> int:
    """
    Safely convert a value to an int, optionally clamped.

    Booleans, non-finite floats and unparseable values yield the default.

    Args:
        value: Raw value from a client payload
        default: Value returned when conversion fails
        lower: Optional lower bound
        upper: Optional upper bound

    Returns:
        Converted integer
    """
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return int(clamp(
        int(number),
        lower if lower is not None else -math.inf,
        upper if upper is not None else math.inf
    ))

def clean_text(value: Any, max_length: int) -> Optional[str]:
    """
    Normalise a free-text client field.

    Returns the stripped string truncated to ``max_length``, or None when
    the value is not a string or is blank.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    return text[:max_length]

def payload_dict(data: Any) -> dict:
    """Return the payload if it is a dict, otherwise an empty dict."""
    return data if isinstance(data, dict) else {}
