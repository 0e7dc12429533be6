"""
Utilities module for RF Online.

This module contains constants, helper functions, and utility classes
used throughout the application.
"""

from .constants import ROOM_STATES, ROOM_DEFAULTS, ROOM_LIMITS, OUTCOMES, MESSAGES, RELAY_EVENTS
from .helpers import generate_room_id, safe_int, clean_text, payload_dict
from .rate_limit import RateLimiter

__all__ = [
    'ROOM_STATES',
    'ROOM_DEFAULTS',
    'ROOM_LIMITS',
    'OUTCOMES',
    'MESSAGES',
    'RELAY_EVENTS',
    'generate_room_id',
    'safe_int',
    'clean_text',
    'payload_dict',
    'RateLimiter'
]
