"""
Per-connection message budget.

Optional access guard the socket layer may consult before dispatching an
event. The room coordinator never depends on it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

@dataclass
class _Window:
    started_at: float
    count: int = 0

class RateLimiter:
    """
    Fixed-window message counter keyed by socket id.

    Each connection may send ``max_messages`` events per ``window_sec``
    seconds; anything above that is rejected until the window rolls over.
    """

    def __init__(self, window_sec: float = 1.0, max_messages: int = 120,
                 clock: Callable[[], float] = time.monotonic):
        self.window_sec = window_sec
        self.max_messages = max_messages
        self.clock = clock
        self.windows: Dict[str, _Window] = {}

    def is_allowed(self, connection_id: str, action: str) -> bool:
        """
        Count one message and report whether it is within budget.

        Args:
            connection_id: Socket ID of the sender
            action: Event name (logged only)

        Returns:
            True if the message may be handled
        """
        now = self.clock()
        window = self.windows.get(connection_id)
        if window is None or now - window.started_at >= self.window_sec:
            window = _Window(started_at=now)
            self.windows[connection_id] = window

        window.count += 1
        if window.count > self.max_messages:
            logger.debug(f"Rate limit exceeded by {connection_id} on {action}")
            return False
        return True

    def forget(self, connection_id: str) -> None:
        """Drop the counter of a closed connection."""
        self.windows.pop(connection_id, None)
