"""
Periodic cleanup of abandoned rooms and stale friend requests.

Sweeps run as Socket.IO background tasks interleaved with message
handling; each sweep goes through RoomManager operations, never through the
room or mailbox maps directly.
"""

import logging
import time
from typing import Callable, List, Optional

from utils.constants import MESSAGES

logger = logging.getLogger(__name__)

class Reaper:
    """
    Evicts rooms that sat too long and prunes the friend mailbox.

    Args:
        room_manager: Room coordinator
        waiting_timeout_sec: Maximum age of a waiting room
        playing_timeout_sec: Maximum age of a playing room
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(self, room_manager, waiting_timeout_sec: int = 30 * 60,
                 playing_timeout_sec: int = 2 * 60 * 60,
                 clock: Optional[Callable[[], int]] = None):
        self.room_manager = room_manager
        self.waiting_timeout_ms = waiting_timeout_sec * 1000
        self.playing_timeout_ms = playing_timeout_sec * 1000
        self.clock = clock or room_manager.clock

    def sweep_rooms(self, now_ms: Optional[int] = None) -> List[str]:
        """
        Close rooms older than their status allows.

        The room list is refreshed once, after all deletions.

        Returns:
            Ids of the closed rooms
        """
        now_ms = self.clock() if now_ms is None else now_ms
        expired = []

        for room in self.room_manager.all_rooms():
            age = now_ms - room.created_at
            if room.is_waiting and age > self.waiting_timeout_ms:
                expired.append((room.id, MESSAGES['ROOM_EXPIRED_WAITING']))
            elif room.is_playing and age > self.playing_timeout_ms:
                expired.append((room.id, MESSAGES['ROOM_EXPIRED_PLAYING']))

        closed = [room_id for room_id, message in expired
                  if self.room_manager.close_room(room_id, message)]

        if closed:
            self.room_manager.broadcast_room_list()
            logger.info(f"Reaper closed {len(closed)} stale rooms")
        return closed

    def prune_mailbox(self, now: Optional[float] = None) -> int:
        """Drop friend requests past the retention window."""
        return self.room_manager.prune_mailbox(now)

    def run(self, socketio, interval_sec: int = 60, mailbox_interval_sec: int = 60 * 60) -> None:
        """
        Background loop. Start with ``socketio.start_background_task``.

        Args:
            socketio: SocketIO instance, used for cooperative sleeping
            interval_sec: Room sweep period
            mailbox_interval_sec: Mailbox prune period
        """
        logger.info(f"Reaper started (rooms every {interval_sec}s, mailbox every {mailbox_interval_sec}s)")
        last_prune = time.monotonic()
        while True:
            socketio.sleep(interval_sec)
            try:
                self.sweep_rooms()
            except Exception as e:
                logger.error(f"Error sweeping rooms: {e}")

            if time.monotonic() - last_prune >= mailbox_interval_sec:
                last_prune = time.monotonic()
                try:
                    self.prune_mailbox()
                except Exception as e:
                    logger.error(f"Error pruning mailbox: {e}")
