"""
Relay Router for RF Online.

Forwards high-frequency gameplay messages between the occupants of a
room, tagging each with the sender's player id. Keeps no state of its
own and never interprets the gameplay payloads beyond bounds checks.
"""

import logging
from typing import Any, Optional

from utils.constants import MAX_EMOJI_LENGTH, MAX_SCORE, RELAY_EVENTS
from utils.helpers import clean_text, safe_int

logger = logging.getLogger(__name__)

class RelayRouter:
    """Stateless forwarding of gameplay telemetry."""

    def __init__(self, connection_manager, room_manager, notifier):
        self.connection_manager = connection_manager
        self.room_manager = room_manager
        self.notifier = notifier

    def _sender_context(self, socket_id: str):
        """(session, room) of the sender, or (None, None) outside a room."""
        session = self.connection_manager.get_session(socket_id)
        room = self.room_manager.get_room_for_session(socket_id)
        if not session or not room:
            return None, None
        return session, room

    def _to_opponents(self, socket_id: str, event: str, payload: dict) -> bool:
        session, room = self._sender_context(socket_id)
        if not room:
            return False
        payload = dict(payload)
        payload['playerId'] = session.player_id
        self.notifier.emit(event, payload, to=room.id, skip_sid=socket_id)
        return True

    def relay(self, socket_id: str, event: str, data: Any) -> bool:
        """
        Forward a telemetry payload verbatim to the other occupants.

        Args:
            socket_id: Sender's socket ID
            event: One of RELAY_EVENTS; the outbound event has the same name
            data: Payload dict from the client

        Returns:
            True if the message was forwarded
        """
        if event not in RELAY_EVENTS or not isinstance(data, dict):
            return False
        return self._to_opponents(socket_id, event, data)

    def time_sync(self, socket_id: str, data: Any) -> bool:
        """Forward the match clock. Only the host's clock is authoritative."""
        if not isinstance(data, dict):
            return False
        room = self.room_manager.get_room_for_session(socket_id)
        if not room or not room.is_host(socket_id):
            return False
        return self._to_opponents(socket_id, 'time_sync', data)

    def start_replay(self, socket_id: str, data: Any) -> bool:
        """Tell the opponent to play the goal replay."""
        data = data if isinstance(data, dict) else {}
        return self._to_opponents(socket_id, 'start_replay', {'scorer': data.get('scorer')})

    def send_emoji(self, socket_id: str, data: Any) -> bool:
        """Forward a cosmetic emoji to the opponent."""
        emoji: Optional[str] = clean_text((data or {}).get('emoji') if isinstance(data, dict) else None,
                                          MAX_EMOJI_LENGTH)
        if not emoji:
            return False
        forwarded = self._to_opponents(socket_id, 'emoji_received', {'emoji': emoji})
        if forwarded:
            logger.debug(f"Emoji from {socket_id}: {emoji}")
        return forwarded

    def goal_update(self, socket_id: str, data: Any) -> bool:
        """
        Broadcast a goal to the whole room, sender included, so both
        scoreboards stay identical.
        """
        if not isinstance(data, dict):
            return False
        room = self.room_manager.get_room_for_session(socket_id)
        if not room:
            return False

        payload = {
            'playerScore': safe_int(data.get('playerScore'), lower=0, upper=MAX_SCORE),
            'aiScore': safe_int(data.get('aiScore'), lower=0, upper=MAX_SCORE),
            'scorer': data.get('scorer')
        }
        self.notifier.emit('goal_update', payload, to=room.id)
        logger.info(f"Goal in room {room.id}: {payload['playerScore']}-{payload['aiScore']}")
        return True
