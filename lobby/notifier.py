"""
Outbound message delivery.

SocketNotifier is the only place that talks to the Socket.IO server.
Managers receive it through their constructor, so tests can swap in a
recording fake.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

class SocketNotifier:
    """Thin wrapper around a Flask-SocketIO instance."""

    def __init__(self, socketio, namespace: str = '/'):
        """
        Args:
            socketio: flask_socketio.SocketIO instance
            namespace: Namespace all events are sent on
        """
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, data: Any = None, to: Optional[str] = None,
             skip_sid: Optional[str] = None) -> None:
        """
        Emit an event.

        Args:
            event: Event name
            data: JSON-serialisable payload
            to: Socket ID or room id; None broadcasts to everyone
            skip_sid: Socket ID excluded from delivery
        """
        self.socketio.emit(event, data, to=to, skip_sid=skip_sid, namespace=self.namespace)

    def enter_room(self, socket_id: str, room_id: str) -> None:
        self.socketio.server.enter_room(socket_id, room_id, namespace=self.namespace)

    def leave_room(self, socket_id: str, room_id: str) -> None:
        self.socketio.server.leave_room(socket_id, room_id, namespace=self.namespace)

    def close_room(self, room_id: str) -> None:
        self.socketio.close_room(room_id, namespace=self.namespace)
