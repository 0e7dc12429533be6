"""
Connection Manager for RF Online rooms.

Handles player connections, disconnections, and session tracking.
Contains no room logic - purely connection and session management.
"""

import itertools
import logging
from typing import Dict, Optional, List
from dataclasses import dataclass

logger = logging.getLogger(__name__)

@dataclass
class PlayerSession:
    """Information about a live connection."""
    socket_id: str
    player_id: int
    player_name: Optional[str] = None
    room_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name shown to other players, falling back to the numeric id."""
        return self.player_name or f"Player {self.player_id}"

class ConnectionManager:
    """
    Manages live connections and the display names bound to them.

    Player ids are assigned from a process-wide counter and never reused.
    A display name maps to at most one active socket; the most recent
    session to claim a name owns it.
    """

    def __init__(self):
        self.sessions: Dict[str, PlayerSession] = {}  # socket_id -> PlayerSession
        self.name_to_socket: Dict[str, str] = {}  # player_name -> socket_id
        self._player_ids = itertools.count(1)
        logger.debug("Connection manager initialized")

    def register_connection(self, socket_id: str) -> PlayerSession:
        """
        Register a new connection and assign its player id.

        Args:
            socket_id: Unique socket connection ID

        Returns:
            The new PlayerSession
        """
        session = PlayerSession(socket_id=socket_id, player_id=next(self._player_ids))
        self.sessions[socket_id] = session
        logger.info(f"Registered connection: player {session.player_id} ({socket_id})")
        return session

    def unregister_connection(self, socket_id: str) -> Optional[PlayerSession]:
        """
        Forget a connection and release its display name.

        Args:
            socket_id: Socket connection ID to unregister

        Returns:
            The removed session, or None if unknown
        """
        session = self.sessions.pop(socket_id, None)
        if not session:
            return None

        if session.player_name and self.name_to_socket.get(session.player_name) == socket_id:
            del self.name_to_socket[session.player_name]

        logger.info(f"Unregistered connection: player {session.player_id} ({socket_id})")
        return session

    def set_player_name(self, socket_id: str, player_name: str) -> bool:
        """
        Bind a display name to a connection.

        Args:
            socket_id: Socket connection ID
            player_name: Self-asserted display name

        Returns:
            True if the session exists and now owns the name
        """
        session = self.sessions.get(socket_id)
        if not session:
            return False

        previous = session.player_name
        if previous and previous != player_name and self.name_to_socket.get(previous) == socket_id:
            del self.name_to_socket[previous]

        session.player_name = player_name
        self.name_to_socket[player_name] = socket_id
        return True

    def associate_with_room(self, socket_id: str, room_id: str) -> bool:
        """Bind a session to a room."""
        session = self.sessions.get(socket_id)
        if not session:
            return False
        session.room_id = room_id
        logger.debug(f"Associated {socket_id} with room {room_id}")
        return True

    def disassociate_from_room(self, socket_id: str) -> Optional[str]:
        """
        Clear a session's room binding.

        Returns:
            Previous room id, or None if not associated
        """
        session = self.sessions.get(socket_id)
        if not session:
            return None
        previous_room = session.room_id
        session.room_id = None
        logger.debug(f"Disassociated {socket_id} from room {previous_room}")
        return previous_room

    def get_session(self, socket_id: str) -> Optional[PlayerSession]:
        """Get session by socket ID."""
        return self.sessions.get(socket_id)

    def get_socket_id_by_name(self, player_name: str) -> Optional[str]:
        """Get the active socket ID currently bound to a display name."""
        return self.name_to_socket.get(player_name)

    def get_room_by_socket(self, socket_id: str) -> Optional[str]:
        session = self.sessions.get(socket_id)
        return session.room_id if session else None

    def is_name_online(self, player_name: str) -> bool:
        """Check if a display name is bound to a live connection."""
        return player_name in self.name_to_socket

    def online_names(self, candidates: List[str]) -> List[str]:
        """Filter a list of names down to those currently online, keeping order."""
        return [name for name in candidates if self.is_name_online(name)]

    def get_status(self) -> Dict[str, int]:
        """Connection statistics for the health endpoint."""
        in_rooms = sum(1 for s in self.sessions.values() if s.room_id)
        return {
            'connected_sessions': len(self.sessions),
            'named_sessions': len(self.name_to_socket),
            'sessions_in_rooms': in_rooms
        }
