"""
Data models for room management.

These are pure data structures used to pass information between
the room coordinator, the relay router and the socket handlers.
Field names are snake_case; ``to_dict`` produces the camelCase shape
the browser client expects.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Set
from utils.constants import ROOM_DEFAULTS, ROOM_STATES

@dataclass
class PlayerData:
    """An occupant of a room."""
    socket_id: str
    player_id: int
    name: str
    ready: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.socket_id,
            'playerId': self.player_id,
            'name': self.name,
            'ready': self.ready
        }

@dataclass
class RoomData:
    """Represents a room's current state."""
    id: str
    name: str
    host: PlayerData
    created_at: int  # epoch milliseconds
    players: List[PlayerData] = field(default_factory=list)
    max_players: int = ROOM_DEFAULTS['MAX_PLAYERS']
    game_mode: str = ROOM_DEFAULTS['GAME_MODE']
    stadium: str = ROOM_DEFAULTS['STADIUM']
    weather: str = ROOM_DEFAULTS['WEATHER']
    match_duration: int = ROOM_DEFAULTS['MATCH_DURATION']
    is_private: bool = ROOM_DEFAULTS['IS_PRIVATE']
    password: Optional[str] = None
    status: str = ROOM_STATES['WAITING']
    game_start_time: Optional[int] = None
    half_time_ready: Set[str] = field(default_factory=set)

    @property
    def player_count(self) -> int:
        """Number of occupants."""
        return len(self.players)

    @property
    def is_full(self) -> bool:
        """Check if room is at capacity."""
        return self.player_count >= self.max_players

    @property
    def is_waiting(self) -> bool:
        return self.status == ROOM_STATES['WAITING']

    @property
    def is_playing(self) -> bool:
        return self.status == ROOM_STATES['PLAYING']

    @property
    def is_listed(self) -> bool:
        """Public rooms that can still be joined appear in the room list."""
        return not self.is_private and self.is_waiting

    @property
    def all_ready(self) -> bool:
        return all(p.ready for p in self.players)

    def is_host(self, socket_id: str) -> bool:
        return self.host.socket_id == socket_id

    def get_player_by_socket(self, socket_id: str) -> Optional[PlayerData]:
        """Find occupant by socket ID."""
        for player in self.players:
            if player.socket_id == socket_id:
                return player
        return None

    def check_password(self, supplied: Optional[str]) -> bool:
        """Rooms without a password accept anything."""
        return not self.password or self.password == supplied

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization. Never exposes the password."""
        return {
            'id': self.id,
            'name': self.name,
            'host': {
                'id': self.host.socket_id,
                'playerId': self.host.player_id,
                'name': self.host.name
            },
            'players': [p.to_dict() for p in self.players],
            'playerCount': self.player_count,
            'maxPlayers': self.max_players,
            'gameMode': self.game_mode,
            'stadium': self.stadium,
            'weather': self.weather,
            'matchDuration': self.match_duration,
            'isPrivate': self.is_private,
            'hasPassword': bool(self.password),
            'status': self.status,
            'createdAt': self.created_at,
            'gameStartTime': self.game_start_time
        }
