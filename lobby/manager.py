"""
Main room management system.

Owns the room store and enforces the room state machine: creation,
joining, readiness, match start and end, the half-time barrier and
teardown when players leave. Every state change goes through a
RoomManager method; callers never touch ``rooms`` directly.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .errors import RoomAlreadyStarted, RoomFull, RoomNotFound, WrongPassword
from .leaderboard import LeaderboardEntry, offline_outcome, online_outcome
from .models import PlayerData, RoomData
from .room_creator import RoomCreator
from utils.constants import (
    MAX_PLAYER_NAME_LENGTH, MAX_SCORE, MESSAGES, MIN_PLAYERS_TO_START, ROOM_STATES
)
from utils.helpers import clean_text, now_ms, safe_int

logger = logging.getLogger(__name__)

class RoomManager:
    """Main room coordinator."""

    def __init__(self, connection_manager, notifier, leaderboard, mailbox,
                 room_creator: Optional[RoomCreator] = None,
                 clock: Callable[[], int] = now_ms):
        """
        Args:
            connection_manager: Session registry
            notifier: Outbound delivery (SocketNotifier or a test fake)
            leaderboard: Leaderboard store
            mailbox: Friend mailbox, flushed when a name comes online
            room_creator: Room id and configuration factory
            clock: Returns the current time in epoch milliseconds
        """
        self.connection_manager = connection_manager
        self.notifier = notifier
        self.leaderboard = leaderboard
        self.mailbox = mailbox
        self.room_creator = room_creator or RoomCreator()
        self.clock = clock
        self.rooms: Dict[str, RoomData] = {}
        # All mutation is serialised; handlers may run on several green threads.
        self._lock = threading.RLock()

    # ---- Queries ----

    def get_room(self, room_id: str) -> Optional[RoomData]:
        with self._lock:
            return self.rooms.get(room_id)

    def get_room_for_session(self, socket_id: str) -> Optional[RoomData]:
        """Room currently occupied by a session, or None."""
        with self._lock:
            room_id = self.connection_manager.get_room_by_socket(socket_id)
            return self.rooms.get(room_id) if room_id else None

    def all_rooms(self) -> List[RoomData]:
        """Snapshot of every room, public or not."""
        with self._lock:
            return list(self.rooms.values())

    def list_rooms(self) -> List[RoomData]:
        """Public rooms that are waiting for players."""
        with self._lock:
            return [room for room in self.rooms.values() if room.is_listed]

    def room_list_payload(self) -> List[Dict[str, Any]]:
        return [room.to_dict() for room in self.list_rooms()]

    def broadcast_room_list(self) -> None:
        """Send the public room list to every connection."""
        self.notifier.emit('rooms_list', self.room_list_payload())

    # ---- Names ----

    def activate_name(self, socket_id: str, player_name: Optional[str]) -> None:
        """
        Bind a display name to a session and deliver queued friend requests.

        Args:
            socket_id: Session's socket ID
            player_name: Display name, ignored if empty
        """
        if not player_name:
            return
        if self.connection_manager.set_player_name(socket_id, player_name):
            self.mailbox.flush(socket_id, player_name)

    def _resolve_name(self, raw_name: Any) -> Optional[str]:
        return clean_text(raw_name, MAX_PLAYER_NAME_LENGTH)

    # ---- Lifecycle ----

    def create_room(self, socket_id: str, settings: Dict[str, Any]) -> Optional[RoomData]:
        """
        Create a room with the requester as host and sole occupant.

        Args:
            socket_id: Requester's socket ID
            settings: Raw create_room payload

        Returns:
            The new room, or None if the session is unknown
        """
        with self._lock:
            session = self.connection_manager.get_session(socket_id)
            if not session:
                return None

            if session.room_id:
                self.leave(socket_id)

            player_name = self._resolve_name(settings.get('playerName'))
            self.activate_name(socket_id, player_name)
            display_name = player_name or session.display_name

            config = self.room_creator.create_room_config(settings, display_name)
            room_id = self.room_creator.generate_room_id(lambda candidate: candidate in self.rooms)

            host = PlayerData(socket_id=socket_id, player_id=session.player_id, name=display_name)
            room = RoomData(
                id=room_id,
                name=config.name,
                host=host,
                created_at=self.clock(),
                players=[host],
                max_players=config.max_players,
                game_mode=config.game_mode,
                stadium=config.stadium,
                weather=config.weather,
                match_duration=config.match_duration,
                is_private=config.is_private,
                password=config.password
            )

            self.rooms[room_id] = room
            self.connection_manager.associate_with_room(socket_id, room_id)
            self.notifier.enter_room(socket_id, room_id)

            self.notifier.emit('room_created', {'roomId': room_id, 'room': room.to_dict()}, to=socket_id)
            self.broadcast_room_list()

            logger.info(f"Room created: {room_id} by {display_name}")
            return room

    def join_room(self, socket_id: str, room_id: Any, password: Any = None,
                  player_name: Any = None) -> RoomData:
        """
        Add the requester to an existing room.

        Args:
            socket_id: Requester's socket ID
            room_id: Target room id
            password: Supplied password, if any
            player_name: Requester's display name

        Returns:
            The joined room

        Raises:
            RoomNotFound, RoomAlreadyStarted, RoomFull, WrongPassword
        """
        with self._lock:
            session = self.connection_manager.get_session(socket_id)
            room = self.rooms.get(room_id) if isinstance(room_id, str) else None

            if not room or not session:
                raise RoomNotFound()
            if room.get_player_by_socket(socket_id):
                # Already an occupant; answer with the current snapshot.
                self.notifier.emit('room_joined', {'room': room.to_dict()}, to=socket_id)
                return room
            if not room.is_waiting:
                raise RoomAlreadyStarted()
            if room.is_full:
                raise RoomFull()
            if not room.check_password(password if isinstance(password, str) else None):
                raise WrongPassword()

            if session.room_id:
                self.leave(socket_id)

            name = self._resolve_name(player_name)
            self.activate_name(socket_id, name)

            player = PlayerData(socket_id=socket_id, player_id=session.player_id,
                                name=name or session.display_name)
            room.players.append(player)
            self.connection_manager.associate_with_room(socket_id, room.id)
            self.notifier.enter_room(socket_id, room.id)

            self.notifier.emit('player_joined', {'player': player.to_dict(), 'room': room.to_dict()}, to=room.id)
            self.notifier.emit('room_joined', {'room': room.to_dict()}, to=socket_id)
            self.broadcast_room_list()

            logger.info(f"{player.name} joined room {room.id}")
            return room

    def toggle_ready(self, socket_id: str) -> Optional[PlayerData]:
        """
        Flip the requester's ready flag; start the match once everyone is ready.

        Returns:
            The updated occupant, or None if the session is not in a room
        """
        with self._lock:
            room = self.get_room_for_session(socket_id)
            if not room:
                return None
            player = room.get_player_by_socket(socket_id)
            if not player:
                return None

            player.ready = not player.ready
            self.notifier.emit('player_ready_changed', {
                'playerId': player.player_id,
                'ready': player.ready,
                'room': room.to_dict()
            }, to=room.id)

            if room.is_waiting and room.player_count >= MIN_PLAYERS_TO_START and room.all_ready:
                self.start_match(room)
            return player

    def start_match(self, room: RoomData) -> None:
        """Move a room to playing and tell its occupants."""
        with self._lock:
            room.status = ROOM_STATES['PLAYING']
            room.game_start_time = self.clock()
            room.half_time_ready.clear()

            self.notifier.emit('game_start', {
                'room': room.to_dict(),
                'players': [p.to_dict() for p in room.players]
            }, to=room.id)
            self.broadcast_room_list()

            logger.info(f"Game started in room {room.id}")

    def end_match(self, socket_id: str, results: Any) -> List[LeaderboardEntry]:
        """
        Return the sender's room to waiting and record the results.

        Only a playing room is reset; a second game_end for the same match
        (each client reports the end) is ignored.

        Args:
            socket_id: Reporter's socket ID
            results: List of {name, score, opponentScore, won} dicts

        Returns:
            Leaderboard entries that were updated
        """
        with self._lock:
            room = self.get_room_for_session(socket_id)
            if not room or not room.is_playing:
                return []

            room.status = ROOM_STATES['WAITING']
            room.game_start_time = None
            room.half_time_ready.clear()
            for player in room.players:
                player.ready = False

            updated = []
            for result in results if isinstance(results, list) else []:
                if not isinstance(result, dict):
                    continue
                name = clean_text(result.get('name'), MAX_PLAYER_NAME_LENGTH)
                if not name:
                    continue
                updated.append(self.leaderboard.record_result(
                    name, result.get('score'), result.get('opponentScore'), online_outcome(result)
                ))

            self.notifier.emit('room_updated', {'room': room.to_dict()}, to=room.id)
            self.broadcast_room_list()

            logger.info(f"Game ended in room {room.id}")
            return updated

    def record_offline_result(self, socket_id: str, result: Dict[str, Any]) -> Optional[LeaderboardEntry]:
        """
        Record a single-sided match against the computer opponent.

        Returns:
            The updated entry, or None if no player name was supplied
        """
        with self._lock:
            name = self._resolve_name(result.get('playerName'))
            if not name:
                return None
            self.activate_name(socket_id, name)
            return self.leaderboard.record_result(
                name, result.get('playerScore'), result.get('aiScore'), offline_outcome(result)
            )

    def leave(self, socket_id: str) -> Optional[str]:
        """
        Remove the requester from its room (explicit leave or disconnect).

        The host leaving always dissolves the room. A non-host leaving
        removes only that occupant, and the room is deleted once empty.

        Returns:
            Id of the room that was left, or None if the session held no room
        """
        with self._lock:
            session = self.connection_manager.get_session(socket_id)
            room_id = session.room_id if session else None
            if not room_id:
                return None

            room = self.rooms.get(room_id)
            if room:
                was_playing = room.is_playing
                if room.is_host(socket_id):
                    event = 'host_left_game' if was_playing else 'host_left_lobby'
                    message = MESSAGES['HOST_LEFT_GAME'] if was_playing else MESSAGES['HOST_LEFT_LOBBY']
                    self.notifier.emit(event, {'message': message}, to=room_id, skip_sid=socket_id)
                    self._delete_room(room)
                    logger.info(f"Host left room {room_id} ({'playing' if was_playing else 'lobby'}), room closed")
                else:
                    player = room.get_player_by_socket(socket_id)
                    if player:
                        room.players.remove(player)

                    if not room.players:
                        self._delete_room(room)
                        logger.info(f"Room {room_id} deleted (empty)")
                    else:
                        self.notifier.emit('player_left', {
                            'playerId': session.player_id,
                            'playerName': player.name if player else session.display_name,
                            'wasPlaying': was_playing,
                            'room': room.to_dict()
                        }, to=room_id, skip_sid=socket_id)
                        logger.info(f"Player {session.player_id} left room {room_id}")

            self.connection_manager.disassociate_from_room(socket_id)
            self.notifier.leave_room(socket_id, room_id)
            self.broadcast_room_list()
            return room_id

    def disconnect(self, socket_id: str) -> None:
        """Transport closed: run the leave path, then forget the session."""
        with self._lock:
            self.leave(socket_id)
            self.connection_manager.unregister_connection(socket_id)

    def close_room(self, room_id: str, message: str) -> bool:
        """
        Forcefully close a room, notifying its occupants.

        Does not refresh the room list; callers batch that.

        Returns:
            True if the room existed
        """
        with self._lock:
            room = self.rooms.get(room_id)
            if not room:
                return False
            self.notifier.emit('room_closed', {'message': message}, to=room_id)
            self._delete_room(room)
            logger.info(f"Room {room_id} closed: {message}")
            return True

    def _delete_room(self, room: RoomData) -> None:
        """Unbind every occupant, close the socket room and drop the room."""
        for player in room.players:
            if self.connection_manager.get_room_by_socket(player.socket_id) == room.id:
                self.connection_manager.disassociate_from_room(player.socket_id)
        self.notifier.close_room(room.id)
        self.rooms.pop(room.id, None)

    # ---- Half-time barrier ----

    def half_time_start(self, socket_id: str, scores: Dict[str, Any]) -> bool:
        """Open the half-time barrier and announce the score to the whole room."""
        with self._lock:
            room = self.get_room_for_session(socket_id)
            if not room:
                return False
            room.half_time_ready.clear()
            self.notifier.emit('half_time_started', {
                'playerScore': safe_int(scores.get('playerScore'), lower=0, upper=MAX_SCORE),
                'aiScore': safe_int(scores.get('aiScore'), lower=0, upper=MAX_SCORE)
            }, to=room.id)
            logger.info(f"Half time in room {room.id}")
            return True

    def half_time_ready(self, socket_id: str) -> bool:
        """
        Mark the requester ready for the second half.

        The barrier releases only when the number of ready sessions equals
        the current occupant count. Departed sessions are not removed from
        the ready set, so a stale set larger than the room holds the barrier
        until the next half_time_start.

        Returns:
            True if this call released the barrier
        """
        with self._lock:
            room = self.get_room_for_session(socket_id)
            if not room:
                return False

            room.half_time_ready.add(socket_id)
            ready_count = len(room.half_time_ready)
            total = room.player_count
            self.notifier.emit('half_time_ready_update', {
                'readyCount': ready_count,
                'totalPlayers': total
            }, to=room.id)

            if ready_count == total:
                room.half_time_ready.clear()
                self.notifier.emit('half_time_resume', {}, to=room.id)
                logger.info(f"Second half resumes in room {room.id}")
                return True
            return False

    def second_half_start(self, socket_id: str) -> bool:
        """Broadcast the second-half kick-off to the whole room, sender included."""
        with self._lock:
            room = self.get_room_for_session(socket_id)
            if not room:
                return False
            session = self.connection_manager.get_session(socket_id)
            self.notifier.emit('second_half_start', {'playerId': session.player_id}, to=room.id)
            return True

    # ---- Connections, friends and leaderboard ----

    def connect(self, socket_id: str):
        """Register a new connection and return its session."""
        with self._lock:
            return self.connection_manager.register_connection(socket_id)

    def send_friend_request(self, sender: str, recipient: str) -> Dict[str, Any]:
        with self._lock:
            return self.mailbox.send_request(sender, recipient)

    def notify_friend(self, event: str, sender: str, recipient: str,
                      extra: Optional[Dict[str, Any]] = None) -> bool:
        with self._lock:
            return self.mailbox.notify(event, sender, recipient, extra)

    def prune_mailbox(self, now: Optional[float] = None) -> int:
        with self._lock:
            return self.mailbox.prune(now)

    def online_friends(self, names: List[str]) -> List[str]:
        with self._lock:
            return self.connection_manager.online_names(names)

    def leaderboard_payload(self) -> List[Dict[str, Any]]:
        """Top leaderboard entries in wire form."""
        with self._lock:
            return [entry.to_dict() for entry in self.leaderboard.top_entries()]

    # ---- Status ----

    def get_status(self) -> Dict[str, int]:
        with self._lock:
            playing = sum(1 for room in self.rooms.values() if room.is_playing)
            return {
                'rooms': len(self.rooms),
                'rooms_playing': playing,
                'rooms_waiting': len(self.rooms) - playing
            }

    def connection_status(self) -> Dict[str, int]:
        with self._lock:
            return self.connection_manager.get_status()
