import os
import sys
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

import pytest

# Ensure the project root (containing the `lobby` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from lobby import (  # noqa: E402
    ConnectionManager, FriendMailbox, Leaderboard, Reaper, RelayRouter, RoomManager
)


@dataclass
class Emission:
    event: str
    data: Any
    to: Optional[str]
    skip_sid: Optional[str]
    recipients: Optional[FrozenSet[str]]  # None means broadcast to everyone

    def reaches(self, sid: str) -> bool:
        return self.recipients is None or sid in self.recipients


class RecordingNotifier:
    """Notifier fake that records emits and tracks socket room membership."""

    def __init__(self):
        self.sent = []
        self.rooms = defaultdict(set)

    def emit(self, event, data=None, to=None, skip_sid=None):
        if to is None:
            recipients = None
        elif to in self.rooms:
            recipients = frozenset(self.rooms[to] - {skip_sid})
        else:
            recipients = frozenset({to} - {skip_sid})
        self.sent.append(Emission(event, data, to, skip_sid, recipients))

    def enter_room(self, socket_id, room_id):
        self.rooms[room_id].add(socket_id)

    def leave_room(self, socket_id, room_id):
        if room_id in self.rooms:
            self.rooms[room_id].discard(socket_id)

    def close_room(self, room_id):
        self.rooms.pop(room_id, None)

    def events(self, name):
        return [e for e in self.sent if e.event == name]

    def received(self, sid, name=None):
        return [e for e in self.sent if e.reaches(sid) and (name is None or e.event == name)]

    def clear(self):
        self.sent.clear()


class FakeClock:
    """Epoch-millisecond clock under test control."""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def connections():
    return ConnectionManager()


@pytest.fixture()
def leaderboard():
    return Leaderboard()


@pytest.fixture()
def mailbox(connections, notifier):
    return FriendMailbox(connections, notifier, retention_days=7)


@pytest.fixture()
def room_manager(connections, notifier, leaderboard, mailbox, clock):
    return RoomManager(connections, notifier, leaderboard, mailbox, clock=clock)


@pytest.fixture()
def relay_router(connections, room_manager, notifier):
    return RelayRouter(connections, room_manager, notifier)


@pytest.fixture()
def reaper(room_manager, clock):
    return Reaper(room_manager, waiting_timeout_sec=600,
                  playing_timeout_sec=3600, clock=clock)


@pytest.fixture()
def connect(connections):
    """Register a connection and return its socket id."""
    def _connect(sid):
        connections.register_connection(sid)
        return sid
    return _connect


@pytest.fixture()
def two_player_room(room_manager, connect, notifier):
    """Alice hosts a public 2-player room and Bob has joined."""
    connect('sid-a')
    connect('sid-b')
    room = room_manager.create_room('sid-a', {'playerName': 'Alice'})
    room_manager.join_room('sid-b', room.id, player_name='Bob')
    notifier.clear()
    return room


@pytest.fixture()
def playing_room(room_manager, two_player_room, notifier):
    room_manager.toggle_ready('sid-a')
    room_manager.toggle_ready('sid-b')
    notifier.clear()
    return two_player_room
