"""
Lobby Module for RF Online.

Contains room coordination, gameplay relay, leaderboard, friend mailbox
and the periodic reaper. Handlers in ``handlers/`` drive these objects;
nothing in this package imports Flask.
"""

from .models import RoomData, PlayerData
from .errors import JoinError, RoomNotFound, RoomAlreadyStarted, RoomFull, WrongPassword
from .connection_manager import ConnectionManager, PlayerSession
from .room_creator import RoomCreator, RoomConfiguration
from .leaderboard import Leaderboard, LeaderboardEntry
from .mailbox import FriendMailbox, PendingFriendRequest
from .manager import RoomManager
from .relay import RelayRouter
from .reaper import Reaper
from .notifier import SocketNotifier

__all__ = [
    # Data models
    'RoomData',
    'PlayerData',
    'PlayerSession',
    'RoomConfiguration',
    'LeaderboardEntry',
    'PendingFriendRequest',

    # Errors
    'JoinError',
    'RoomNotFound',
    'RoomAlreadyStarted',
    'RoomFull',
    'WrongPassword',

    # Managers
    'ConnectionManager',
    'RoomCreator',
    'Leaderboard',
    'FriendMailbox',
    'RoomManager',
    'RelayRouter',
    'Reaper',
    'SocketNotifier'
]
