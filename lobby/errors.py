"""
Join failures raised by the room coordinator.

Each carries the user-facing message and a stable code that the socket
layer forwards in a ``join_error`` event.
"""

from utils.constants import MESSAGES

class JoinError(Exception):
    """Base class for rejected join attempts. Never mutates the room."""
    code = 'join_failed'
    default_message = 'Could not join room'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'message': self.message, 'code': self.code}

class RoomNotFound(JoinError):
    code = 'room_not_found'
    default_message = MESSAGES['ROOM_NOT_FOUND']

class RoomAlreadyStarted(JoinError):
    code = 'room_already_started'
    default_message = MESSAGES['ROOM_ALREADY_STARTED']

class RoomFull(JoinError):
    code = 'room_full'
    default_message = MESSAGES['ROOM_FULL']

class WrongPassword(JoinError):
    code = 'wrong_password'
    default_message = MESSAGES['WRONG_PASSWORD']
