"""
Game constants for the RF Online server.

This module contains all constant values used throughout the server,
including room defaults, bounds for relayed values and user-facing
messages. Reaper timings live in ``config/settings.py``.
"""

# Room status constants
ROOM_STATES = {
    'WAITING': 'waiting',   # Players can join, ready flags toggle
    'PLAYING': 'playing'    # Match in progress, no joining allowed
}

# Defaults applied field by field when create_room input is missing or malformed
ROOM_DEFAULTS = {
    'MAX_PLAYERS': 2,
    'GAME_MODE': '1v1',
    'STADIUM': 'rf-stadium',
    'WEATHER': 'normal',
    'MATCH_DURATION': 120,  # seconds
    'IS_PRIVATE': False
}

# Bounds for caller-supplied room settings
ROOM_LIMITS = {
    'MIN_PLAYERS': 2,
    'MAX_PLAYERS': 8,
    'MIN_MATCH_DURATION': 30,
    'MAX_MATCH_DURATION': 1200,
    'MAX_NAME_LENGTH': 40,
    'MAX_PASSWORD_LENGTH': 64
}

# Minimum occupants before a readiness check may start a match
MIN_PLAYERS_TO_START = 2

# Bounds for relayed values
MAX_SCORE = 99
MAX_EMOJI_LENGTH = 16
MAX_PLAYER_NAME_LENGTH = 24

# Match outcomes recorded on the leaderboard
OUTCOMES = {
    'WON': 'won',
    'LOST': 'lost',
    'DRAWN': 'drawn'
}

LEADERBOARD_SIZE = 10

# User-facing messages
MESSAGES = {
    'ROOM_NOT_FOUND': 'Room not found',
    'ROOM_ALREADY_STARTED': 'The match has already started',
    'ROOM_FULL': 'Room is full',
    'WRONG_PASSWORD': 'Wrong password',
    'HOST_LEFT_GAME': 'The host left the match',
    'HOST_LEFT_LOBBY': 'The host left the room',
    'ROOM_EXPIRED_WAITING': 'Room closed after waiting too long',
    'ROOM_EXPIRED_PLAYING': 'Room closed because the match ran too long',
    'FRIEND_REQUEST_QUEUED': 'Player is offline, the request will be delivered when they come online',
    'SERVER_ERROR': 'Something went wrong, please try again'
}

# Relayed gameplay events forwarded verbatim to the opponent
RELAY_EVENTS = ('game_update', 'player_sync', 'ball_touch', 'ball_sync')
