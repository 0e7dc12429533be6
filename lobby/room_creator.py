"""
Room Creator for RF Online.

Handles room id generation and the defaulting of caller-supplied room
settings. Contains no occupant management or match logic.
"""

import logging
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass

from utils.constants import ROOM_DEFAULTS, ROOM_LIMITS
from utils.helpers import clean_text, generate_room_id, safe_int

logger = logging.getLogger(__name__)

@dataclass
class RoomConfiguration:
    """Settings for a room. Values other than capacity are opaque to the server."""
    name: str
    max_players: int = ROOM_DEFAULTS['MAX_PLAYERS']
    game_mode: str = ROOM_DEFAULTS['GAME_MODE']
    stadium: str = ROOM_DEFAULTS['STADIUM']
    weather: str = ROOM_DEFAULTS['WEATHER']
    match_duration: int = ROOM_DEFAULTS['MATCH_DURATION']
    is_private: bool = ROOM_DEFAULTS['IS_PRIVATE']
    password: Optional[str] = None

class RoomCreator:
    """
    Handles room id generation and room configuration.

    Malformed settings never reject a create request; each field falls
    back to its default independently.
    """

    def __init__(self, id_factory: Callable[[], str] = generate_room_id, max_attempts: int = 100):
        """
        Initialize room creator.

        Args:
            id_factory: Callable producing candidate room ids
            max_attempts: Attempts before giving up on a unique id
        """
        self.id_factory = id_factory
        self.max_attempts = max_attempts

    def generate_room_id(self, exists: Callable[[str], bool]) -> str:
        """
        Generate a room id that is not already in use.

        Args:
            exists: Predicate telling whether an id is taken

        Returns:
            Unused room id

        Raises:
            RuntimeError: If no unique id could be produced
        """
        for _ in range(self.max_attempts):
            room_id = self.id_factory()
            if not exists(room_id):
                return room_id
        raise RuntimeError("Could not generate a unique room id")

    def create_room_config(self, settings: Dict[str, Any], player_name: str) -> RoomConfiguration:
        """
        Build a room configuration from raw create_room input.

        Args:
            settings: Client payload (camelCase keys as sent by the browser)
            player_name: Creator's display name, used for the default room name

        Returns:
            RoomConfiguration with every invalid field replaced by its default
        """
        config = RoomConfiguration(
            name=clean_text(settings.get('roomName'), ROOM_LIMITS['MAX_NAME_LENGTH'])
            or f"{player_name}'s Room"
        )

        max_players = settings.get('maxPlayers')
        if max_players is not None:
            config.max_players = safe_int(
                max_players,
                default=ROOM_DEFAULTS['MAX_PLAYERS'],
                lower=ROOM_LIMITS['MIN_PLAYERS'],
                upper=ROOM_LIMITS['MAX_PLAYERS']
            )

        for key, attr in (('gameMode', 'game_mode'), ('stadium', 'stadium'), ('weather', 'weather')):
            value = clean_text(settings.get(key), ROOM_LIMITS['MAX_NAME_LENGTH'])
            if value:
                setattr(config, attr, value)

        duration = settings.get('matchDuration')
        if duration is not None:
            config.match_duration = safe_int(
                duration,
                default=ROOM_DEFAULTS['MATCH_DURATION'],
                lower=ROOM_LIMITS['MIN_MATCH_DURATION'],
                upper=ROOM_LIMITS['MAX_MATCH_DURATION']
            )

        if isinstance(settings.get('isPrivate'), bool):
            config.is_private = settings['isPrivate']

        config.password = clean_text(settings.get('password'), ROOM_LIMITS['MAX_PASSWORD_LENGTH'])

        logger.debug(f"Created room config: max_players={config.max_players}, mode={config.game_mode}")
        return config
