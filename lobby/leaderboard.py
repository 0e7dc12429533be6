"""
Leaderboard for RF Online.

Cumulative per-name statistics fed by online match ends and offline
matches against the computer. Lives for the lifetime of the process.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from utils.constants import LEADERBOARD_SIZE, MAX_SCORE, OUTCOMES
from utils.helpers import safe_int

logger = logging.getLogger(__name__)

@dataclass
class LeaderboardEntry:
    """Statistics for one display name."""
    name: str
    wins: int = 0
    losses: int = 0
    draws: int = 0
    games_played: int = 0
    goals: int = 0
    goals_against: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals - self.goals_against

    def sort_key(self):
        """Wins desc, goal difference desc, goals desc, then name."""
        return (-self.wins, -self.goal_difference, -self.goals, self.name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'name': self.name,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'gamesPlayed': self.games_played,
            'goals': self.goals,
            'goalsAgainst': self.goals_against,
            'goalDifference': self.goal_difference
        }

def online_outcome(result: Dict[str, Any]) -> str:
    """Outcome of one player's game_end result."""
    if result.get('won'):
        return OUTCOMES['WON']
    if result.get('draw') or safe_int(result.get('score')) == safe_int(result.get('opponentScore')):
        return OUTCOMES['DRAWN']
    return OUTCOMES['LOST']

def offline_outcome(result: Dict[str, Any]) -> str:
    """Outcome of an offline_match_result payload."""
    if result.get('won'):
        return OUTCOMES['WON']
    if result.get('lost'):
        return OUTCOMES['LOST']
    player_score = safe_int(result.get('playerScore'))
    ai_score = safe_int(result.get('aiScore'))
    if player_score > ai_score:
        return OUTCOMES['WON']
    if player_score < ai_score:
        return OUTCOMES['LOST']
    return OUTCOMES['DRAWN']

class Leaderboard:
    """Name -> LeaderboardEntry store."""

    def __init__(self):
        self.entries: Dict[str, LeaderboardEntry] = {}

    def record_result(self, name: str, goals_for: Any, goals_against: Any, outcome: str) -> LeaderboardEntry:
        """
        Fold one match result into a player's entry.

        Args:
            name: Player display name
            goals_for: Goals scored by the player
            goals_against: Goals conceded
            outcome: One of 'won', 'lost', 'drawn'

        Returns:
            The updated entry
        """
        if outcome not in OUTCOMES.values():
            raise ValueError(f"Unknown outcome: {outcome}")

        entry = self.entries.get(name)
        if entry is None:
            entry = LeaderboardEntry(name=name)
            self.entries[name] = entry

        entry.games_played += 1
        entry.goals += safe_int(goals_for, lower=0, upper=MAX_SCORE)
        entry.goals_against += safe_int(goals_against, lower=0, upper=MAX_SCORE)

        if outcome == OUTCOMES['WON']:
            entry.wins += 1
        elif outcome == OUTCOMES['LOST']:
            entry.losses += 1
        else:
            entry.draws += 1

        logger.info(f"Recorded {outcome} for {name}: {entry.wins}W {entry.losses}L {entry.draws}D")
        return entry

    def get_entry(self, name: str) -> Optional[LeaderboardEntry]:
        return self.entries.get(name)

    def top_entries(self, limit: int = LEADERBOARD_SIZE) -> List[LeaderboardEntry]:
        """Entries in presentation order, truncated to ``limit``."""
        return sorted(self.entries.values(), key=LeaderboardEntry.sort_key)[:limit]
