"""Attribute model: players, teams and their static ratings.

Public API
----------
- Player, Team, Badge, InjuryState, Tendencies, StreakState, PlayerCounters, CoachingScheme
- overall_rating(player)
"""

from .overall import category_average, overall_rating
from .types import (
    Badge,
    CoachingScheme,
    InjuryState,
    Player,
    PlayerCounters,
    StreakState,
    Team,
    Tendencies,
)

__all__ = [
    "Badge",
    "CoachingScheme",
    "InjuryState",
    "Player",
    "PlayerCounters",
    "StreakState",
    "Team",
    "Tendencies",
    "category_average",
    "overall_rating",
]
