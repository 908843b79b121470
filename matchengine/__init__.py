"""Possession engine and full-game simulator.

Public API
----------
- resolve_possession(offense, defense, game_clock, shot_clock, modifiers, rng)
- GameSimulator(home, away, rng=...).run() -> GameResult
- simulate_game(home, away, seed=...) -> GameResult
- SimRules / DEFAULT_RULES
"""

from .config import DEFAULT_RULES, SimRules
from .core import stable_seed
from .models import GameEvent, InjuryRecord, OnCourtTeam, PossessionModifiers, PossessionOutcome, StatDelta
from .possession import resolve_possession, shot_probability
from .result import GameResult
from .sim_game import GameSimulator, simulate_game

__all__ = [
    "DEFAULT_RULES",
    "GameEvent",
    "GameResult",
    "GameSimulator",
    "InjuryRecord",
    "OnCourtTeam",
    "PossessionModifiers",
    "PossessionOutcome",
    "SimRules",
    "StatDelta",
    "resolve_possession",
    "shot_probability",
    "simulate_game",
    "stable_seed",
]
