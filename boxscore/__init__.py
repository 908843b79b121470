"""Stat aggregation: per-game box score fold and season/career ledger."""

from .box import BoxScore, FinalBoxScore, FinalLine, StatLine, apply, empty_box, finalize, replay
from .season import SeasonLedger, roll_player_counters

__all__ = [
    "BoxScore",
    "FinalBoxScore",
    "FinalLine",
    "SeasonLedger",
    "StatLine",
    "apply",
    "empty_box",
    "finalize",
    "replay",
    "roll_player_counters",
]
