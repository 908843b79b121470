"""Batch simulation: many independent games on a bounded worker pool."""

from .batch import BatchJob, BatchProgress, BatchScheduler, BatchSummary, CancelToken
from .match_runner import GameRunResult, GameSpec, LeagueContext, run_game_spec

__all__ = [
    "BatchJob",
    "BatchProgress",
    "BatchScheduler",
    "BatchSummary",
    "CancelToken",
    "GameRunResult",
    "GameSpec",
    "LeagueContext",
    "run_game_spec",
]
