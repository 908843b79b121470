"""Player evolution: per-game micro development, streaks, weekly age curves."""

from .config import DEFAULT_EVOLUTION_RULES, EvolutionRules
from .performance import detect_streak, performance_rating
from .service import process_post_game, process_weekly
from .types import EvolutionRecord, EvolutionReport

__all__ = [
    "DEFAULT_EVOLUTION_RULES",
    "EvolutionRecord",
    "EvolutionReport",
    "EvolutionRules",
    "detect_streak",
    "performance_rating",
    "process_post_game",
    "process_weekly",
]
