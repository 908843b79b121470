from __future__ import annotations

from typing import Dict

from .config import ATTRIBUTE_NAMES, CATEGORIES, OVERALL_MAX, OVERALL_MIN, OVERALL_WEIGHTS
from .types import Player


def category_average(player: Player, category: str) -> float:
    """Mean of the known attribute names in ``category`` (defaults count as 50)."""
    names = ATTRIBUTE_NAMES[category]
    return sum(player.rating(category, n) for n in names) / float(len(names))


def category_averages(player: Player) -> Dict[str, float]:
    return {c: category_average(player, c) for c in CATEGORIES}


def overall_rating(player: Player) -> int:
    avgs = category_averages(player)
    raw = sum(OVERALL_WEIGHTS[c] * avgs[c] for c in CATEGORIES)
    return int(max(OVERALL_MIN, min(OVERALL_MAX, round(raw))))
