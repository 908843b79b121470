from __future__ import annotations

"""Attribute model constants.

Attribute values are integers on a 0..99 scale. Missing attributes read as
DEFAULT_ATTRIBUTE so partially populated player snapshots still simulate.
"""

from typing import Dict, Tuple

ATTRIBUTE_MIN: int = 0
ATTRIBUTE_MAX: int = 99
DEFAULT_ATTRIBUTE: int = 50

CATEGORIES: Tuple[str, ...] = ("offense", "defense", "physical", "mental")

ATTRIBUTE_NAMES: Dict[str, Tuple[str, ...]] = {
    "offense": (
        "three_point",
        "mid_range",
        "close_shot",
        "layup",
        "free_throw",
        "ball_handling",
        "pass_accuracy",
        "pass_vision",
        "post_control",
        "draw_foul",
    ),
    "defense": (
        "perimeter_defense",
        "interior_defense",
        "steal",
        "block",
        "offensive_rebound",
        "defensive_rebound",
        "help_defense_iq",
    ),
    "physical": ("speed", "acceleration", "strength", "vertical", "stamina", "durability"),
    "mental": ("basketball_iq", "clutch", "consistency", "work_ethic", "aggression"),
}

POSITIONS: Tuple[str, ...] = ("PG", "SG", "SF", "PF", "C")
BADGE_LEVELS: Tuple[str, ...] = ("bronze", "silver", "gold", "hof")
INJURY_RISK_TIERS: Tuple[str, ...] = ("L", "M", "H")

OFFENSE_SCHEMES: Tuple[str, ...] = ("balanced", "pace_and_space", "post_heavy", "iso_heavy", "run_and_gun")
DEFENSE_SCHEMES: Tuple[str, ...] = ("man", "zone", "switch_all", "press")

# ---------------------------------------------------------------------------
# Overall rating proxy
# ---------------------------------------------------------------------------

# overall = sum(weight[c] * mean(category c)), clamped to [OVERALL_MIN, OVERALL_MAX]
OVERALL_WEIGHTS: Dict[str, float] = {
    "offense": 0.40,
    "defense": 0.25,
    "physical": 0.20,
    "mental": 0.15,
}
OVERALL_MIN: int = 40
OVERALL_MAX: int = 99

# ---------------------------------------------------------------------------
# Chemistry
# ---------------------------------------------------------------------------

# Morale baseline; average roster morale above it gives a bonus, below a penalty.
DEFAULT_MORALE: float = 80.0

# chemistry = clamp((avg_morale - DEFAULT_MORALE) / DEFAULT_MORALE * CAP, -CAP, CAP)
CHEMISTRY_CAP: float = 0.03
