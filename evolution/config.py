from __future__ import annotations

"""Tuning parameters for player evolution (per-game micro and weekly macro).

Notes
-----
- Attribute changes are fractional; the carry lives in Player.attribute_progress and
  moves the integer rating when it crosses +/-1.
- Bounds: ATTRIBUTE_FLOOR <= attribute <= max(potential, ATTRIBUTE_FLOOR), enforced
  after every cycle; the floor wins when potential is below it.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Tuple

# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

ATTRIBUTE_FLOOR: int = 25

# ---------------------------------------------------------------------------
# Performance rating / micro development
# ---------------------------------------------------------------------------

# rating = (PTS + REB + 1.5*AST + 2*STL + 2*BLK - TOV) / max(MIN, 1) * 10
PERF_WEIGHTS: Dict[str, float] = {"pts": 1.0, "reb": 1.0, "ast": 1.5, "stl": 2.0, "blk": 2.0, "tov": -1.0}
PERF_SCALE: float = 10.0

# baseline = mean of the last BASELINE_WINDOW ratings
BASELINE_WINDOW: int = 5
BASELINE_MARGIN: float = 5.0

MICRO_THRESHOLD_HIGH: float = 20.0
MICRO_THRESHOLD_LOW: float = 8.0
MICRO_GAIN_RANGE: Tuple[float, float] = (0.1, 0.3)
MICRO_LOSS_RANGE: Tuple[float, float] = (0.1, 0.2)
MICRO_MIN_MINUTES_FOR_LOSS: float = 15.0

# minutes factor on gains: clamp(min / 28, 0.5, 1.3); on losses clamp(min / 30, 0.6, 1.15)
GAIN_MINUTES_REF: float = 28.0
GAIN_MINUTES_RANGE: Tuple[float, float] = (0.5, 1.3)
LOSS_MINUTES_REF: float = 30.0
LOSS_MINUTES_RANGE: Tuple[float, float] = (0.6, 1.15)

# Per-36 stat thresholds (scaled by min(minutes/36, 1)) selecting which attributes move.
STAT_THRESHOLDS: Dict[str, float] = {"pts": 14.0, "ast": 4.0, "reb": 5.0, "stl": 1.0, "blk": 1.0, "tpm": 2.0}
MAX_REGRESSION_GROUPS: int = 2

# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

STREAK_GAMES: int = 3
HOT_STREAK_THRESHOLD: float = 25.0
COLD_STREAK_THRESHOLD: float = 10.0
PERFORMANCE_WINDOW_CAP: int = 10

# ---------------------------------------------------------------------------
# Between-game fatigue
# ---------------------------------------------------------------------------

FATIGUE_PER_MINUTE: float = 0.5
REST_RECOVERY: float = 25.0
WEEKLY_RECOVERY: float = 15.0

# ---------------------------------------------------------------------------
# Macro (weekly) development
# ---------------------------------------------------------------------------

WEEKS_PER_YEAR: float = 52.0

# bracket -> (min_age, max_age, development, regression)
AGE_BRACKETS: Dict[str, Tuple[int, int, float, float]] = {
    "youth": (0, 23, 1.5, 0.0),
    "rising": (24, 26, 1.0, 0.0),
    "prime": (27, 31, 0.3, 0.1),
    "decline": (32, 35, 0.0, 0.5),
    "veteran": (36, 99, 0.0, 1.0),
}

# group -> (peak_age, decline_start, decline_rate per year, can_improve_past_peak)
ATTRIBUTE_PROFILES: Dict[str, Tuple[int, int, float, bool]] = {
    "physical": (26, 29, 0.8, False),
    "strength": (30, 33, 0.4, False),
    "shooting": (29, 34, 0.3, True),
    "mental": (32, 37, 0.2, True),
    "skill": (28, 33, 0.4, True),
    "finishing": (27, 31, 0.5, False),
    "defense": (28, 32, 0.4, True),
    "rebounding": (29, 33, 0.3, True),
}

# "category.attribute" -> profile group (attributes not listed use dev - reg)
ATTRIBUTE_GROUPS: Dict[str, str] = {
    "physical.speed": "physical",
    "physical.acceleration": "physical",
    "physical.vertical": "physical",
    "physical.stamina": "physical",
    "physical.strength": "strength",
    "offense.three_point": "shooting",
    "offense.mid_range": "shooting",
    "offense.free_throw": "shooting",
    "offense.close_shot": "shooting",
    "mental.basketball_iq": "mental",
    "mental.clutch": "mental",
    "mental.consistency": "mental",
    "offense.ball_handling": "skill",
    "offense.pass_accuracy": "skill",
    "offense.pass_vision": "skill",
    "offense.post_control": "skill",
    "offense.layup": "skill",
    "offense.draw_foul": "finishing",
    "defense.perimeter_defense": "defense",
    "defense.interior_defense": "defense",
    "defense.steal": "defense",
    "defense.block": "defense",
    "defense.help_defense_iq": "defense",
    "defense.offensive_rebound": "rebounding",
    "defense.defensive_rebound": "rebounding",
}

# base = (potential - overall) * BASE_RATE * age_dev / WEEKS_PER_YEAR
DEVELOPMENT_BASE_RATE: float = 0.1
WORK_ETHIC_FACTOR: float = 0.5
PLAYING_TIME_FACTOR: float = 0.3
PLAYING_TIME_REF_MPG: float = 36.0
# regression = age_reg * REGRESSION_BASE / WEEKS_PER_YEAR
REGRESSION_BASE: float = 0.5
# plateau (peak <= age < decline_start) keeps this share of development
PLATEAU_DEVELOPMENT_SHARE: float = 0.5
# past decline start, improvable groups keep this share
LATE_DEVELOPMENT_SHARE: float = 0.3

# facility level 1..5 -> 1 + FACILITY_STEP * (level - 3)
FACILITY_LEVELS: Tuple[int, int] = (1, 5)
FACILITY_STEP: float = 0.05

# morale (threshold, development modifier), first match from the top
MORALE_DEVELOPMENT: Tuple[Tuple[float, float], ...] = ((80.0, 0.05), (50.0, 0.0), (25.0, -0.05), (0.0, -0.10))

# Physical attributes hit by a permanent injury impact when it heals.
INJURY_IMPACT_ATTRIBUTES: Tuple[str, ...] = ("speed", "acceleration", "vertical", "stamina")


@dataclass(frozen=True, slots=True)
class EvolutionRules:
    floor: int = ATTRIBUTE_FLOOR
    baseline_window: int = BASELINE_WINDOW
    baseline_margin: float = BASELINE_MARGIN
    threshold_high: float = MICRO_THRESHOLD_HIGH
    threshold_low: float = MICRO_THRESHOLD_LOW
    gain_range: Tuple[float, float] = MICRO_GAIN_RANGE
    loss_range: Tuple[float, float] = MICRO_LOSS_RANGE
    min_minutes_for_loss: float = MICRO_MIN_MINUTES_FOR_LOSS
    stat_thresholds: Mapping[str, float] = field(default_factory=lambda: dict(STAT_THRESHOLDS))

    streak_games: int = STREAK_GAMES
    hot_threshold: float = HOT_STREAK_THRESHOLD
    cold_threshold: float = COLD_STREAK_THRESHOLD
    window_cap: int = PERFORMANCE_WINDOW_CAP

    fatigue_per_minute: float = FATIGUE_PER_MINUTE
    rest_recovery: float = REST_RECOVERY
    weekly_recovery: float = WEEKLY_RECOVERY

    development_base_rate: float = DEVELOPMENT_BASE_RATE
    regression_base: float = REGRESSION_BASE

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any]) -> "EvolutionRules":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"unknown EvolutionRules keys: {unknown}")
        return replace(cls(), **dict(overrides))


DEFAULT_EVOLUTION_RULES = EvolutionRules()
