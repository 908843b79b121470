from __future__ import annotations

"""Tuning parameters for the match engine.

All possession-time, fatigue, injury, foul and substitution constants live here so
they can be tuned against reference game lengths (~100 possessions per team,
48 minutes) without touching engine code. ``SimRules`` bundles them into an
immutable object passed through the engine; module constants are its defaults.

Probability semantics
---------------------
Every rolled probability is computed as ``base + sum(modifiers)`` and clamped to
[PROB_FLOOR, PROB_CEIL] before rolling, so no outcome is ever certain.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Tuple

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

REGULATION_PERIODS: int = 4
QUARTER_SECONDS: float = 720.0
OVERTIME_SECONDS: float = 300.0
# A game still tied after this many overtimes fails instead of looping forever.
MAX_OVERTIMES: int = 10

SHOT_CLOCK_SECONDS: float = 24.0
OREB_SHOT_CLOCK_SECONDS: float = 14.0

# Possession time ~ U(MIN, MAX) / pace. A draw past the shot clock forces a shot.
POSSESSION_SECONDS_MIN: float = 5.0
POSSESSION_SECONDS_MAX: float = 25.0
# Extra time per offensive-rebound restart ~ U(MIN, MAX).
SECOND_CHANCE_SECONDS_MIN: float = 2.0
SECOND_CHANCE_SECONDS_MAX: float = 10.0
MAX_SECOND_CHANCES: int = 3

# Remaining game clock (sec) under which the offense hurries a quick shot.
QUICK_SHOT_WINDOW: float = 6.0

# ---------------------------------------------------------------------------
# Probability band
# ---------------------------------------------------------------------------

PROB_FLOOR: float = 0.02
PROB_CEIL: float = 0.98

# ---------------------------------------------------------------------------
# Shot model
# ---------------------------------------------------------------------------

# base = intercept + slope * rating / 100   (rating after synergy modifiers)
SHOT_BASE: Dict[str, Tuple[float, float]] = {
    "three": (0.32, 0.18),
    "mid": (0.40, 0.18),
    "rim": (0.58, 0.20),
    "post": (0.44, 0.18),
}
SHOT_POINTS: Dict[str, int] = {"three": 3, "mid": 2, "rim": 2, "post": 2}

# contest = def_rating/100 * (1 - SEPARATION_WEIGHT * (speed+accel)/200)
# contest modifier = -base * contest * CONTEST_WEIGHT
SEPARATION_WEIGHT: float = 0.30
CONTEST_WEIGHT: float = 0.30

# fatigue modifier = -base * (fatigue/100) * (1 - stamina/200) * FATIGUE_SHOT_WEIGHT
FATIGUE_SHOT_WEIGHT: float = 0.25

FORCED_SHOT_PENALTY: float = 0.10
QUICK_SHOT_PENALTY: float = 0.03
STREAK_SHOT_MODIFIER: float = 0.015

# Clutch window: last CLUTCH_SECONDS of Q4/OT with margin <= CLUTCH_MARGIN.
# modifier = (clutch - 50) / 1000
CLUTCH_SECONDS: float = 120.0
CLUTCH_MARGIN: int = 8

FREE_THROW_BASE: Tuple[float, float] = (0.40, 0.50)

# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

# Ball-handler weight = overall * (0.5 + usage/100) * (GUARD_HANDLER_BONUS if guard)
GUARD_HANDLER_BONUS: float = 1.5

# Matchup quality factor on drive/post/spot-up weights:
#   clamp(1 + (off_rating - def_rating) / MATCHUP_SCALE, lo, hi)
MATCHUP_SCALE: float = 200.0
MATCHUP_FACTOR_RANGE: Tuple[float, float] = (0.6, 1.4)

# Probability that a non-pass action was set up by a pass (assist if made).
PRE_PASS_CHANCE: float = 0.35

# ---------------------------------------------------------------------------
# Turnovers / steals / blocks / rebounds
# ---------------------------------------------------------------------------

# p_tov = BASE + SKILL_WEIGHT * (avg_def_steal - ball_handling) / 100 - ball_security
TURNOVER_BASE: float = 0.12
TURNOVER_SKILL_WEIGHT: float = 0.10
STEAL_CREDIT_CHANCE: float = 0.60

BLOCK_CHANCE: float = 0.08

REBOUND_POSITION_MULT: Dict[str, float] = {"C": 1.8, "PF": 1.5, "SF": 1.1, "SG": 0.8, "PG": 0.6}
# weight *= height_in / REBOUND_HEIGHT_BASELINE_IN
REBOUND_HEIGHT_BASELINE_IN: float = 78.0
DEFENSIVE_REBOUND_ADVANTAGE: float = 2.5
OREB_CHANCE_RANGE: Tuple[float, float] = (0.15, 0.40)

# ---------------------------------------------------------------------------
# Fouls
# ---------------------------------------------------------------------------

SHOOTING_FOUL_BASE: Dict[str, float] = {"rim": 0.14, "post": 0.12, "mid": 0.05, "three": 0.02}
NON_SHOOTING_FOUL_BASE: float = 0.05
# modifier = (aggression - 50) / FOUL_ATTR_SCALE ; (draw_foul - 50) / FOUL_ATTR_SCALE
FOUL_ATTR_SCALE: float = 500.0
# Defenders at/over this many fouls play cautiously: foul chance * FOUL_CAUTION_MULT
FOUL_CAUTION_AT: int = 4
FOUL_CAUTION_MULT: float = 0.6
BONUS_TEAM_FOULS: int = 5
FOUL_OUT: int = 6
# Per-period personal-foul threshold that sends a player to the bench for the period.
FOUL_TROUBLE_BY_PERIOD: Tuple[int, ...] = (2, 3, 4, 5)
FOUL_TROUBLE_OVERTIME: int = 5

# ---------------------------------------------------------------------------
# Coaching schemes
# ---------------------------------------------------------------------------

OFFENSE_PACE: Dict[str, float] = {
    "balanced": 1.00,
    "pace_and_space": 1.06,
    "post_heavy": 0.94,
    "iso_heavy": 0.96,
    "run_and_gun": 1.12,
}

# action -> weight multiplier
OFFENSE_ACTION_MULT: Dict[str, Dict[str, float]] = {
    "balanced": {},
    "pace_and_space": {"spot_up": 1.30, "drive": 1.10, "post_up": 0.60},
    "post_heavy": {"post_up": 1.60, "spot_up": 0.80},
    "iso_heavy": {"drive": 1.30, "pass": 0.60},
    "run_and_gun": {"drive": 1.20, "spot_up": 1.20, "pass": 0.90},
}

# shot type -> added contest level
DEFENSE_CONTEST_ADJ: Dict[str, Dict[str, float]] = {
    "man": {},
    "zone": {"rim": 0.05, "post": 0.05, "three": -0.03},
    "switch_all": {"mid": 0.03, "three": 0.03, "rim": -0.02},
    "press": {"rim": -0.02, "post": -0.02, "mid": -0.02, "three": -0.02},
}
DEFENSE_TURNOVER_ADJ: Dict[str, float] = {"man": 0.0, "zone": -0.01, "switch_all": 0.0, "press": 0.03}
DEFENSE_FOUL_ADJ: Dict[str, float] = {"man": 0.0, "zone": -0.01, "switch_all": 0.0, "press": 0.02}

# ---------------------------------------------------------------------------
# In-game fatigue
# ---------------------------------------------------------------------------

# gain per possession on court = GAIN * pace * lerp(hi, lo, stamina/100) * (1 + team modifier)
FATIGUE_GAIN_PER_POSSESSION: float = 0.9
FATIGUE_STAMINA_SCALE: Tuple[float, float] = (1.3, 0.7)
FATIGUE_BENCH_RECOVERY: float = 2.5
FATIGUE_TIMEOUT_RECOVERY: float = 6.0
FATIGUE_PERIOD_BREAK_RECOVERY: float = 8.0

# ---------------------------------------------------------------------------
# Substitutions / timeouts
# ---------------------------------------------------------------------------

SUB_FATIGUE_THRESHOLD: float = 80.0
SUB_RESTORE_THRESHOLD: float = 50.0
CLOSE_GAME_SECONDS: float = 300.0
CLOSE_GAME_MARGIN: int = 6

TIMEOUTS_PER_GAME: int = 7
TIMEOUT_RUN_TRIGGER: int = 8

# ---------------------------------------------------------------------------
# Injuries
# ---------------------------------------------------------------------------

# p = BASE * risk_mult * (1 + FATIGUE_K * fatigue/100) * lerp(hi, lo, durability/100)
INJURY_BASE_PER_POSSESSION: float = 6.0e-5
INJURY_RISK_MULT: Dict[str, float] = {"L": 0.5, "M": 1.0, "H": 2.0}
INJURY_FATIGUE_K: float = 2.0
INJURY_DURABILITY_SCALE: Tuple[float, float] = (1.3, 0.7)
MAX_INJURIES_PER_TEAM: int = 1
MAX_INJURIES_PER_GAME: int = 2

# severity -> (weight, games_lo, games_hi, permanent physical impact)
INJURY_SEVERITIES: Dict[str, Tuple[float, int, int, int]] = {
    "minor": (0.60, 1, 5, 0),
    "moderate": (0.30, 6, 20, 0),
    "severe": (0.08, 21, 60, 1),
    "season_ending": (0.02, 61, 82, 3),
}

INJURY_NAMES: Dict[str, Tuple[str, ...]] = {
    "minor": ("sprained_ankle", "bruised_knee", "sore_back", "finger_sprain", "hip_soreness", "wrist_soreness"),
    "moderate": ("hamstring_strain", "groin_injury", "calf_strain", "shoulder_sprain", "quad_strain", "ankle_sprain_grade2"),
    "severe": ("torn_meniscus", "broken_hand", "stress_fracture", "concussion", "torn_ligament"),
    "season_ending": ("acl_tear", "achilles_rupture", "broken_leg", "major_back_injury", "patellar_tendon_tear"),
}


@dataclass(frozen=True, slots=True)
class SimRules:
    """Immutable bundle of engine tuning parameters."""

    quarter_seconds: float = QUARTER_SECONDS
    overtime_seconds: float = OVERTIME_SECONDS
    regulation_periods: int = REGULATION_PERIODS
    max_overtimes: int = MAX_OVERTIMES
    shot_clock_seconds: float = SHOT_CLOCK_SECONDS
    oreb_shot_clock_seconds: float = OREB_SHOT_CLOCK_SECONDS
    possession_seconds_min: float = POSSESSION_SECONDS_MIN
    possession_seconds_max: float = POSSESSION_SECONDS_MAX
    second_chance_seconds_min: float = SECOND_CHANCE_SECONDS_MIN
    second_chance_seconds_max: float = SECOND_CHANCE_SECONDS_MAX
    max_second_chances: int = MAX_SECOND_CHANCES
    quick_shot_window: float = QUICK_SHOT_WINDOW

    prob_floor: float = PROB_FLOOR
    prob_ceil: float = PROB_CEIL
    forced_shot_penalty: float = FORCED_SHOT_PENALTY
    quick_shot_penalty: float = QUICK_SHOT_PENALTY
    streak_shot_modifier: float = STREAK_SHOT_MODIFIER
    pre_pass_chance: float = PRE_PASS_CHANCE

    turnover_base: float = TURNOVER_BASE
    steal_credit_chance: float = STEAL_CREDIT_CHANCE
    block_chance: float = BLOCK_CHANCE
    shooting_foul_base: Mapping[str, float] = field(default_factory=lambda: dict(SHOOTING_FOUL_BASE))
    non_shooting_foul_base: float = NON_SHOOTING_FOUL_BASE
    bonus_team_fouls: int = BONUS_TEAM_FOULS
    foul_out: int = FOUL_OUT
    foul_trouble_by_period: Tuple[int, ...] = FOUL_TROUBLE_BY_PERIOD
    foul_trouble_overtime: int = FOUL_TROUBLE_OVERTIME

    fatigue_gain_per_possession: float = FATIGUE_GAIN_PER_POSSESSION
    fatigue_bench_recovery: float = FATIGUE_BENCH_RECOVERY
    fatigue_timeout_recovery: float = FATIGUE_TIMEOUT_RECOVERY
    fatigue_period_break_recovery: float = FATIGUE_PERIOD_BREAK_RECOVERY
    sub_fatigue_threshold: float = SUB_FATIGUE_THRESHOLD
    sub_restore_threshold: float = SUB_RESTORE_THRESHOLD
    close_game_seconds: float = CLOSE_GAME_SECONDS
    close_game_margin: int = CLOSE_GAME_MARGIN
    timeouts_per_game: int = TIMEOUTS_PER_GAME
    timeout_run_trigger: int = TIMEOUT_RUN_TRIGGER

    injury_base_per_possession: float = INJURY_BASE_PER_POSSESSION
    injury_risk_mult: Mapping[str, float] = field(default_factory=lambda: dict(INJURY_RISK_MULT))
    injury_fatigue_k: float = INJURY_FATIGUE_K
    max_injuries_per_team: int = MAX_INJURIES_PER_TEAM
    max_injuries_per_game: int = MAX_INJURIES_PER_GAME
    injuries_enabled: bool = True

    def foul_trouble_limit(self, period: int) -> int:
        if period <= len(self.foul_trouble_by_period):
            return int(self.foul_trouble_by_period[period - 1])
        return int(self.foul_trouble_overtime)

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any]) -> "SimRules":
        """Build rules from a partial mapping. Unknown keys raise ValueError."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"unknown SimRules keys: {unknown}")
        return replace(cls(), **dict(overrides))


DEFAULT_RULES = SimRules()
