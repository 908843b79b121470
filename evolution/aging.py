from __future__ import annotations

"""Age-curve driven weekly development.

Weekly points (per attribute, before the per-group age profile):
    base  = (potential - overall) * BASE_RATE * bracket_dev / WEEKS_PER_YEAR
    dev   = (base + work_ethic bonus + playing-time bonus + synergy bonus)
            * (1 + morale modifier) * facility factor
    reg   = bracket_reg * REGRESSION_BASE / WEEKS_PER_YEAR

Per attribute group (peak, decline_start, rate, can_improve):
    age < peak                  -> +dev
    peak <= age < decline_start -> +dev * 0.5 if can_improve else 0
    age >= decline_start        -> -(years_past * rate / WEEKS_PER_YEAR + reg),
                                   improvable groups keep dev * 0.3
"""

from typing import Tuple

from ratings.overall import overall_rating
from ratings.types import Player

from .config import (
    AGE_BRACKETS,
    ATTRIBUTE_GROUPS,
    ATTRIBUTE_PROFILES,
    FACILITY_LEVELS,
    FACILITY_STEP,
    LATE_DEVELOPMENT_SHARE,
    MORALE_DEVELOPMENT,
    PLATEAU_DEVELOPMENT_SHARE,
    PLAYING_TIME_FACTOR,
    PLAYING_TIME_REF_MPG,
    WEEKS_PER_YEAR,
    WORK_ETHIC_FACTOR,
    EvolutionRules,
)


def age_bracket(age: int) -> Tuple[str, float, float]:
    """(bracket name, development multiplier, regression multiplier)."""
    for name, (lo, hi, dev, reg) in AGE_BRACKETS.items():
        if lo <= int(age) <= hi:
            return name, dev, reg
    return "veteran", 0.0, 1.0


def morale_modifier(morale: float) -> float:
    for threshold, mod in MORALE_DEVELOPMENT:
        if float(morale) >= threshold:
            return mod
    return MORALE_DEVELOPMENT[-1][1]


def facility_factor(level: int) -> float:
    lo, hi = FACILITY_LEVELS
    lvl = max(lo, min(hi, int(level)))
    return 1.0 + FACILITY_STEP * (lvl - 3)


def weekly_development_points(
    player: Player,
    *,
    avg_minutes: float,
    development_boost: float,
    facility_level: int,
    rules: EvolutionRules,
) -> float:
    current = overall_rating(player)
    room = float(player.potential) - float(current)
    if room <= 0:
        return 0.0
    _, dev_mult, _ = age_bracket(player.age)
    base = room * rules.development_base_rate * dev_mult / WEEKS_PER_YEAR
    work_ethic = player.rating("mental", "work_ethic")
    total = (
        base
        + base * (work_ethic / 100.0) * WORK_ETHIC_FACTOR
        + base * (max(0.0, float(avg_minutes)) / PLAYING_TIME_REF_MPG) * PLAYING_TIME_FACTOR
        + base * max(0.0, float(development_boost))
    )
    total *= 1.0 + morale_modifier(player.morale)
    total *= facility_factor(facility_level)
    return max(0.0, total)


def weekly_regression_points(age: int, rules: EvolutionRules) -> float:
    _, _, reg_mult = age_bracket(age)
    return reg_mult * rules.regression_base / WEEKS_PER_YEAR


def attribute_change(key: str, age: int, dev: float, reg: float) -> float:
    group = ATTRIBUTE_GROUPS.get(key)
    if group is None:
        return dev - reg
    peak, decline_start, rate, can_improve = ATTRIBUTE_PROFILES[group]
    if age < peak:
        return dev
    if age < decline_start:
        return dev * PLATEAU_DEVELOPMENT_SHARE if can_improve else 0.0
    decline = (age - decline_start) * rate / WEEKS_PER_YEAR + reg
    if can_improve and dev > 0:
        return max(-decline, dev * LATE_DEVELOPMENT_SHARE - decline)
    return -decline
