from __future__ import annotations

"""Per-game performance rating, rolling window, streaks and micro-development.

Micro step (once per completed game):
- rating >= high threshold, or >= baseline + margin  -> development
- rating <= low threshold, or <= baseline - margin, with enough minutes -> regression
- which attributes move is decided by per-36 stat thresholds scaled by minutes
"""

import math
import random
from typing import Dict, Optional, Sequence, Tuple

from boxscore.box import StatLine
from engine_errors import EvolutionDataError
from ratings.types import StreakState

from .config import (
    GAIN_MINUTES_RANGE,
    GAIN_MINUTES_REF,
    LOSS_MINUTES_RANGE,
    LOSS_MINUTES_REF,
    MAX_REGRESSION_GROUPS,
    PERF_SCALE,
    PERF_WEIGHTS,
    EvolutionRules,
)


def performance_rating(line: StatLine) -> float:
    minutes = max(line.minutes, 1.0)
    raw = (
        PERF_WEIGHTS["pts"] * line.pts
        + PERF_WEIGHTS["reb"] * line.reb
        + PERF_WEIGHTS["ast"] * line.ast
        + PERF_WEIGHTS["stl"] * line.stl
        + PERF_WEIGHTS["blk"] * line.blk
        + PERF_WEIGHTS["tov"] * line.tov
    )
    return round(raw / minutes * PERF_SCALE, 2)


def validate_history(player_id: str, history: Sequence[object]) -> Tuple[float, ...]:
    """Recent performance ratings as floats; corrupt entries raise EvolutionDataError."""
    out = []
    for i, v in enumerate(history):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(float(v)):
            raise EvolutionDataError(
                "corrupt performance history",
                {"player_id": player_id, "index": i, "value": repr(v)},
            )
        out.append(float(v))
    return tuple(out)


def baseline(history: Sequence[float], window: int) -> Optional[float]:
    recent = list(history)[-window:]
    if not recent:
        return None
    return sum(recent) / len(recent)


def push_window(history: Sequence[float], rating: float, cap: int) -> Tuple[float, ...]:
    return tuple(list(history)[-(cap - 1):] + [float(rating)]) if cap > 1 else (float(rating),)


def detect_streak(history: Sequence[float], rules: EvolutionRules) -> StreakState:
    n = int(rules.streak_games)
    if len(history) < n:
        return StreakState()
    tail = list(history)

    def _run(pred) -> int:
        k = 0
        for v in reversed(tail):
            if not pred(v):
                break
            k += 1
        return k

    hot = _run(lambda v: v >= rules.hot_threshold)
    if hot >= n:
        return StreakState("hot", min(hot, rules.window_cap))
    cold = _run(lambda v: v <= rules.cold_threshold)
    if cold >= n:
        return StreakState("cold", min(cold, rules.window_cap))
    return StreakState()


def _minutes_factor(minutes: float, ref: float, rng_range: Tuple[float, float]) -> float:
    lo, hi = rng_range
    return max(lo, min(hi, minutes / ref))


def _development_targets(line: StatLine, change: float, thresholds: Dict[str, float]) -> Dict[str, float]:
    scale = min(line.minutes / 36.0, 1.0)
    out: Dict[str, float] = {}

    pts_t = thresholds["pts"] * scale
    if line.pts >= pts_t:
        if line.tpm >= thresholds["tpm"] * scale:
            out["offense.three_point"] = change
        else:
            out["offense.mid_range"] = change * 0.5
            out["offense.layup"] = change * 0.5
    elif line.pts >= pts_t * 0.6:
        out["offense.close_shot"] = change * 0.3

    ast_t = thresholds["ast"] * scale
    if line.ast >= ast_t:
        out["offense.pass_accuracy"] = change
        out["offense.pass_vision"] = change * 0.5
    elif line.ast >= ast_t * 0.6:
        out["offense.pass_accuracy"] = change * 0.3

    reb_t = thresholds["reb"] * scale
    if line.reb >= reb_t:
        out["defense.defensive_rebound"] = change * 0.7
        out["defense.offensive_rebound"] = change * 0.3
    elif line.reb >= reb_t * 0.6:
        out["defense.defensive_rebound"] = change * 0.3

    if line.stl >= thresholds["stl"] * scale:
        out["defense.steal"] = change
        out["defense.perimeter_defense"] = change * 0.3
    if line.blk >= thresholds["blk"] * scale:
        out["defense.block"] = change
        out["defense.interior_defense"] = change * 0.3
    return out


def _regression_targets(line: StatLine, loss: float, thresholds: Dict[str, float]) -> Dict[str, float]:
    scale = min(line.minutes / 36.0, 1.0)
    out: Dict[str, float] = {}
    groups = 0
    if line.pts < thresholds["pts"] * scale * 0.4 and groups < MAX_REGRESSION_GROUPS:
        out["offense.mid_range"] = -loss * 0.5
        out["offense.close_shot"] = -loss * 0.5
        groups += 1
    if line.ast < thresholds["ast"] * scale * 0.4 and groups < MAX_REGRESSION_GROUPS:
        out["offense.pass_accuracy"] = -loss * 0.5
        groups += 1
    if line.reb < thresholds["reb"] * scale * 0.4 and groups < MAX_REGRESSION_GROUPS:
        out["defense.defensive_rebound"] = -loss * 0.5
        groups += 1
    if line.stl == 0 and line.blk == 0 and groups < MAX_REGRESSION_GROUPS:
        out["defense.perimeter_defense"] = -loss * 0.3
        groups += 1
    return out


def micro_changes(
    line: StatLine,
    rating: float,
    base: Optional[float],
    rng: random.Random,
    rules: EvolutionRules,
) -> Tuple[str, Dict[str, float]]:
    """("development" | "regression" | "none", {"category.attr": delta})."""
    minutes = line.minutes
    thresholds = dict(rules.stat_thresholds)
    over = rating >= rules.threshold_high or (base is not None and rating >= base + rules.baseline_margin)
    under = rating <= rules.threshold_low or (base is not None and rating <= base - rules.baseline_margin)

    if over:
        gain = rng.uniform(*rules.gain_range) * _minutes_factor(minutes, GAIN_MINUTES_REF, GAIN_MINUTES_RANGE)
        return "development", _development_targets(line, gain, thresholds)
    if under and minutes >= rules.min_minutes_for_loss:
        loss = rng.uniform(*rules.loss_range) * _minutes_factor(minutes, LOSS_MINUTES_REF, LOSS_MINUTES_RANGE)
        return "regression", _regression_targets(line, loss, thresholds)
    return "none", {}
