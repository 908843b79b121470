from __future__ import annotations

"""In-game fatigue model.

Fatigue is a 0..100 meter per player, tracked by the game loop in a plain dict.
On-court players gain fatigue every possession; benched players recover. All
helpers return new values and clamp to [0, 100].
"""

import logging
from typing import Dict, Iterable, Mapping

from engine_errors import AttributeDataError
from ratings.config import DEFAULT_ATTRIBUTE
from ratings.types import Player

from .config import FATIGUE_STAMINA_SCALE, OFFENSE_PACE, SimRules
from .core import clamp, lerp

FATIGUE_MIN = 0.0
FATIGUE_MAX = 100.0

logger = logging.getLogger(__name__)


def _clamp_fatigue(x: float) -> float:
    return clamp(float(x), FATIGUE_MIN, FATIGUE_MAX)


def stamina_rating(player: Player) -> float:
    """Stamina for the fatigue model; corrupt data counts as an average player."""
    try:
        return player.rating("physical", "stamina")
    except AttributeDataError:
        logger.warning("STAMINA_UNAVAILABLE player_id=%s", player.player_id, exc_info=True)
        return float(DEFAULT_ATTRIBUTE)


def possession_gain(player: Player, *, pace: float, team_modifier: float, rules: SimRules) -> float:
    """Fatigue gained by one on-court player over one possession.

    gain = GAIN * pace * lerp(1.3, 0.7, stamina/100) * (1 + team modifier)
    """
    hi, lo = FATIGUE_STAMINA_SCALE
    stamina_scale = lerp(hi, lo, stamina_rating(player) / 100.0)
    gain = rules.fatigue_gain_per_possession * float(pace) * stamina_scale * (1.0 + float(team_modifier))
    return max(0.0, gain)


def scheme_pace(scheme_offense: str) -> float:
    return float(OFFENSE_PACE.get(scheme_offense, 1.0))


def apply_possession(
    fatigue: Dict[str, float],
    on_court: Iterable[Player],
    bench: Iterable[Player],
    *,
    pace: float,
    team_modifier: float,
    rules: SimRules,
) -> None:
    """Advance one team's fatigue by one possession (in place)."""
    for p in on_court:
        cur = fatigue.get(p.player_id, 0.0)
        fatigue[p.player_id] = _clamp_fatigue(cur + possession_gain(p, pace=pace, team_modifier=team_modifier, rules=rules))
    for p in bench:
        cur = fatigue.get(p.player_id, 0.0)
        fatigue[p.player_id] = _clamp_fatigue(cur - rules.fatigue_bench_recovery)


def recover(fatigue: Dict[str, float], player_ids: Iterable[str], amount: float) -> None:
    """Flat recovery (timeouts, period breaks) for the given players (in place)."""
    for pid in player_ids:
        fatigue[pid] = _clamp_fatigue(fatigue.get(pid, 0.0) - float(amount))


def initial_fatigue(roster: Iterable[Player]) -> Dict[str, float]:
    """Starting in-game fatigue carried over from between-game state."""
    return {p.player_id: _clamp_fatigue(p.fatigue) for p in roster}


def snapshot(fatigue: Mapping[str, float]) -> Dict[str, float]:
    return {pid: round(float(v), 2) for pid, v in fatigue.items()}
