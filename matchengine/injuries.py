from __future__ import annotations

"""In-game injury rolls.

Per possession, every on-court player gets an independent low-probability
check:

    p = BASE * risk_mult[injury_risk] * (1 + FATIGUE_K * fatigue/100)
          * lerp(1.3, 0.7, durability/100)

On trigger a severity is drawn from INJURY_SEVERITIES and mapped to a games-out
count, a named injury and a permanent physical impact applied when the injury heals.
"""

import logging
import random
from dataclasses import dataclass

from engine_errors import AttributeDataError
from ratings.config import DEFAULT_ATTRIBUTE
from ratings.types import Player

from .config import INJURY_DURABILITY_SCALE, INJURY_NAMES, INJURY_SEVERITIES, SimRules
from .core import clamp, lerp, weighted_choice

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InjuryRoll:
    injury_type: str
    severity: str
    games_out: int
    permanent_impact: int


def durability_rating(player: Player) -> float:
    """Durability for the injury roll; corrupt data counts as an average player."""
    try:
        return player.rating("physical", "durability")
    except AttributeDataError:
        logger.warning("DURABILITY_UNAVAILABLE player_id=%s", player.player_id, exc_info=True)
        return float(DEFAULT_ATTRIBUTE)


def injury_probability(player: Player, fatigue: float, rules: SimRules) -> float:
    risk = float(rules.injury_risk_mult.get(player.injury_risk, 1.0))
    fatigue_mult = 1.0 + rules.injury_fatigue_k * clamp(float(fatigue), 0.0, 100.0) / 100.0
    hi, lo = INJURY_DURABILITY_SCALE
    durability_mult = lerp(hi, lo, durability_rating(player) / 100.0)
    p = rules.injury_base_per_possession * risk * fatigue_mult * durability_mult
    return clamp(p, 0.0, 1.0)


def roll_injury(rng: random.Random) -> InjuryRoll:
    """Severity + duration for an injury that has already been decided to occur."""
    severity = weighted_choice(rng, [(name, spec[0]) for name, spec in INJURY_SEVERITIES.items()])
    _, lo, hi, impact = INJURY_SEVERITIES[severity]
    injury_type = rng.choice(INJURY_NAMES[severity])
    return InjuryRoll(
        injury_type=injury_type,
        severity=severity,
        games_out=rng.randint(lo, hi),
        permanent_impact=impact,
    )
