from __future__ import annotations

"""Tuning parameters for badges and badge synergies."""

from typing import Dict, Tuple

from ratings.config import BADGE_LEVELS

# bronze=1 .. hof=4
LEVEL_RANK: Dict[str, int] = {lvl: i + 1 for i, lvl in enumerate(BADGE_LEVELS)}

# Stacking ceiling for synergy modifiers on a single attribute (+40%).
SYNERGY_CEILING: float = 0.40

# Valid synergy beneficiaries:
# - "a" / "b": the holder of badge_a / badge_b
# - "both": both participants
# - "team": every on-court teammate (per-team modifier)
BENEFICIARIES: Tuple[str, ...] = ("a", "b", "both", "team")

SHOT_TYPES: Tuple[str, ...] = ("rim", "post", "mid", "three")

# ---------------------------------------------------------------------------
# Individual badge effect channels
# ---------------------------------------------------------------------------

# effect key -> (channel, shot types it applies to)
# Channels:
# - shot: relative make-probability boost for the badge holder when shooting
# - contest: added contest level when the holder is the primary defender
# - steal / block / ball_security / rebound / assist: flat event-chance boosts
# Keys not listed here are catalog data the possession model does not consume.
EFFECT_CHANNELS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "catchShootBoost": ("shot", ("three",)),
    "cornerThreeBoost": ("shot", ("three",)),
    "deepRangeBoost": ("shot", ("three",)),
    "contestReduction": ("shot", ("three", "mid")),
    "movingShotBoost": ("shot", ("mid",)),
    "offDribbleBoost": ("shot", ("mid", "three")),
    "setShotBoost": ("shot", ("mid",)),
    "contestedLayupBoost": ("shot", ("rim",)),
    "contactFinishBoost": ("shot", ("rim",)),
    "floaterBoost": ("shot", ("rim",)),
    "giantSlayerBoost": ("shot", ("rim",)),
    "rollerFinishBoost": ("shot", ("rim",)),
    "paintScoringBoost": ("shot", ("rim", "post")),
    "postMoveBoost": ("shot", ("post",)),
    "postFadeBoost": ("shot", ("post",)),
    "postStrengthBoost": ("shot", ("post",)),
    "hookShotBoost": ("shot", ("post",)),
    "perimeterDefBoost": ("contest", ("mid", "three")),
    "contestBoost": ("contest", SHOT_TYPES),
    "rimProtectionBoost": ("contest", ("rim",)),
    "paintDefBoost": ("contest", ("rim", "post")),
    "postDefBoost": ("contest", ("post",)),
    "postDefStrength": ("contest", ("post",)),
    "stealChanceBoost": ("steal", ()),
    "onBallStealBoost": ("steal", ()),
    "chaseDownBlockBoost": ("block", ()),
    "aerialBlockBoost": ("block", ()),
    "ballSecurityBoost": ("ball_security", ()),
    "stripResistance": ("ball_security", ()),
    "boxOutBoost": ("rebound", ()),
    "reboundRangeBoost": ("rebound", ()),
    "assistBoost": ("assist", ()),
}

# ---------------------------------------------------------------------------
# Roster-level synergy queries (development / chemistry)
# ---------------------------------------------------------------------------

# Development boost per synergy, keyed by min(level_a, level_b).
DEVELOPMENT_BOOST_BY_MIN_LEVEL: Dict[int, float] = {1: 0.03, 2: 0.05, 3: 0.06, 4: 0.08}
DEVELOPMENT_BOOST_MAX: float = 0.15

# A pair with at least this many gold+ synergies is a "dynamic duo".
DYNAMIC_DUO_MIN_SYNERGIES: int = 2
DYNAMIC_DUO_MIN_RANK: int = 3

# Team chemistry points per distinct synergy pair on the roster.
CHEMISTRY_PER_PAIR: int = 2
