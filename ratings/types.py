from __future__ import annotations

"""Public value objects for players and teams.

Everything here is a frozen dataclass. Simulation, aggregation and evolution never
mutate these objects in place; evolution produces new instances via
``dataclasses.replace``.
"""

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from engine_errors import AttributeDataError

from .config import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    BADGE_LEVELS,
    CATEGORIES,
    CHEMISTRY_CAP,
    DEFAULT_ATTRIBUTE,
    DEFENSE_SCHEMES,
    DEFAULT_MORALE,
    INJURY_RISK_TIERS,
    OFFENSE_SCHEMES,
    POSITIONS,
)


@dataclass(frozen=True, slots=True)
class Badge:
    badge_id: str
    level: str = "bronze"  # bronze | silver | gold | hof

    def __post_init__(self) -> None:
        if self.level not in BADGE_LEVELS:
            raise ValueError(f"unknown badge level: {self.level!r}")

    @property
    def rank(self) -> int:
        return BADGE_LEVELS.index(self.level) + 1


@dataclass(frozen=True, slots=True)
class InjuryState:
    """Active injury. ``games_remaining`` counts down after each game missed."""

    injury_type: str  # e.g. sprained_ankle, acl_tear
    games_remaining: int
    permanent_impact: int = 0  # physical attribute loss applied when healed
    severity: str = "minor"  # minor | moderate | severe | season_ending

    @property
    def is_active(self) -> bool:
        return int(self.games_remaining) > 0


@dataclass(frozen=True, slots=True)
class Tendencies:
    """Per-player decision weights (0..100)."""

    usage: float = 50.0
    drive: float = 50.0
    spot_up: float = 50.0
    post_up: float = 30.0
    passing: float = 50.0
    three_rate: float = 40.0


@dataclass(frozen=True, slots=True)
class StreakState:
    kind: str = "none"  # none | hot | cold
    length: int = 0


@dataclass(frozen=True, slots=True)
class PlayerCounters:
    """Running season/career totals."""

    games: int = 0
    minutes: float = 0.0
    points: int = 0
    rebounds: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    fgm: int = 0
    fga: int = 0
    tpm: int = 0
    tpa: int = 0
    ftm: int = 0
    fta: int = 0


@dataclass(frozen=True, slots=True)
class CoachingScheme:
    offense: str = "balanced"  # balanced | pace_and_space | post_heavy | iso_heavy | run_and_gun
    defense: str = "man"  # man | zone | switch_all | press

    def __post_init__(self) -> None:
        if self.offense not in OFFENSE_SCHEMES:
            raise ValueError(f"unknown offensive scheme: {self.offense!r}")
        if self.defense not in DEFENSE_SCHEMES:
            raise ValueError(f"unknown defensive scheme: {self.defense!r}")


@dataclass(frozen=True, slots=True)
class Player:
    player_id: str
    name: str
    positions: Tuple[str, ...] = ("SF",)

    offense: Mapping[str, int] = field(default_factory=dict)
    defense: Mapping[str, int] = field(default_factory=dict)
    physical: Mapping[str, int] = field(default_factory=dict)
    mental: Mapping[str, int] = field(default_factory=dict)

    badges: Tuple[Badge, ...] = ()
    tendencies: Tendencies = field(default_factory=Tendencies)

    fatigue: float = 0.0
    injury: Optional[InjuryState] = None
    injury_risk: str = "M"

    potential: int = 75
    age: int = 25
    height_in: int = 78
    morale: float = DEFAULT_MORALE

    recent_performances: Tuple[float, ...] = ()
    streak: StreakState = field(default_factory=StreakState)
    # "category.attribute" -> fractional evolution carry in (-1, 1)
    attribute_progress: Mapping[str, float] = field(default_factory=dict)

    season: PlayerCounters = field(default_factory=PlayerCounters)
    career: PlayerCounters = field(default_factory=PlayerCounters)

    def __post_init__(self) -> None:
        if self.injury_risk not in INJURY_RISK_TIERS:
            raise ValueError(f"unknown injury_risk tier: {self.injury_risk!r}")
        for pos in self.positions:
            if pos not in POSITIONS:
                raise ValueError(f"unknown position: {pos!r}")

    @property
    def primary_position(self) -> str:
        return self.positions[0] if self.positions else "SF"

    @property
    def is_guard(self) -> bool:
        return self.primary_position in ("PG", "SG")

    @property
    def is_available(self) -> bool:
        return self.injury is None or not self.injury.is_active

    def attributes(self, category: str) -> Mapping[str, int]:
        if category not in CATEGORIES:
            raise KeyError(category)
        return getattr(self, category)

    def rating(self, category: str, name: str) -> float:
        """Attribute value with validation.

        Missing attributes fall back to DEFAULT_ATTRIBUTE. Anything that is not a
        finite number within [0, 99] raises AttributeDataError.
        """
        raw = self.attributes(category).get(name, DEFAULT_ATTRIBUTE)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise AttributeDataError(
                f"non-numeric attribute {category}.{name}",
                {"player_id": self.player_id, "value": repr(raw)},
            )
        value = float(raw)
        if math.isnan(value) or value < ATTRIBUTE_MIN or value > ATTRIBUTE_MAX:
            raise AttributeDataError(
                f"attribute {category}.{name} out of range",
                {"player_id": self.player_id, "value": value},
            )
        return value

    def badge_rank(self, badge_id: str) -> int:
        """1..4 for bronze..hof, 0 when the player lacks the badge."""
        for b in self.badges:
            if b.badge_id == badge_id:
                return b.rank
        return 0


@dataclass(frozen=True, slots=True)
class Team:
    team_id: str
    name: str
    roster: Tuple[Player, ...]
    starters: Tuple[str, ...] = ()  # five player ids in slot order PG, SG, SF, PF, C
    scheme: CoachingScheme = field(default_factory=CoachingScheme)
    fatigue_modifier: float = 0.0  # +0.1 = 10% faster in-game fatigue gain
    chemistry_override: Optional[float] = None

    def player(self, player_id: str) -> Player:
        for p in self.roster:
            if p.player_id == player_id:
                return p
        raise KeyError(player_id)

    def eligible_players(self) -> Tuple[Player, ...]:
        return tuple(p for p in self.roster if p.is_available)

    def average_morale(self) -> float:
        if not self.roster:
            return DEFAULT_MORALE
        return sum(float(p.morale) for p in self.roster) / len(self.roster)

    def chemistry_modifier(self) -> float:
        """Team chemistry in [-CHEMISTRY_CAP, +CHEMISTRY_CAP] from roster morale.

        chem = (avg_morale - baseline) / baseline * cap
        """
        if self.chemistry_override is not None:
            return float(self.chemistry_override)
        chem = (self.average_morale() - DEFAULT_MORALE) / DEFAULT_MORALE * CHEMISTRY_CAP
        return max(-CHEMISTRY_CAP, min(CHEMISTRY_CAP, chem))
