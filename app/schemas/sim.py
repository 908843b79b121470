from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ratings.types import (
    Badge,
    CoachingScheme,
    InjuryState,
    Player,
    PlayerCounters,
    StreakState,
    Team,
    Tendencies,
)
from sim.match_runner import GameSpec, LeagueContext


class BadgeIn(BaseModel):
    badge_id: str
    level: str = "bronze"


class InjuryIn(BaseModel):
    injury_type: str
    games_remaining: int
    permanent_impact: int = 0
    severity: str = "minor"


class TendenciesIn(BaseModel):
    usage: float = 50.0
    drive: float = 50.0
    spot_up: float = 50.0
    post_up: float = 30.0
    passing: float = 50.0
    three_rate: float = 40.0


class StreakIn(BaseModel):
    kind: str = "none"
    length: int = 0


class PlayerIn(BaseModel):
    player_id: str
    name: str = ""
    positions: List[str] = Field(default_factory=lambda: ["SF"])

    offense: Dict[str, Any] = Field(default_factory=dict)
    defense: Dict[str, Any] = Field(default_factory=dict)
    physical: Dict[str, Any] = Field(default_factory=dict)
    mental: Dict[str, Any] = Field(default_factory=dict)

    badges: List[BadgeIn] = Field(default_factory=list)
    tendencies: TendenciesIn = Field(default_factory=TendenciesIn)

    fatigue: float = 0.0
    injury: Optional[InjuryIn] = None
    injury_risk: str = "M"

    potential: int = 75
    age: int = 25
    height_in: int = 78
    morale: float = 80.0

    # values are validated by the evolution engine, not here
    recent_performances: List[Any] = Field(default_factory=list)
    streak: StreakIn = Field(default_factory=StreakIn)
    attribute_progress: Dict[str, float] = Field(default_factory=dict)

    season: Dict[str, Any] = Field(default_factory=dict)
    career: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> Player:
        return Player(
            player_id=self.player_id,
            name=self.name or self.player_id,
            positions=tuple(self.positions),
            offense=dict(self.offense),
            defense=dict(self.defense),
            physical=dict(self.physical),
            mental=dict(self.mental),
            badges=tuple(Badge(b.badge_id, b.level) for b in self.badges),
            tendencies=Tendencies(**self.tendencies.model_dump()),
            fatigue=self.fatigue,
            injury=InjuryState(**self.injury.model_dump()) if self.injury is not None else None,
            injury_risk=self.injury_risk,
            potential=self.potential,
            age=self.age,
            height_in=self.height_in,
            morale=self.morale,
            recent_performances=tuple(self.recent_performances),
            streak=StreakState(**self.streak.model_dump()),
            attribute_progress=dict(self.attribute_progress),
            season=PlayerCounters(**self.season),
            career=PlayerCounters(**self.career),
        )


class SchemeIn(BaseModel):
    offense: str = "balanced"
    defense: str = "man"


class TeamIn(BaseModel):
    team_id: str
    name: str = ""
    roster: List[PlayerIn]
    starters: List[str] = Field(default_factory=list)
    scheme: SchemeIn = Field(default_factory=SchemeIn)
    fatigue_modifier: float = 0.0
    chemistry_override: Optional[float] = None

    def to_domain(self) -> Team:
        return Team(
            team_id=self.team_id,
            name=self.name or self.team_id,
            roster=tuple(p.to_domain() for p in self.roster),
            starters=tuple(self.starters),
            scheme=CoachingScheme(self.scheme.offense, self.scheme.defense),
            fatigue_modifier=self.fatigue_modifier,
            chemistry_override=self.chemistry_override,
        )


class SimGameRequest(BaseModel):
    home: TeamIn
    away: TeamIn
    game_id: str = ""
    seed: Optional[int] = None
    synergies_enabled: bool = True
    rules: Dict[str, Any] = Field(default_factory=dict)  # SimRules overrides


class GameSpecIn(BaseModel):
    game_id: str
    home: TeamIn
    away: TeamIn
    seed: Optional[int] = None

    def to_domain(self) -> GameSpec:
        return GameSpec(self.game_id, self.home.to_domain(), self.away.to_domain(), self.seed)


class BatchRequest(BaseModel):
    games: List[GameSpecIn]
    season_id: str = ""
    current_date: Optional[str] = None  # in-game date (YYYY-MM-DD)
    phase: str = "regular"

    def context(self) -> LeagueContext:
        return LeagueContext(season_id=self.season_id, current_date=self.current_date, phase=self.phase)

    def specs(self) -> Tuple[GameSpec, ...]:
        return tuple(g.to_domain() for g in self.games)
