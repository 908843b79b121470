from __future__ import annotations

"""Transient records exchanged between the possession engine, the game loop and
the stat aggregator."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from badges.synergy import NO_EFFECTS, LineupEffects
from ratings.types import CoachingScheme, Player

# Stat delta field names (one row per involved player).
DELTA_FIELDS: Tuple[str, ...] = (
    "pts", "fgm", "fga", "tpm", "tpa", "ftm", "fta",
    "orb", "drb", "ast", "stl", "blk", "tov", "pf",
)


@dataclass(frozen=True, slots=True)
class StatDelta:
    player_id: str
    team_id: str
    pts: int = 0
    fgm: int = 0
    fga: int = 0
    tpm: int = 0
    tpa: int = 0
    ftm: int = 0
    fta: int = 0
    orb: int = 0
    drb: int = 0
    ast: int = 0
    stl: int = 0
    blk: int = 0
    tov: int = 0
    pf: int = 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"player_id": self.player_id, "team_id": self.team_id}
        for f in DELTA_FIELDS:
            v = getattr(self, f)
            if v:
                out[f] = v
        return out


@dataclass(frozen=True, slots=True)
class OnCourtTeam:
    """One side of a possession: five players plus in-game state the engine reads."""

    team_id: str
    players: Tuple[Player, ...]
    scheme: CoachingScheme = field(default_factory=CoachingScheme)
    chemistry: float = 0.0
    fatigue: Mapping[str, float] = field(default_factory=dict)
    fouls: Mapping[str, int] = field(default_factory=dict)
    team_fouls: int = 0

    def fatigue_of(self, player_id: str) -> float:
        return float(self.fatigue.get(player_id, 0.0))

    def fouls_of(self, player_id: str) -> int:
        return int(self.fouls.get(player_id, 0))

    @property
    def player_ids(self) -> Tuple[str, ...]:
        return tuple(p.player_id for p in self.players)


@dataclass(frozen=True, slots=True)
class PossessionModifiers:
    offense: LineupEffects = NO_EFFECTS
    defense: LineupEffects = NO_EFFECTS
    period: int = 1
    score_margin: int = 0  # offense score minus defense score at possession start
    regulation_periods: int = 4


@dataclass(frozen=True, slots=True)
class PossessionOutcome:
    seq: int
    period: int
    offense_team_id: str
    defense_team_id: str
    ball_handler_id: Optional[str]
    action: str  # drive | spot_up | post_up | pass | turnover | foul | noop
    result: str  # made | missed | turnover | foul | noop
    points: int
    elapsed: float
    game_clock: float  # remaining clock at possession start
    offense_on_court: Tuple[str, ...]
    defense_on_court: Tuple[str, ...]
    deltas: Tuple[StatDelta, ...] = ()
    shot_type: Optional[str] = None
    shooter_id: Optional[str] = None
    assister_id: Optional[str] = None
    shot_probability: Optional[float] = None
    second_chances: int = 0
    forced: bool = False
    fouls: Tuple[str, ...] = ()  # player ids charged with a personal foul
    synergies: Tuple[str, ...] = ()  # synergy ids that shaped the shot
    error: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.result == "noop"

    def to_summary(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "period": self.period,
            "clock": round(self.game_clock, 1),
            "offense": self.offense_team_id,
            "defense": self.defense_team_id,
            "ball_handler": self.ball_handler_id,
            "action": self.action,
            "result": self.result,
            "shot_type": self.shot_type,
            "shooter": self.shooter_id,
            "assister": self.assister_id,
            "points": self.points,
            "elapsed": round(self.elapsed, 2),
            "second_chances": self.second_chances,
            "forced": self.forced,
            "fouls": list(self.fouls),
            "synergies": list(self.synergies),
            "error": self.error,
        }


def noop_outcome(
    *,
    seq: int,
    period: int,
    offense: OnCourtTeam,
    defense: OnCourtTeam,
    elapsed: float,
    game_clock: float,
    error: str,
) -> PossessionOutcome:
    """Neutral possession: clock runs, nobody is credited with anything."""
    return PossessionOutcome(
        seq=seq,
        period=period,
        offense_team_id=offense.team_id,
        defense_team_id=defense.team_id,
        ball_handler_id=None,
        action="noop",
        result="noop",
        points=0,
        elapsed=float(elapsed),
        game_clock=float(game_clock),
        offense_on_court=offense.player_ids,
        defense_on_court=defense.player_ids,
        error=error,
    )


@dataclass(frozen=True, slots=True)
class GameEvent:
    """Structured play-by-play event for downstream consumers (UI, persistence)."""

    kind: str  # score | badge_synergy | injury | substitution | timeout | foul_out | period_end | game_end
    period: int
    clock: float
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "period": self.period,
            "clock": round(self.clock, 1),
            "team_id": self.team_id,
            "player_id": self.player_id,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True, slots=True)
class InjuryRecord:
    player_id: str
    team_id: str
    injury_type: str
    severity: str
    games_out: int
    permanent_impact: int
    period: int
    clock: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "team_id": self.team_id,
            "injury_type": self.injury_type,
            "severity": self.severity,
            "games_out": self.games_out,
            "permanent_impact": self.permanent_impact,
            "period": self.period,
            "clock": round(self.clock, 1),
        }
