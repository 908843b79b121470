from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from boxscore.box import BoxScore, FinalBoxScore, StatLine, finalize
from matchengine.models import InjuryRecord

from app.schemas.sim import PlayerIn


class StatLineIn(BaseModel):
    player_id: str
    team_id: str
    seconds: float = 0.0
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
    plus_minus: int = 0


class InjuryRecordIn(BaseModel):
    player_id: str
    team_id: str
    injury_type: str
    severity: str = "minor"
    games_out: int
    permanent_impact: int = 0
    period: int = 0
    clock: float = 0.0


class PostGameEvolutionRequest(BaseModel):
    game_id: str
    home_team_id: str
    away_team_id: str
    players: List[PlayerIn]
    lines: List[StatLineIn] = Field(default_factory=list)
    injuries: List[InjuryRecordIn] = Field(default_factory=list)

    def final_box(self) -> FinalBoxScore:
        lines = {ln.player_id: StatLine(**ln.model_dump()) for ln in self.lines}
        points: Dict[str, int] = {self.home_team_id: 0, self.away_team_id: 0}
        for ln in lines.values():
            points[ln.team_id] = points.get(ln.team_id, 0) + ln.pts
        return finalize(BoxScore(self.home_team_id, self.away_team_id, lines, points))

    def injury_records(self) -> List[InjuryRecord]:
        return [InjuryRecord(**r.model_dump()) for r in self.injuries]


class WeeklyEvolutionRequest(BaseModel):
    week_id: str
    players: List[PlayerIn]
    minutes: Dict[str, float] = Field(default_factory=dict)  # player_id -> minutes played this week
    games: Dict[str, int] = Field(default_factory=dict)  # player_id -> games played this week
    facility_level: int = Field(3, ge=1, le=5)
    teammates: Optional[List[PlayerIn]] = None
