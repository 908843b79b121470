from __future__ import annotations

"""Box score fold.

``apply(outcome, box)`` is a pure fold: it returns a new ``BoxScore`` and never
mutates the input. Each box carries a watermark (last applied possession seq);
outcomes at or below it are ignored, so replaying a log or retrying a persist
never double-counts. Possession seqs start at 1; anything lower is rejected.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from matchengine.models import PossessionOutcome

COUNTER_FIELDS: Tuple[str, ...] = (
    "pts", "fgm", "fga", "tpm", "tpa", "ftm", "fta",
    "orb", "drb", "ast", "stl", "blk", "tov", "pf",
)


@dataclass(frozen=True, slots=True)
class StatLine:
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

    @property
    def reb(self) -> int:
        return self.orb + self.drb

    @property
    def minutes(self) -> float:
        return self.seconds / 60.0


@dataclass(frozen=True, slots=True)
class BoxScore:
    home_team_id: str
    away_team_id: str
    lines: Mapping[str, StatLine] = field(default_factory=dict)
    team_points: Mapping[str, int] = field(default_factory=dict)
    watermark: int = 0

    def line(self, player_id: str) -> Optional[StatLine]:
        return self.lines.get(player_id)

    def points(self, team_id: str) -> int:
        return int(self.team_points.get(team_id, 0))

    def team_lines(self, team_id: str) -> List[StatLine]:
        return [ln for ln in self.lines.values() if ln.team_id == team_id]


def empty_box(
    home_team_id: str,
    away_team_id: str,
    home_player_ids: Iterable[str] = (),
    away_player_ids: Iterable[str] = (),
) -> BoxScore:
    """Fresh box with a zero line for every dressed player (DNPs included)."""
    lines: Dict[str, StatLine] = {}
    for pid in home_player_ids:
        lines[pid] = StatLine(pid, home_team_id)
    for pid in away_player_ids:
        lines[pid] = StatLine(pid, away_team_id)
    return BoxScore(
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        lines=lines,
        team_points={home_team_id: 0, away_team_id: 0},
    )


def _bump(line: StatLine, **inc: Any) -> StatLine:
    return replace(line, **{k: getattr(line, k) + v for k, v in inc.items() if v})


def apply(outcome: "PossessionOutcome", box: BoxScore) -> BoxScore:
    if outcome.seq < 1:
        raise ValueError(f"possession seq must be >= 1 (got {outcome.seq})")
    if outcome.seq <= box.watermark:
        return box

    lines: Dict[str, StatLine] = dict(box.lines)
    team_points: Dict[str, int] = dict(box.team_points)

    def _get(pid: str, team_id: str) -> StatLine:
        ln = lines.get(pid)
        return ln if ln is not None else StatLine(pid, team_id)

    scored: Dict[str, int] = {}
    for d in outcome.deltas:
        inc = {f: getattr(d, f) for f in COUNTER_FIELDS}
        lines[d.player_id] = _bump(_get(d.player_id, d.team_id), **inc)
        if d.pts:
            scored[d.team_id] = scored.get(d.team_id, 0) + d.pts

    off_pts = scored.get(outcome.offense_team_id, 0)
    def_pts = scored.get(outcome.defense_team_id, 0)
    margin = off_pts - def_pts
    for pid in outcome.offense_on_court:
        lines[pid] = _bump(_get(pid, outcome.offense_team_id), seconds=outcome.elapsed, plus_minus=margin)
    for pid in outcome.defense_on_court:
        lines[pid] = _bump(_get(pid, outcome.defense_team_id), seconds=outcome.elapsed, plus_minus=-margin)

    for tid, pts in scored.items():
        team_points[tid] = team_points.get(tid, 0) + pts

    return replace(box, lines=lines, team_points=team_points, watermark=outcome.seq)


def replay(outcomes: Iterable["PossessionOutcome"], box: BoxScore) -> BoxScore:
    for o in outcomes:
        box = apply(o, box)
    return box


# ---------------------------------------------------------------------------
# Finalization
# ---------------------------------------------------------------------------


def _pct(made: int, att: int) -> Optional[float]:
    if att <= 0:
        return None
    return round(made / att, 3)


@dataclass(frozen=True, slots=True)
class FinalLine:
    line: StatLine
    fg_pct: Optional[float]
    tp_pct: Optional[float]
    ft_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        ln = self.line
        return {
            "PlayerID": ln.player_id,
            "TeamID": ln.team_id,
            "MIN": round(ln.minutes, 1),
            "PTS": ln.pts,
            "FGM": ln.fgm,
            "FGA": ln.fga,
            "FG%": self.fg_pct,
            "3PM": ln.tpm,
            "3PA": ln.tpa,
            "3P%": self.tp_pct,
            "FTM": ln.ftm,
            "FTA": ln.fta,
            "FT%": self.ft_pct,
            "ORB": ln.orb,
            "DRB": ln.drb,
            "REB": ln.reb,
            "AST": ln.ast,
            "STL": ln.stl,
            "BLK": ln.blk,
            "TOV": ln.tov,
            "PF": ln.pf,
            "+/-": ln.plus_minus,
        }


def _final_line(ln: StatLine) -> FinalLine:
    return FinalLine(
        line=ln,
        fg_pct=_pct(ln.fgm, ln.fga),
        tp_pct=_pct(ln.tpm, ln.tpa),
        ft_pct=_pct(ln.ftm, ln.fta),
    )


@dataclass(frozen=True, slots=True)
class FinalBoxScore:
    home_team_id: str
    away_team_id: str
    players: Tuple[FinalLine, ...]
    teams: Mapping[str, FinalLine]  # team totals (player_id == team_id)

    @property
    def home_score(self) -> int:
        return self.teams[self.home_team_id].line.pts

    @property
    def away_score(self) -> int:
        return self.teams[self.away_team_id].line.pts

    def player(self, player_id: str) -> FinalLine:
        for fl in self.players:
            if fl.line.player_id == player_id:
                return fl
        raise KeyError(player_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "players": [fl.to_dict() for fl in self.players],
            "teams": {tid: fl.to_dict() for tid, fl in self.teams.items()},
        }


def finalize(box: BoxScore) -> FinalBoxScore:
    """Derive percentages and team totals. Zero attempts report None, not 0."""
    players = tuple(_final_line(ln) for ln in box.lines.values())
    teams: Dict[str, FinalLine] = {}
    for tid in (box.home_team_id, box.away_team_id):
        total = StatLine(tid, tid)
        for ln in box.team_lines(tid):
            total = _bump(total, seconds=ln.seconds, **{f: getattr(ln, f) for f in COUNTER_FIELDS})
        teams[tid] = _final_line(total)
    return FinalBoxScore(
        home_team_id=box.home_team_id,
        away_team_id=box.away_team_id,
        players=players,
        teams=teams,
    )
