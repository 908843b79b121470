from __future__ import annotations

"""Season / career aggregation: the same fold as the box score, applied across
games. Re-accumulating a game id that was already folded is a no-op."""

import logging
import threading
from dataclasses import replace
from typing import Dict, Mapping, Set

from ratings.types import Player, PlayerCounters

from .box import COUNTER_FIELDS, FinalBoxScore, StatLine

logger = logging.getLogger(__name__)


class SeasonLedger:
    """Running per-player and per-team totals for one season."""

    def __init__(self, season_id: str = "") -> None:
        self.season_id = str(season_id)
        self._lock = threading.RLock()
        self._applied: Set[str] = set()
        self._players: Dict[str, Dict[str, float]] = {}
        self._teams: Dict[str, Dict[str, float]] = {}

    @property
    def games_applied(self) -> int:
        with self._lock:
            return len(self._applied)

    def accumulate(self, game_id: str, final: FinalBoxScore) -> bool:
        """Fold one game. Returns False when the game id was already applied."""
        gid = str(game_id)
        with self._lock:
            if gid in self._applied:
                logger.info("SEASON_LEDGER_DUPLICATE season_id=%s game_id=%s", self.season_id, gid)
                return False
            for fl in final.players:
                ln = fl.line
                if ln.seconds <= 0:
                    continue
                _fold(self._players.setdefault(ln.player_id, {}), ln)
            for tid, fl in final.teams.items():
                row = self._teams.setdefault(tid, {})
                _fold(row, fl.line)
                won = fl.line.pts > _opponent_points(final, tid)
                row["wins"] = row.get("wins", 0) + (1 if won else 0)
                row["losses"] = row.get("losses", 0) + (0 if won else 1)
            self._applied.add(gid)
            return True

    def player_totals(self, player_id: str) -> Mapping[str, float]:
        with self._lock:
            return dict(self._players.get(player_id, {}))

    def team_totals(self, team_id: str) -> Mapping[str, float]:
        with self._lock:
            return dict(self._teams.get(team_id, {}))


def _opponent_points(final: FinalBoxScore, team_id: str) -> int:
    other = final.away_team_id if team_id == final.home_team_id else final.home_team_id
    return final.teams[other].line.pts


def _fold(row: Dict[str, float], ln: StatLine) -> None:
    row["games"] = row.get("games", 0) + 1
    row["seconds"] = row.get("seconds", 0.0) + ln.seconds
    for f in COUNTER_FIELDS:
        row[f] = row.get(f, 0) + getattr(ln, f)


def _roll(c: PlayerCounters, ln: StatLine) -> PlayerCounters:
    return replace(
        c,
        games=c.games + 1,
        minutes=round(c.minutes + ln.minutes, 2),
        points=c.points + ln.pts,
        rebounds=c.rebounds + ln.reb,
        offensive_rebounds=c.offensive_rebounds + ln.orb,
        defensive_rebounds=c.defensive_rebounds + ln.drb,
        assists=c.assists + ln.ast,
        steals=c.steals + ln.stl,
        blocks=c.blocks + ln.blk,
        turnovers=c.turnovers + ln.tov,
        fouls=c.fouls + ln.pf,
        fgm=c.fgm + ln.fgm,
        fga=c.fga + ln.fga,
        tpm=c.tpm + ln.tpm,
        tpa=c.tpa + ln.tpa,
        ftm=c.ftm + ln.ftm,
        fta=c.fta + ln.fta,
    )


def roll_player_counters(player: Player, line: StatLine) -> Player:
    """Player with season and career counters advanced by one game line.

    A line with no court time (DNP) leaves the counters untouched.
    """
    if line.seconds <= 0:
        return player
    return replace(player, season=_roll(player.season, line), career=_roll(player.career, line))
