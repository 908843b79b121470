from __future__ import annotations

"""Per-team in-game state and substitution policy.

TeamGameState is owned by the GameSimulator for one game. It tracks who is on
court, in-game fatigue, personal/team fouls, timeouts and players unavailable for
the period (foul trouble) or the game (injury, foul out).

Substitution rules, evaluated after every possession (``rotate``):
1) players out for the game (injured / fouled out) are replaced; with nobody
   left on the bench an injured player leaves the court (short-handed) while a
   fouled-out player stays on, so fouls never shrink a lineup below five
2) foul trouble: fouls >= per-period limit -> bench for the rest of the period
3) fatigue > SUB threshold -> best rested bench player at the same position
4) benched starters return once fatigue < RESTORE threshold; in a close late
   game the bar is the SUB threshold instead (closing lineup)
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set

from badges.catalog import BadgeCatalog
from badges.synergy import LineupEffects, SynergyCache
from engine_errors import AttributeDataError, RosterError
from ratings.config import DEFAULT_ATTRIBUTE
from ratings.overall import overall_rating
from ratings.types import Player, Team

from . import fatigue as fat
from .config import SimRules
from .models import OnCourtTeam

logger = logging.getLogger(__name__)

LINEUP_SIZE = 5


@dataclass(frozen=True, slots=True)
class Substitution:
    team_id: str
    player_out: str
    player_in: str
    reason: str  # fatigue | foul_trouble | foul_out | injury | restore | closing


def lineup_overall(player: Player) -> int:
    """Overall used for lineup ordering; corrupt ratings rank as an average player."""
    try:
        return overall_rating(player)
    except AttributeDataError:
        logger.warning("OVERALL_UNAVAILABLE player_id=%s", player.player_id, exc_info=True)
        return DEFAULT_ATTRIBUTE


def pick_starters(team: Team, eligible: Sequence[Player], overall: Dict[str, int]) -> List[Player]:
    """Listed starters that are eligible, filled up by overall rating."""
    by_id = {p.player_id: p for p in eligible}
    starters = [by_id[pid] for pid in team.starters if pid in by_id][:LINEUP_SIZE]
    if len(starters) < LINEUP_SIZE:
        chosen = {p.player_id for p in starters}
        rest = sorted(
            (p for p in eligible if p.player_id not in chosen),
            key=lambda p: (-overall[p.player_id], p.player_id),
        )
        starters.extend(rest[: LINEUP_SIZE - len(starters)])
    return starters


class TeamGameState:
    def __init__(
        self,
        team: Team,
        *,
        rules: SimRules,
        catalog: Optional[BadgeCatalog] = None,
        synergies_enabled: bool = True,
    ) -> None:
        eligible = list(team.eligible_players())
        if len(eligible) < LINEUP_SIZE:
            raise RosterError(
                f"team {team.team_id} has {len(eligible)} eligible players",
                {"team_id": team.team_id, "eligible": len(eligible), "required": LINEUP_SIZE},
            )
        self.team = team
        self.team_id = team.team_id
        self.rules = rules
        self.players: List[Player] = eligible
        self.overall: Dict[str, int] = {p.player_id: lineup_overall(p) for p in eligible}
        self.starters: List[Player] = pick_starters(team, eligible, self.overall)
        self.starter_ids: Set[str] = {p.player_id for p in self.starters}
        self.on_court: List[Player] = list(self.starters)

        self.fatigue: Dict[str, float] = fat.initial_fatigue(eligible)
        self.fouls: Dict[str, int] = {}
        self.team_fouls = 0
        self.timeouts = int(rules.timeouts_per_game)
        self.benched_for_period: Set[str] = set()
        self.out_for_game: Set[str] = set()
        self.injured: Set[str] = set()

        self.chemistry = team.chemistry_modifier()
        self.pace = fat.scheme_pace(team.scheme.offense)
        self._cache = SynergyCache(catalog, enabled=synergies_enabled)

    # -- views --

    @property
    def on_court_ids(self) -> List[str]:
        return [p.player_id for p in self.on_court]

    def bench(self) -> List[Player]:
        on = set(self.on_court_ids)
        return [p for p in self.players if p.player_id not in on]

    def effects(self) -> LineupEffects:
        return self._cache.get(self.on_court)

    def view(self) -> OnCourtTeam:
        return OnCourtTeam(
            team_id=self.team_id,
            players=tuple(self.on_court),
            scheme=self.team.scheme,
            chemistry=self.chemistry,
            fatigue=dict(self.fatigue),
            fouls=dict(self.fouls),
            team_fouls=self.team_fouls,
        )

    # -- bookkeeping --

    def start_period(self, period: int) -> None:
        self.team_fouls = 0
        self.benched_for_period.clear()
        if period > 1:
            fat.recover(self.fatigue, self.fatigue.keys(), self.rules.fatigue_period_break_recovery)

    def add_fouls(self, player_ids: Sequence[str]) -> List[str]:
        """Charge personal + team fouls. Returns players who just fouled out."""
        fouled_out: List[str] = []
        for pid in player_ids:
            self.fouls[pid] = self.fouls.get(pid, 0) + 1
            self.team_fouls += 1
            if self.fouls[pid] >= self.rules.foul_out and pid not in self.out_for_game:
                self.out_for_game.add(pid)
                fouled_out.append(pid)
        return fouled_out

    def mark_injured(self, player_id: str) -> None:
        self.injured.add(player_id)
        self.out_for_game.add(player_id)

    def tick_fatigue(self) -> None:
        fat.apply_possession(
            self.fatigue,
            self.on_court,
            self.bench(),
            pace=self.pace,
            team_modifier=self.team.fatigue_modifier,
            rules=self.rules,
        )

    def call_timeout(self) -> bool:
        if self.timeouts <= 0:
            return False
        self.timeouts -= 1
        fat.recover(self.fatigue, self.on_court_ids, self.rules.fatigue_timeout_recovery)
        return True

    # -- substitutions --

    def _available_bench(self, *, max_fatigue: Optional[float] = None) -> List[Player]:
        out = []
        for p in self.bench():
            pid = p.player_id
            if pid in self.out_for_game or pid in self.benched_for_period:
                continue
            if max_fatigue is not None and self.fatigue.get(pid, 0.0) >= max_fatigue:
                continue
            out.append(p)
        return out

    def _replacement_for(self, player: Player, *, max_fatigue: Optional[float] = None) -> Optional[Player]:
        candidates = self._available_bench(max_fatigue=max_fatigue)
        if not candidates:
            return None
        pos = player.primary_position
        same = [p for p in candidates if pos in p.positions]
        pool = same or candidates
        return max(pool, key=lambda p: (self.overall[p.player_id], -self.fatigue.get(p.player_id, 0.0), p.player_id))

    def _swap(self, out: Player, inn: Player, reason: str) -> Substitution:
        idx = self.on_court_ids.index(out.player_id)
        self.on_court[idx] = inn
        self._cache.invalidate()
        return Substitution(self.team_id, out.player_id, inn.player_id, reason)

    def rotate(self, *, period: int, closing: bool) -> List[Substitution]:
        """Apply the substitution rules once and return the swaps made.

        Forced removals come first. An injured player with no eligible
        replacement leaves the court; a fouled-out player with no eligible
        replacement stays on, and is swapped out as soon as one becomes available.
        A short-handed lineup is refilled from the bench when possible.
        """
        subs: List[Substitution] = []
        rules = self.rules

        # 1) forced: injured / fouled out
        for p in list(self.on_court):
            if p.player_id not in self.out_for_game:
                continue
            repl = self._replacement_for(p)
            if repl is None:
                if p.player_id in self.injured:
                    # short-handed rather than playing an injured player
                    self.on_court.remove(p)
                    self._cache.invalidate()
                    logger.warning("LINEUP_SHORT_HANDED team_id=%s player_id=%s", self.team_id, p.player_id)
                continue
            subs.append(self._swap(p, repl, "injury" if p.player_id in self.injured else "foul_out"))

        # 2) foul trouble
        limit = rules.foul_trouble_limit(period)
        for p in list(self.on_court):
            n = self.fouls.get(p.player_id, 0)
            if n < limit or p.player_id in self.out_for_game:
                continue
            repl = self._replacement_for(p)
            if repl is None:
                continue
            self.benched_for_period.add(p.player_id)
            subs.append(self._swap(p, repl, "foul_trouble"))

        # 3) fatigue
        for p in list(self.on_court):
            if self.fatigue.get(p.player_id, 0.0) <= rules.sub_fatigue_threshold:
                continue
            repl = self._replacement_for(p, max_fatigue=rules.sub_fatigue_threshold)
            if repl is None:
                continue
            subs.append(self._swap(p, repl, "fatigue"))

        # 4) restore starters
        bar = rules.sub_fatigue_threshold if closing else rules.sub_restore_threshold
        for s in self.starters:
            sid = s.player_id
            if sid in self.on_court_ids or sid in self.out_for_game or sid in self.benched_for_period:
                continue
            if self.fatigue.get(sid, 0.0) >= bar:
                continue
            target = self._bench_target_for(s)
            if target is None:
                continue
            subs.append(self._swap(target, s, "closing" if closing else "restore"))

        # refill a short-handed lineup if someone became available
        while len(self.on_court) < LINEUP_SIZE:
            avail = self._available_bench()
            if not avail:
                break
            pick = max(avail, key=lambda p: (self.overall[p.player_id], p.player_id))
            self.on_court.append(pick)
            self._cache.invalidate()

        return subs

    def _bench_target_for(self, starter: Player) -> Optional[Player]:
        """On-court non-starter to send back to the bench for a returning starter."""
        subs_on = [p for p in self.on_court if p.player_id not in self.starter_ids]
        if not subs_on:
            return None
        pos = starter.primary_position
        same = [p for p in subs_on if pos in p.positions]
        pool = same or subs_on
        return max(pool, key=lambda p: (self.fatigue.get(p.player_id, 0.0), p.player_id))
