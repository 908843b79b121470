from __future__ import annotations

"""Full-game driver.

State machine: scheduled -> in_progress -> complete.

The simulator owns its GameResult for the lifetime of the game and is strictly
sequential: possession N+1 reads the state left by possession N. All randomness
comes from one injected ``random.Random``.
"""

import logging
import random
from typing import Dict, Optional

from badges.catalog import BadgeCatalog
from engine_errors import AttributeDataError, GameUnresolvedError, RosterError
from ratings.types import Team

from . import fatigue as fat
from .config import DEFAULT_RULES, SimRules
from .core import roll, stable_seed
from .injuries import injury_probability, roll_injury
from .models import GameEvent, InjuryRecord, PossessionModifiers, PossessionOutcome, noop_outcome
from .possession import resolve_possession
from .result import GameResult
from .rotation import TeamGameState

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
IN_PROGRESS = "in_progress"
COMPLETE = "complete"


class GameSimulator:
    def __init__(
        self,
        home: Team,
        away: Team,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        rules: SimRules = DEFAULT_RULES,
        catalog: Optional[BadgeCatalog] = None,
        game_id: str = "",
        synergies_enabled: bool = True,
    ) -> None:
        if home.team_id == away.team_id:
            raise RosterError("home and away must be different teams", {"team_id": home.team_id})
        self.home = home
        self.away = away
        self.rules = rules
        self.catalog = catalog
        self.synergies_enabled = bool(synergies_enabled)
        self.game_id = str(game_id or f"{home.team_id}-{away.team_id}")
        if rng is None:
            rng = random.Random(seed if seed is not None else stable_seed(self.game_id, home.team_id, away.team_id))
        self.rng = rng

        self.state = SCHEDULED
        self.period = 0
        self.result: Optional[GameResult] = None
        self._seq = 0
        self._sides: Dict[str, TeamGameState] = {}
        self._injuries_total = 0
        self._injuries_by_team: Dict[str, int] = {}
        self._run_team: Optional[str] = None
        self._run_points = 0

    # ------------------------------------------------------------------

    def _score(self, team_id: str) -> int:
        assert self.result is not None
        return self.result.box.points(team_id)

    def _other(self, side: TeamGameState) -> TeamGameState:
        return self._sides[self.away.team_id] if side.team_id == self.home.team_id else self._sides[self.home.team_id]

    def _event(self, kind: str, clock: float, team_id: Optional[str] = None, player_id: Optional[str] = None, **payload) -> None:
        assert self.result is not None
        self.result.record_event(GameEvent(kind, self.period, float(clock), team_id, player_id, payload))

    def run(self) -> GameResult:
        if self.state != SCHEDULED:
            raise RuntimeError(f"game {self.game_id} already {self.state}")

        home_state = TeamGameState(self.home, rules=self.rules, catalog=self.catalog, synergies_enabled=self.synergies_enabled)
        away_state = TeamGameState(self.away, rules=self.rules, catalog=self.catalog, synergies_enabled=self.synergies_enabled)
        self._sides = {self.home.team_id: home_state, self.away.team_id: away_state}
        self.result = GameResult(
            self.game_id,
            self.home.team_id,
            self.away.team_id,
            [p.player_id for p in self.home.roster],
            [p.player_id for p in self.away.roster],
        )
        self.state = IN_PROGRESS

        rules = self.rules
        jump_winner = home_state if self.rng.random() < 0.5 else away_state
        jump_loser = self._other(jump_winner)
        for period in range(1, rules.regulation_periods + 1):
            # jump-ball winner opens Q1 and Q4, the other team Q2 and Q3
            first = jump_winner if period in (1, rules.regulation_periods) else jump_loser
            self._play_period(period, rules.quarter_seconds, first)

        overtimes = 0
        while self._score(self.home.team_id) == self._score(self.away.team_id):
            overtimes += 1
            if overtimes > rules.max_overtimes:
                raise GameUnresolvedError(
                    f"game {self.game_id} still tied after {rules.max_overtimes} overtimes",
                    {"game_id": self.game_id, "score": self._score(self.home.team_id)},
                )
            first = home_state if self.rng.random() < 0.5 else away_state
            self._play_period(rules.regulation_periods + overtimes, rules.overtime_seconds, first)

        home_pts, away_pts = self._score(self.home.team_id), self._score(self.away.team_id)
        self._event(
            "game_end",
            0.0,
            home=home_pts,
            away=away_pts,
            overtimes=overtimes,
        )
        end_fatigue: Dict[str, float] = {}
        for side in self._sides.values():
            end_fatigue.update(fat.snapshot(side.fatigue))
        self.result.seal(end_fatigue)
        self.state = COMPLETE
        logger.debug(
            "GAME_COMPLETE game_id=%s home=%s away=%s score=%d-%d ot=%d possessions=%d",
            self.game_id, self.home.team_id, self.away.team_id, home_pts, away_pts, overtimes, self._seq,
        )
        return self.result

    # ------------------------------------------------------------------

    def _play_period(self, period: int, seconds: float, first: TeamGameState) -> None:
        assert self.result is not None
        self.period = period
        self.result.start_period()
        for side in self._sides.values():
            side.start_period(period)
        self._run_team, self._run_points = None, 0

        clock = float(seconds)
        offense, defense = first, self._other(first)
        while clock > 0:
            outcome = self._possession(offense, defense, clock)
            self.result.record_possession(outcome)
            clock = max(0.0, clock - outcome.elapsed)

            self._after_possession(offense, defense, outcome, clock)
            offense, defense = defense, offense

        self._event(
            "period_end",
            0.0,
            home=self._score(self.home.team_id),
            away=self._score(self.away.team_id),
        )

    def _possession(self, offense: TeamGameState, defense: TeamGameState, clock: float) -> PossessionOutcome:
        self._seq += 1
        rules = self.rules
        o_view, d_view = offense.view(), defense.view()
        modifiers = PossessionModifiers(
            offense=offense.effects(),
            defense=defense.effects(),
            period=self.period,
            score_margin=self._score(offense.team_id) - self._score(defense.team_id),
            regulation_periods=rules.regulation_periods,
        )
        try:
            return resolve_possession(
                o_view, d_view, clock, rules.shot_clock_seconds, modifiers, self.rng, rules=rules, seq=self._seq
            )
        except (AttributeDataError, ArithmeticError) as exc:
            logger.warning(
                "POSSESSION_SKIPPED game_id=%s period=%s seq=%s offense=%s",
                self.game_id, self.period, self._seq, offense.team_id,
                exc_info=True,
            )
            elapsed = min(clock, self.rng.uniform(rules.possession_seconds_min, rules.possession_seconds_max))
            error = str(exc) if isinstance(exc, AttributeDataError) else f"{type(exc).__name__}: {exc}"
            return noop_outcome(
                seq=self._seq,
                period=self.period,
                offense=o_view,
                defense=d_view,
                elapsed=elapsed,
                game_clock=clock,
                error=error,
            )

    def _after_possession(
        self,
        offense: TeamGameState,
        defense: TeamGameState,
        outcome: PossessionOutcome,
        clock: float,
    ) -> None:
        rules = self.rules

        for pid in defense.add_fouls(outcome.fouls):
            self._event("foul_out", clock, defense.team_id, pid, fouls=defense.fouls.get(pid, 0))

        if outcome.points > 0:
            self._event(
                "score",
                clock,
                offense.team_id,
                outcome.shooter_id,
                points=outcome.points,
                result=outcome.result,
                shot_type=outcome.shot_type,
                assister=outcome.assister_id,
            )
        if outcome.result == "made":
            for sid in outcome.synergies:
                self._event("badge_synergy", clock, offense.team_id, outcome.shooter_id, synergy_id=sid)

        offense.tick_fatigue()
        defense.tick_fatigue()

        if rules.injuries_enabled:
            self._roll_injuries(offense, clock)
            self._roll_injuries(defense, clock)

        self._track_run(offense, defense, outcome.points, clock)

        margin = abs(self._score(offense.team_id) - self._score(defense.team_id))
        closing = (
            self.period >= rules.regulation_periods
            and clock <= rules.close_game_seconds
            and margin <= rules.close_game_margin
        )
        for side in (offense, defense):
            for sub in side.rotate(period=self.period, closing=closing):
                self._event(
                    "substitution",
                    clock,
                    side.team_id,
                    sub.player_in,
                    player_out=sub.player_out,
                    reason=sub.reason,
                )

    def _roll_injuries(self, side: TeamGameState, clock: float) -> None:
        assert self.result is not None
        rules = self.rules
        for p in list(side.on_court):
            if self._injuries_total >= rules.max_injuries_per_game:
                return
            if self._injuries_by_team.get(side.team_id, 0) >= rules.max_injuries_per_team:
                return
            if p.player_id in side.out_for_game:
                continue
            prob = injury_probability(p, side.fatigue.get(p.player_id, 0.0), rules)
            if not roll(self.rng, prob):
                continue
            inj = roll_injury(self.rng)
            side.mark_injured(p.player_id)
            self._injuries_total += 1
            self._injuries_by_team[side.team_id] = self._injuries_by_team.get(side.team_id, 0) + 1
            self.result.record_injury(
                InjuryRecord(
                    player_id=p.player_id,
                    team_id=side.team_id,
                    injury_type=inj.injury_type,
                    severity=inj.severity,
                    games_out=inj.games_out,
                    permanent_impact=inj.permanent_impact,
                    period=self.period,
                    clock=clock,
                )
            )
            self._event(
                "injury",
                clock,
                side.team_id,
                p.player_id,
                injury_type=inj.injury_type,
                severity=inj.severity,
                games_out=inj.games_out,
            )

    def _track_run(self, offense: TeamGameState, defense: TeamGameState, points: int, clock: float) -> None:
        """Unanswered-run bookkeeping; the trailing side burns a timeout at the trigger."""
        if points <= 0:
            return
        if self._run_team == offense.team_id:
            self._run_points += points
        else:
            self._run_team, self._run_points = offense.team_id, points
        if self._run_points < self.rules.timeout_run_trigger:
            return
        run = self._run_points
        if defense.call_timeout():
            self._event("timeout", clock, defense.team_id, None, run=run, remaining=defense.timeouts)
            self._run_team, self._run_points = None, 0


def simulate_game(
    home: Team,
    away: Team,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    rules: SimRules = DEFAULT_RULES,
    catalog: Optional[BadgeCatalog] = None,
    game_id: str = "",
    synergies_enabled: bool = True,
) -> GameResult:
    """Simulate one game to completion and return its sealed result."""
    sim = GameSimulator(
        home,
        away,
        rng=rng,
        seed=seed,
        rules=rules,
        catalog=catalog,
        game_id=game_id,
        synergies_enabled=synergies_enabled,
    )
    return sim.run()
