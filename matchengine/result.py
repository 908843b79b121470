from __future__ import annotations

"""Mutable game result owned by one GameSimulator.

Created empty at tip-off, mutated possession by possession, sealed at the final
buzzer. After ``seal()`` every recording method raises ResultSealedError.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from boxscore.box import BoxScore, FinalBoxScore, apply, empty_box, finalize
from engine_errors import ResultSealedError

from .models import GameEvent, InjuryRecord, PossessionOutcome


class GameResult:
    def __init__(
        self,
        game_id: str,
        home_team_id: str,
        away_team_id: str,
        home_player_ids: Sequence[str] = (),
        away_player_ids: Sequence[str] = (),
    ) -> None:
        self.game_id = str(game_id)
        self.home_team_id = str(home_team_id)
        self.away_team_id = str(away_team_id)
        self._box: BoxScore = empty_box(home_team_id, away_team_id, home_player_ids, away_player_ids)
        self._outcomes: List[PossessionOutcome] = []
        self._events: List[GameEvent] = []
        self._injuries: List[InjuryRecord] = []
        self._errors: List[Dict[str, Any]] = []
        self._quarter_scores: Dict[str, List[int]] = {home_team_id: [], away_team_id: []}
        self._end_fatigue: Dict[str, float] = {}
        self._final: Optional[FinalBoxScore] = None
        self._sealed = False

    # -- read side --

    @property
    def completed(self) -> bool:
        return self._sealed

    @property
    def box(self) -> BoxScore:
        return self._box

    @property
    def final(self) -> Optional[FinalBoxScore]:
        return self._final

    @property
    def outcomes(self) -> Tuple[PossessionOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def events(self) -> Tuple[GameEvent, ...]:
        return tuple(self._events)

    @property
    def injuries(self) -> Tuple[InjuryRecord, ...]:
        return tuple(self._injuries)

    @property
    def errors(self) -> Tuple[Mapping[str, Any], ...]:
        return tuple(self._errors)

    @property
    def quarter_scores(self) -> Mapping[str, Tuple[int, ...]]:
        return {tid: tuple(v) for tid, v in self._quarter_scores.items()}

    @property
    def end_fatigue(self) -> Mapping[str, float]:
        return dict(self._end_fatigue)

    @property
    def home_score(self) -> int:
        return self._box.points(self.home_team_id)

    @property
    def away_score(self) -> int:
        return self._box.points(self.away_team_id)

    @property
    def winner(self) -> Optional[str]:
        if not self._sealed or self.home_score == self.away_score:
            return None
        return self.home_team_id if self.home_score > self.away_score else self.away_team_id

    # -- write side --

    def _check_open(self) -> None:
        if self._sealed:
            raise ResultSealedError(details={"game_id": self.game_id})

    def start_period(self) -> None:
        self._check_open()
        for scores in self._quarter_scores.values():
            scores.append(0)

    def record_possession(self, outcome: PossessionOutcome) -> None:
        self._check_open()
        before = {tid: self._box.points(tid) for tid in self._quarter_scores}
        self._box = apply(outcome, self._box)
        self._outcomes.append(outcome)
        for tid, scores in self._quarter_scores.items():
            if scores:
                scores[-1] += self._box.points(tid) - before[tid]
        if outcome.error:
            self._errors.append(
                {"seq": outcome.seq, "period": outcome.period, "clock": round(outcome.game_clock, 1), "error": outcome.error}
            )

    def record_event(self, event: GameEvent) -> None:
        self._check_open()
        self._events.append(event)

    def record_injury(self, record: InjuryRecord) -> None:
        self._check_open()
        self._injuries.append(record)

    def seal(self, end_fatigue: Optional[Mapping[str, float]] = None) -> FinalBoxScore:
        self._check_open()
        self._end_fatigue = dict(end_fatigue or {})
        self._final = finalize(self._box)
        self._sealed = True
        return self._final

    def to_dict(self) -> Dict[str, Any]:
        final = self._final or finalize(self._box)
        return {
            "game_id": self.game_id,
            "completed": self._sealed,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "final": {self.home_team_id: self.home_score, self.away_team_id: self.away_score},
            "winner": self.winner,
            "quarter_scores": {tid: list(v) for tid, v in self._quarter_scores.items()},
            "box_score": final.to_dict(),
            "play_by_play": [o.to_summary() for o in self._outcomes],
            "events": [e.to_dict() for e in self._events],
            "injuries": [i.to_dict() for i in self._injuries],
            "errors": list(self._errors),
            "end_fatigue": dict(self._end_fatigue),
        }
