from __future__ import annotations

"""Single-game runner shared by the batch scheduler and the HTTP layer.

``run_game_spec`` is a module-level function so it can be shipped to a process
pool. It never raises: any failure is turned into a ``GameRunResult`` with
status ``failed`` and a structured error, so one bad roster cannot take down
its siblings.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional

from badges.catalog import BadgeCatalog
from engine_errors import SimulationError
from matchengine.config import DEFAULT_RULES, SimRules
from matchengine.core import stable_seed
from matchengine.result import GameResult
from matchengine.sim_game import simulate_game
from ratings.types import Team

logger = logging.getLogger(__name__)

PENDING = "pending"
RUNNING = "running"
DONE = "done"
FAILED = "failed"
CANCELLED = "cancelled"

GAME_STATUSES = (PENDING, RUNNING, DONE, FAILED, CANCELLED)


@dataclass(frozen=True, slots=True)
class GameSpec:
    game_id: str
    home: Team
    away: Team
    seed: Optional[int] = None


@dataclass(frozen=True, slots=True)
class LeagueContext:
    """Read-only campaign context handed to a batch (never global state)."""

    season_id: str = ""
    current_date: Optional[str] = None
    phase: str = "regular"

    def to_dict(self) -> Dict[str, Any]:
        return {"season_id": self.season_id, "current_date": self.current_date, "phase": self.phase}


@dataclass(frozen=True, slots=True)
class GameRunResult:
    game_id: str
    status: str
    seed: int
    result: Optional[GameResult] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == DONE

    def to_dict(self, *, include_result: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {"game_id": self.game_id, "status": self.status, "seed": self.seed}
        if self.error is not None:
            out["error"] = dict(self.error)
        if include_result and self.result is not None:
            out["result"] = self.result.to_dict()
        return out


def game_seed(batch_id: str, spec: GameSpec) -> int:
    if spec.seed is not None:
        return int(spec.seed)
    return stable_seed("batch", batch_id, spec.game_id)


def _error_payload(exc: BaseException) -> Dict[str, Any]:
    if isinstance(exc, SimulationError):
        return {"code": exc.code, "message": exc.message, "details": exc.details}
    return {"code": type(exc).__name__, "message": str(exc), "details": None}


def cancelled_result(batch_id: str, spec: GameSpec) -> GameRunResult:
    return GameRunResult(game_id=spec.game_id, status=CANCELLED, seed=game_seed(batch_id, spec))


def run_game_spec(
    spec: GameSpec,
    batch_id: str = "",
    context: Optional[LeagueContext] = None,
    rules: SimRules = DEFAULT_RULES,
    catalog: Optional[BadgeCatalog] = None,
) -> GameRunResult:
    """Simulate one scheduled game; failures come back as a failure marker."""
    seed = game_seed(batch_id, spec)
    try:
        result = simulate_game(
            spec.home,
            spec.away,
            rng=random.Random(seed),
            rules=rules,
            catalog=catalog,
            game_id=spec.game_id,
        )
    except Exception as exc:  # isolate the game; siblings keep running
        logger.warning(
            "BATCH_GAME_FAILED batch_id=%s game_id=%s season_id=%s",
            batch_id,
            spec.game_id,
            context.season_id if context is not None else "",
            exc_info=True,
        )
        return GameRunResult(game_id=spec.game_id, status=FAILED, seed=seed, error=_error_payload(exc))
    return GameRunResult(game_id=spec.game_id, status=DONE, seed=seed, result=result)
