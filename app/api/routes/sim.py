from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter

from engine_errors import (
    BATCH_NOT_FOUND,
    BatchError,
    RosterError,
    SimulationError,
)
from matchengine.config import SimRules
from matchengine.sim_game import simulate_game
from sim.batch import BatchScheduler
from app import settings
from app.schemas.sim import BatchRequest, SimGameRequest
from app.services.batch_registry import registry
from app.services.error_facade import _sim_error_response, _unexpected_error_response

router = APIRouter()
logger = logging.getLogger(__name__)

_scheduler: Optional[BatchScheduler] = None


def _get_scheduler() -> BatchScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = settings.build_scheduler()
    return _scheduler


def _batch_error_response(exc: BatchError):
    status = 404 if exc.code == BATCH_NOT_FOUND else 400
    return _sim_error_response(exc, status)


def _invalid_payload(exc: Exception):
    return _sim_error_response(RosterError(str(exc)), 422)


@router.post("/api/simulate-game")
def api_simulate_game(req: SimGameRequest):
    """Simulate one game and return the sealed result.

    Roster problems are reported as 422; any other failure is a retryable 503.
    """
    try:
        home = req.home.to_domain()
        away = req.away.to_domain()
        rules = SimRules.from_overrides(req.rules)
    except (TypeError, ValueError) as exc:
        return _invalid_payload(exc)

    try:
        result = simulate_game(
            home,
            away,
            seed=req.seed,
            rules=rules,
            game_id=req.game_id,
            synergies_enabled=req.synergies_enabled,
        )
    except RosterError as exc:
        return _sim_error_response(exc, 422)
    except SimulationError as exc:
        logger.warning("SIMULATE_GAME_FAILED game_id=%s code=%s", req.game_id, exc.code, exc_info=True)
        return _sim_error_response(exc, 503, retryable=True)
    except Exception as exc:
        logger.warning("SIMULATE_GAME_FAILED game_id=%s", req.game_id, exc_info=True)
        return _unexpected_error_response(exc)
    return {"ok": True, "result": result.to_dict()}


# -------------------------------------------------------------------------
# Batches (full day / week / remaining season)
# -------------------------------------------------------------------------
@router.post("/api/batches")
def api_start_batch(req: BatchRequest):
    try:
        specs = req.specs()
    except (TypeError, ValueError) as exc:
        return _invalid_payload(exc)
    try:
        job = registry.start(_get_scheduler(), specs, req.context())
    except BatchError as exc:
        return _batch_error_response(exc)
    return {"ok": True, "batch_id": job.batch_id, "total": job.total}


@router.get("/api/batches/{batch_id}")
def api_get_batch(batch_id: str):
    try:
        entry = registry.get(batch_id)
    except BatchError as exc:
        return _batch_error_response(exc)
    return {
        "ok": True,
        "running": entry.running,
        "error": entry.error,
        "progress": entry.job.snapshot().to_dict(),
        "games": entry.job.statuses(),
    }


@router.post("/api/batches/{batch_id}/cancel")
def api_cancel_batch(batch_id: str):
    try:
        entry = registry.cancel(batch_id)
    except BatchError as exc:
        return _batch_error_response(exc)
    return {"ok": True, "batch_id": batch_id, "progress": entry.job.snapshot().to_dict()}


@router.get("/api/batches/{batch_id}/results")
def api_batch_results(batch_id: str, include_results: bool = True):
    try:
        entry = registry.get(batch_id)
    except BatchError as exc:
        return _batch_error_response(exc)
    return {
        "ok": True,
        "running": entry.running,
        "summary": entry.job.summary().to_dict(include_results=include_results),
    }


@router.delete("/api/batches/{batch_id}")
def api_release_batch(batch_id: str):
    """Drop a batch and its results; a running batch is cancelled first."""
    try:
        entry = registry.release(batch_id)
    except BatchError as exc:
        return _batch_error_response(exc)
    return {"ok": True, "batch_id": batch_id, "was_running": entry.running}
