from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter

from evolution import EvolutionReport, process_post_game, process_weekly
from app.schemas.evolution import PostGameEvolutionRequest, WeeklyEvolutionRequest
from app.services.error_facade import _sim_error_response
from engine_errors import EvolutionDataError

router = APIRouter()
logger = logging.getLogger(__name__)


def _report_payload(report: EvolutionReport) -> Dict[str, Any]:
    return {
        "ok": True,
        "players": [asdict(p) for p in report.players],
        "records": [r.to_dict() for r in report.records],
        "skipped": list(report.skipped),
    }


@router.post("/api/evolution/post-game")
def api_evolution_post_game(req: PostGameEvolutionRequest):
    """Apply per-game micro development, streaks, fatigue and injury bookkeeping."""
    try:
        players = [p.to_domain() for p in req.players]
        final = req.final_box()
        injuries = req.injury_records()
    except (TypeError, ValueError) as exc:
        return _sim_error_response(EvolutionDataError(str(exc)), 422)
    report = process_post_game(players, final, game_id=req.game_id, injuries=injuries)
    return _report_payload(report)


@router.post("/api/evolution/weekly")
def api_evolution_weekly(req: WeeklyEvolutionRequest):
    """Apply one week of age-curve growth/decline and fatigue recovery."""
    try:
        players = [p.to_domain() for p in req.players]
        teammates = [p.to_domain() for p in req.teammates] if req.teammates is not None else None
    except (TypeError, ValueError) as exc:
        return _sim_error_response(EvolutionDataError(str(exc)), 422)
    report = process_weekly(
        players,
        week_id=req.week_id,
        minutes=req.minutes,
        games=req.games,
        facility_level=req.facility_level,
        teammates=teammates,
    )
    return _report_payload(report)
