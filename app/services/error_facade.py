from __future__ import annotations

from fastapi.responses import JSONResponse

from engine_errors import SimulationError


def _sim_error_response(error: SimulationError, status_code: int, *, retryable: bool = False) -> JSONResponse:
    payload = {
        "ok": False,
        "retryable": bool(retryable),
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details,
        },
    }
    return JSONResponse(status_code=status_code, content=payload)


def _unexpected_error_response(exc: Exception) -> JSONResponse:
    """Unrecoverable single-game failure; the caller may retry the request."""
    payload = {
        "ok": False,
        "retryable": True,
        "error": {"code": "SIMULATION_FAILED", "message": str(exc) or type(exc).__name__, "details": None},
    }
    return JSONResponse(status_code=503, content=payload)
