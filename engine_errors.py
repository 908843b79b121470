from __future__ import annotations

"""Structured errors for the simulation core.

Every error carries a stable machine-readable ``code`` so the service layer can
map it to an HTTP status and the UI can decide whether a retry makes sense.

Recovery scopes
---------------
- AttributeDataError: possession scope (resolved as a no-op possession)
- RosterError, GameUnresolvedError: game scope (game marked failed, siblings unaffected)
- BatchError: batch scope (reported before any game is scheduled)
- EvolutionDataError: player scope (that player's evolution step is skipped)
"""

from dataclasses import dataclass
from typing import Any, Optional


# Error codes (stable API surface)
ATTRIBUTE_DATA_INVALID = "ATTRIBUTE_DATA_INVALID"
ROSTER_INVALID = "ROSTER_INVALID"
RESULT_SEALED = "RESULT_SEALED"
BATCH_EMPTY = "BATCH_EMPTY"
BATCH_NOT_FOUND = "BATCH_NOT_FOUND"
BATCH_INVALID = "BATCH_INVALID"
CATALOG_INVALID = "CATALOG_INVALID"
EVOLUTION_DATA_INVALID = "EVOLUTION_DATA_INVALID"
GAME_UNRESOLVED = "GAME_UNRESOLVED"


@dataclass(eq=False)
class SimulationError(Exception):
    """Base error for the simulation core."""

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class AttributeDataError(SimulationError):
    """Malformed attribute data encountered while resolving a possession."""

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(ATTRIBUTE_DATA_INVALID, message, details)


class RosterError(SimulationError):
    """A roster cannot field a legal lineup (e.g. fewer than five eligible players)."""

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(ROSTER_INVALID, message, details)


class ResultSealedError(SimulationError):
    def __init__(self, message: str = "game result is sealed", details: Optional[Any] = None) -> None:
        super().__init__(RESULT_SEALED, message, details)


class BatchError(SimulationError):
    pass


class CatalogError(SimulationError):
    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(CATALOG_INVALID, message, details)


class EvolutionDataError(SimulationError):
    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(EVOLUTION_DATA_INVALID, message, details)


class GameUnresolvedError(SimulationError):
    """Still tied after the maximum number of overtimes."""

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(GAME_UNRESOLVED, message, details)
