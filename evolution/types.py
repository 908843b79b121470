from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ratings.types import Player


@dataclass(frozen=True, slots=True)
class EvolutionRecord:
    """One audited attribute change.

    delta is the fractional change requested; before/after are the integer ratings.
    """

    player_id: str
    category: str
    attribute: str
    delta: float
    cause: str  # performance | growth | decline | injury | bounds
    cycle: str  # game | week
    ref: str  # game id or week id
    before: int
    after: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "category": self.category,
            "attribute": self.attribute,
            "delta": round(self.delta, 4),
            "cause": self.cause,
            "cycle": self.cycle,
            "ref": self.ref,
            "before": self.before,
            "after": self.after,
        }


@dataclass(frozen=True, slots=True)
class EvolutionReport:
    players: Tuple[Player, ...]
    records: Tuple[EvolutionRecord, ...]
    skipped: Tuple[str, ...] = ()

    def player(self, player_id: str) -> Player:
        for p in self.players:
            if p.player_id == player_id:
                return p
        raise KeyError(player_id)

    def records_for(self, player_id: str) -> Tuple[EvolutionRecord, ...]:
        return tuple(r for r in self.records if r.player_id == player_id)
