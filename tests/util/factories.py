from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from ratings.config import ATTRIBUTE_NAMES
from ratings.types import Badge, Player, Team

POSITION_CYCLE: Tuple[str, ...] = ("PG", "SG", "SF", "PF", "C")


def make_player(
    player_id: str,
    rating: int = 60,
    *,
    position: str = "SF",
    badges: Iterable[Tuple[str, str]] = (),
    overrides: Optional[Dict[str, int]] = None,
    **fields,
) -> Player:
    """Player with every known attribute at ``rating``.

    ``overrides`` takes ``{"category.attribute": value}``.
    """
    cats = {cat: {name: rating for name in names} for cat, names in ATTRIBUTE_NAMES.items()}
    for key, value in (overrides or {}).items():
        cat, _, name = key.partition(".")
        cats[cat][name] = value
    fields.setdefault("potential", 90)
    return Player(
        player_id=player_id,
        name=f"Player {player_id}",
        positions=(position,),
        badges=tuple(Badge(b, lvl) for b, lvl in badges),
        **cats,
        **fields,
    )


def make_roster(prefix: str, size: int = 10, rating: int = 60, **fields) -> Tuple[Player, ...]:
    return tuple(
        make_player(f"{prefix}{i}", rating, position=POSITION_CYCLE[i % 5], **fields)
        for i in range(size)
    )


def make_team(
    team_id: str,
    size: int = 10,
    rating: int = 60,
    *,
    roster: Optional[Sequence[Player]] = None,
    **team_fields,
) -> Team:
    players = tuple(roster) if roster is not None else make_roster(f"{team_id}-", size, rating)
    return Team(team_id=team_id, name=f"Team {team_id}", roster=players, **team_fields)
