from __future__ import annotations

"""Badge synergy engine.

Two layers:
- Lineup layer (in-game): ``active_effects(lineup)`` for one team's on-court five.
  A synergy activates only when both participating players are on court
  together and both meet the row's minimum level.
- Roster layer (between games): pair queries used by development and chemistry.

Everything is pure. ``SynergyCache`` memoizes the lineup layer per on-court set;
callers invalidate it at substitutions.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from ratings.types import Player

from .catalog import BadgeCatalog, SynergyDefinition, default_catalog
from .config import (
    CHEMISTRY_PER_PAIR,
    DEVELOPMENT_BOOST_BY_MIN_LEVEL,
    DEVELOPMENT_BOOST_MAX,
    DYNAMIC_DUO_MIN_RANK,
    DYNAMIC_DUO_MIN_SYNERGIES,
    EFFECT_CHANNELS,
    SHOT_TYPES,
    SYNERGY_CEILING,
)


@dataclass(frozen=True, slots=True)
class BadgeProfile:
    """Individual (non-synergy) badge effects of one player, by channel."""

    shot: Mapping[str, float] = field(default_factory=dict)
    contest: Mapping[str, float] = field(default_factory=dict)
    steal: float = 0.0
    block: float = 0.0
    ball_security: float = 0.0
    rebound: float = 0.0
    assist: float = 0.0
    # badge ids contributing to any channel
    sources: Tuple[str, ...] = ()


EMPTY_PROFILE = BadgeProfile()


@dataclass(frozen=True, slots=True)
class SynergyActivation:
    synergy_id: str
    name: str
    effect_type: str
    player_a: str
    player_b: str

    def involves(self, player_id: str) -> bool:
        return player_id in (self.player_a, self.player_b)

    def to_dict(self) -> Dict[str, str]:
        return {
            "synergy_id": self.synergy_id,
            "name": self.name,
            "effect_type": self.effect_type,
            "player_a": self.player_a,
            "player_b": self.player_b,
        }


@dataclass(frozen=True, slots=True)
class LineupEffects:
    per_player: Mapping[str, Mapping[str, float]]
    per_team: Mapping[str, float]
    activations: Tuple[SynergyActivation, ...]
    profiles: Mapping[str, BadgeProfile]
    ceiling: float = SYNERGY_CEILING

    def modifier(self, player_id: str, key: str) -> float:
        """Combined relative modifier for ``category.attribute``, capped at the ceiling."""
        own = self.per_player.get(player_id, {}).get(key, 0.0)
        return min(self.ceiling, own + self.per_team.get(key, 0.0))

    def profile(self, player_id: str) -> BadgeProfile:
        return self.profiles.get(player_id, EMPTY_PROFILE)

    def activations_for(self, player_id: str) -> Tuple[SynergyActivation, ...]:
        return tuple(a for a in self.activations if a.involves(player_id))


NO_EFFECTS = LineupEffects(per_player={}, per_team={}, activations=(), profiles={})


def badge_profile(player: Player, catalog: BadgeCatalog) -> BadgeProfile:
    shot = {t: 0.0 for t in SHOT_TYPES}
    contest = {t: 0.0 for t in SHOT_TYPES}
    flat = {"steal": 0.0, "block": 0.0, "ball_security": 0.0, "rebound": 0.0, "assist": 0.0}
    sources: List[str] = []

    for badge in player.badges:
        definition = catalog.badges.get(badge.badge_id)
        if definition is None:
            continue
        used = False
        for key, value in definition.effects_at(badge.level).items():
            channel = EFFECT_CHANNELS.get(key)
            if channel is None:
                continue
            kind, shot_types = channel
            if kind == "shot":
                for t in shot_types:
                    shot[t] += value
            elif kind == "contest":
                for t in shot_types:
                    contest[t] += value
            else:
                flat[kind] += value
            used = True
        if used:
            sources.append(badge.badge_id)

    if not sources:
        return EMPTY_PROFILE
    return BadgeProfile(shot=shot, contest=contest, sources=tuple(sources), **flat)


def _lineup_activations(lineup: Sequence[Player], catalog: BadgeCatalog) -> List[Tuple[SynergyDefinition, Player, Player]]:
    found: List[Tuple[SynergyDefinition, Player, Player]] = []
    seen = set()
    for syn in catalog.synergies:
        for pa in lineup:
            if pa.badge_rank(syn.badge_a) < syn.min_rank_a:
                continue
            for pb in lineup:
                if pb.player_id == pa.player_id:
                    continue
                if pb.badge_rank(syn.badge_b) < syn.min_rank_b:
                    continue
                key = (syn.synergy_id, frozenset((pa.player_id, pb.player_id)))
                if key in seen:
                    continue
                seen.add(key)
                found.append((syn, pa, pb))
    return found


def active_effects(
    lineup: Sequence[Player],
    catalog: Optional[BadgeCatalog] = None,
    *,
    enabled: bool = True,
    ceiling: float = SYNERGY_CEILING,
) -> LineupEffects:
    """Modifier set contributed by badges and synergies of one on-court lineup.

    Synergy modifiers on the same attribute stack additively and are capped at
    ``ceiling``. With ``enabled=False`` no synergy activates; individual badge
    profiles are still reported.
    """
    cat = catalog or default_catalog()
    profiles = {p.player_id: badge_profile(p, cat) for p in lineup}

    per_player: Dict[str, Dict[str, float]] = {}
    per_team: Dict[str, float] = {}
    activations: List[SynergyActivation] = []

    if enabled:
        for syn, pa, pb in _lineup_activations(lineup, cat):
            activations.append(
                SynergyActivation(
                    synergy_id=syn.synergy_id,
                    name=syn.name,
                    effect_type=syn.effect_type,
                    player_a=pa.player_id,
                    player_b=pb.player_id,
                )
            )
            if syn.beneficiary == "team":
                targets: Tuple[str, ...] = ()
                for key, val in syn.modifiers.items():
                    per_team[key] = per_team.get(key, 0.0) + val
            elif syn.beneficiary == "a":
                targets = (pa.player_id,)
            elif syn.beneficiary == "b":
                targets = (pb.player_id,)
            else:
                targets = (pa.player_id, pb.player_id)
            for pid in targets:
                slot = per_player.setdefault(pid, {})
                for key, val in syn.modifiers.items():
                    slot[key] = slot.get(key, 0.0) + val

    capped_players = {
        pid: MappingProxyType({k: min(ceiling, v) for k, v in mods.items()})
        for pid, mods in per_player.items()
    }
    capped_team = {k: min(ceiling, v) for k, v in per_team.items()}

    return LineupEffects(
        per_player=MappingProxyType(capped_players),
        per_team=MappingProxyType(capped_team),
        activations=tuple(activations),
        profiles=MappingProxyType(profiles),
        ceiling=ceiling,
    )


class SynergyCache:
    """Single-lineup memo for ``active_effects``.

    Lineups only change at substitutions, so one entry per team is enough.
    """

    def __init__(self, catalog: Optional[BadgeCatalog] = None, *, enabled: bool = True) -> None:
        self._catalog = catalog or default_catalog()
        self._enabled = bool(enabled)
        self._key: Optional[FrozenSet[str]] = None
        self._value: Optional[LineupEffects] = None
        self.hits = 0
        self.misses = 0

    def get(self, lineup: Sequence[Player]) -> LineupEffects:
        key = frozenset(p.player_id for p in lineup)
        if self._value is not None and key == self._key:
            self.hits += 1
            return self._value
        self.misses += 1
        self._value = active_effects(lineup, self._catalog, enabled=self._enabled)
        self._key = key
        return self._value

    def invalidate(self) -> None:
        self._key = None
        self._value = None


# ---------------------------------------------------------------------------
# Roster layer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PairSynergy:
    synergy_id: str
    effect_type: str
    rank_a: int  # rank of the badge held by the first player of the pair
    rank_b: int

    @property
    def min_rank(self) -> int:
        return min(self.rank_a, self.rank_b)


@dataclass(frozen=True, slots=True)
class RosterSynergy:
    player_a: str
    player_b: str
    synergies: Tuple[PairSynergy, ...]


def pair_synergies(a: Player, b: Player, catalog: Optional[BadgeCatalog] = None) -> Tuple[PairSynergy, ...]:
    """Synergies shared by two players in either direction (badge presence only)."""
    cat = catalog or default_catalog()
    out: List[PairSynergy] = []
    for syn in cat.synergies:
        ra, rb = a.badge_rank(syn.badge_a), b.badge_rank(syn.badge_b)
        if ra and rb:
            out.append(PairSynergy(syn.synergy_id, syn.effect_type, ra, rb))
        ra, rb = a.badge_rank(syn.badge_b), b.badge_rank(syn.badge_a)
        if ra and rb and syn.badge_a != syn.badge_b:
            out.append(PairSynergy(syn.synergy_id, syn.effect_type, ra, rb))
    return tuple(out)


def roster_synergies(roster: Sequence[Player], catalog: Optional[BadgeCatalog] = None) -> List[RosterSynergy]:
    out: List[RosterSynergy] = []
    for i, a in enumerate(roster):
        for b in roster[i + 1:]:
            found = pair_synergies(a, b, catalog)
            if found:
                out.append(RosterSynergy(a.player_id, b.player_id, found))
    return out


def dynamic_duos(roster: Sequence[Player], catalog: Optional[BadgeCatalog] = None) -> List[RosterSynergy]:
    duos: List[RosterSynergy] = []
    for rs in roster_synergies(roster, catalog):
        gold_plus = [s for s in rs.synergies if s.min_rank >= DYNAMIC_DUO_MIN_RANK]
        if len(gold_plus) >= DYNAMIC_DUO_MIN_SYNERGIES:
            duos.append(rs)
    return duos


def development_boost(player: Player, roster: Sequence[Player], catalog: Optional[BadgeCatalog] = None) -> float:
    if not player.badges:
        return 0.0
    total = 0.0
    for mate in roster:
        if mate.player_id == player.player_id:
            continue
        for s in pair_synergies(player, mate, catalog):
            total += DEVELOPMENT_BOOST_BY_MIN_LEVEL.get(s.min_rank, DEVELOPMENT_BOOST_BY_MIN_LEVEL[1])
    return min(total, DEVELOPMENT_BOOST_MAX)


def chemistry_contribution(roster: Sequence[Player], catalog: Optional[BadgeCatalog] = None) -> int:
    return CHEMISTRY_PER_PAIR * len(roster_synergies(roster, catalog))
