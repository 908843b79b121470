from __future__ import annotations

"""Immutable badge/synergy catalog.

The catalog is built once (default data or JSON configuration) and passed by
reference into the synergy engine. Nothing here is re-parsed per possession.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

from engine_errors import CatalogError
from ratings.config import ATTRIBUTE_NAMES, BADGE_LEVELS

from .catalog_data import DEFAULT_BADGES, DEFAULT_SYNERGIES
from .config import BENEFICIARIES, LEVEL_RANK

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BadgeDefinition:
    badge_id: str
    name: str
    category: str
    # level -> {effect_key: value}
    effects: Mapping[str, Mapping[str, float]]

    def effects_at(self, level: str) -> Mapping[str, float]:
        return self.effects.get(level, {})


@dataclass(frozen=True, slots=True)
class SynergyDefinition:
    synergy_id: str
    name: str
    badge_a: str
    min_rank_a: int
    badge_b: str
    min_rank_b: int
    effect_type: str
    beneficiary: str  # a | b | both | team
    # "category.attribute" -> relative modifier
    modifiers: Mapping[str, float]


@dataclass(frozen=True, slots=True)
class BadgeCatalog:
    badges: Mapping[str, BadgeDefinition]
    synergies: Tuple[SynergyDefinition, ...]

    def badge(self, badge_id: str) -> BadgeDefinition:
        return self.badges[badge_id]

    def synergies_for(self, badge_id: str) -> Tuple[SynergyDefinition, ...]:
        return tuple(s for s in self.synergies if badge_id in (s.badge_a, s.badge_b))


def _require(row: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in row or row[key] in (None, ""):
        raise CatalogError(f"{where}: missing '{key}'", {"row": dict(row)})
    return row[key]


def _level_rank(value: Any, where: str) -> int:
    level = str(value or "bronze")
    if level not in LEVEL_RANK:
        raise CatalogError(f"{where}: unknown badge level {level!r}")
    return LEVEL_RANK[level]


def _build_badge(row: Mapping[str, Any]) -> BadgeDefinition:
    badge_id = str(_require(row, "id", "badge"))
    where = f"badge {badge_id}"
    raw_effects = row.get("effects") or {}
    if not isinstance(raw_effects, Mapping):
        raise CatalogError(f"{where}: effects must be a mapping")

    effects: Dict[str, Mapping[str, float]] = {}
    for level, payload in raw_effects.items():
        if level not in BADGE_LEVELS:
            raise CatalogError(f"{where}: unknown level {level!r}")
        if not isinstance(payload, Mapping):
            raise CatalogError(f"{where}: effects[{level}] must be a mapping")
        values: Dict[str, float] = {}
        for key, val in payload.items():
            try:
                values[str(key)] = float(val)
            except (TypeError, ValueError) as e:
                raise CatalogError(f"{where}: non-numeric effect {key}={val!r}") from e
        effects[level] = MappingProxyType(values)

    return BadgeDefinition(
        badge_id=badge_id,
        name=str(row.get("name") or badge_id),
        category=str(row.get("category") or "general"),
        effects=MappingProxyType(effects),
    )


def _build_synergy(row: Mapping[str, Any], badges: Mapping[str, BadgeDefinition]) -> SynergyDefinition:
    syn_id = str(_require(row, "id", "synergy"))
    where = f"synergy {syn_id}"
    badge_a = str(_require(row, "badge_a", where))
    badge_b = str(_require(row, "badge_b", where))
    for b in (badge_a, badge_b):
        if b not in badges:
            raise CatalogError(f"{where}: references unknown badge {b!r}")

    beneficiary = str(row.get("beneficiary") or "both")
    if beneficiary not in BENEFICIARIES:
        raise CatalogError(f"{where}: unknown beneficiary {beneficiary!r}")

    mods: Dict[str, float] = {}
    for key, val in (row.get("modifiers") or {}).items():
        category, _, attr = str(key).partition(".")
        if attr not in ATTRIBUTE_NAMES.get(category, ()):
            raise CatalogError(f"{where}: unknown attribute key {key!r}")
        try:
            mods[str(key)] = float(val)
        except (TypeError, ValueError) as e:
            raise CatalogError(f"{where}: non-numeric modifier {key}={val!r}") from e

    return SynergyDefinition(
        synergy_id=syn_id,
        name=str(row.get("name") or syn_id),
        badge_a=badge_a,
        min_rank_a=_level_rank(row.get("min_level_a"), where),
        badge_b=badge_b,
        min_rank_b=_level_rank(row.get("min_level_b"), where),
        effect_type=str(row.get("effect_type") or "synergy"),
        beneficiary=beneficiary,
        modifiers=MappingProxyType(mods),
    )


def build_catalog(badge_rows: Iterable[Mapping[str, Any]], synergy_rows: Iterable[Mapping[str, Any]]) -> BadgeCatalog:
    badges: Dict[str, BadgeDefinition] = {}
    for row in badge_rows:
        bd = _build_badge(row)
        if bd.badge_id in badges:
            raise CatalogError(f"duplicate badge id {bd.badge_id!r}")
        badges[bd.badge_id] = bd

    synergies = []
    seen = set()
    for row in synergy_rows:
        sd = _build_synergy(row, badges)
        if sd.synergy_id in seen:
            raise CatalogError(f"duplicate synergy id {sd.synergy_id!r}")
        seen.add(sd.synergy_id)
        synergies.append(sd)

    return BadgeCatalog(badges=MappingProxyType(badges), synergies=tuple(synergies))


def load_catalog(source: Union[Mapping[str, Any], str, Path]) -> BadgeCatalog:
    """Build a catalog from a mapping ``{"badges": [...], "synergies": [...]}`` or a JSON file path."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CatalogError(f"cannot read catalog file {path}", {"error": str(e)}) from e
    else:
        data = source

    if not isinstance(data, Mapping):
        raise CatalogError("catalog root must be an object")
    catalog = build_catalog(data.get("badges") or [], data.get("synergies") or [])
    logger.info("BADGE_CATALOG_LOADED badges=%d synergies=%d", len(catalog.badges), len(catalog.synergies))
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> BadgeCatalog:
    return build_catalog(DEFAULT_BADGES, DEFAULT_SYNERGIES)
