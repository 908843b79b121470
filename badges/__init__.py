"""Badge synergy engine.

Public API
----------
- default_catalog() / load_catalog(source)
- active_effects(lineup, catalog, enabled=True) -> LineupEffects
- SynergyCache
- roster_synergies / dynamic_duos / development_boost / chemistry_contribution
"""

from .catalog import BadgeCatalog, BadgeDefinition, SynergyDefinition, default_catalog, load_catalog
from .synergy import (
    NO_EFFECTS,
    BadgeProfile,
    LineupEffects,
    SynergyActivation,
    SynergyCache,
    active_effects,
    chemistry_contribution,
    development_boost,
    dynamic_duos,
    roster_synergies,
)

__all__ = [
    "NO_EFFECTS",
    "BadgeCatalog",
    "BadgeDefinition",
    "BadgeProfile",
    "LineupEffects",
    "SynergyActivation",
    "SynergyCache",
    "SynergyDefinition",
    "active_effects",
    "chemistry_contribution",
    "default_catalog",
    "development_boost",
    "dynamic_duos",
    "load_catalog",
    "roster_synergies",
]
