from __future__ import annotations

"""Player evolution entry points.

- process_post_game(players, final_box, game_id=..., injuries=...)
- process_weekly(players, week_id=..., minutes=..., games=..., facility_level=...)

Both are pure: they return new Player instances plus an audit trail of
EvolutionRecord rows. A player whose data cannot be processed is skipped for the
cycle (returned unchanged, id listed in ``skipped``); the rest proceed.
"""

import logging
import random
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from badges.catalog import BadgeCatalog
from badges.synergy import development_boost
from boxscore.box import FinalBoxScore, StatLine
from boxscore.season import roll_player_counters
from engine_errors import AttributeDataError, EvolutionDataError
from matchengine.core import clamp, stable_seed
from matchengine.models import InjuryRecord
from ratings.config import ATTRIBUTE_NAMES
from ratings.types import InjuryState, Player

from .aging import attribute_change, weekly_development_points, weekly_regression_points
from .config import DEFAULT_EVOLUTION_RULES, INJURY_IMPACT_ATTRIBUTES, EvolutionRules
from .performance import baseline, detect_streak, micro_changes, performance_rating, push_window, validate_history
from .types import EvolutionRecord, EvolutionReport

logger = logging.getLogger(__name__)

# records below this magnitude are not worth auditing (pure float noise)
_MIN_RECORD_DELTA = 1e-4


def _split(key: str) -> Tuple[str, str]:
    cat, _, name = key.partition(".")
    return cat, name


def attribute_bounds(player: Player, floor: int) -> Tuple[int, int]:
    """(low, high) for evolved attributes. The floor wins over a potential below it."""
    return int(floor), max(int(player.potential), int(floor))


def apply_changes(
    player: Player,
    changes: Mapping[str, float],
    *,
    cause: str,
    cycle: str,
    ref: str,
    floor: int,
) -> Tuple[Player, List[EvolutionRecord]]:
    """Apply fractional attribute changes through the progress carry.

    Integer ratings move when the carry crosses +/-1 and are held inside
    ``attribute_bounds``; at a bound the carry pointing past it is dropped.
    """
    if not changes:
        return player, []
    cats: Dict[str, Dict[str, int]] = {}
    progress = dict(player.attribute_progress)
    records: List[EvolutionRecord] = []
    low, high = attribute_bounds(player, floor)

    for key, delta in changes.items():
        if abs(delta) < _MIN_RECORD_DELTA:
            continue
        cat, name = _split(key)
        attrs = cats.setdefault(cat, dict(player.attributes(cat)))
        before = int(round(player.rating(cat, name)))

        carry = float(progress.get(key, 0.0)) + float(delta)
        steps = int(carry)  # toward zero
        carry -= steps
        after = before + steps
        if after >= high:
            after, carry = high, min(carry, 0.0)
        if after <= low:
            after, carry = low, max(carry, 0.0)

        attrs[name] = after
        progress[key] = round(carry, 6)
        records.append(
            EvolutionRecord(player.player_id, cat, name, float(delta), cause, cycle, ref, before, after)
        )

    updated = replace(player, attribute_progress=progress, **cats)
    return updated, records


def enforce_bounds(player: Player, *, cycle: str, ref: str, floor: int) -> Tuple[Player, List[EvolutionRecord]]:
    """Clamp every attribute into ``attribute_bounds``; each clamp is recorded."""
    low, high = attribute_bounds(player, floor)
    cats: Dict[str, Dict[str, int]] = {}
    records: List[EvolutionRecord] = []
    for cat in ATTRIBUTE_NAMES:
        attrs = player.attributes(cat)
        for name in attrs:
            value = player.rating(cat, name)
            bounded = clamp(value, float(low), float(high))
            if bounded == value:
                continue
            slot = cats.setdefault(cat, dict(attrs))
            slot[name] = int(bounded)
            records.append(
                EvolutionRecord(
                    player.player_id, cat, name, float(bounded - value), "bounds", cycle, ref, int(round(value)), int(bounded)
                )
            )
    if not cats:
        return player, records
    return replace(player, **cats), records


# ---------------------------------------------------------------------------
# Post-game
# ---------------------------------------------------------------------------


def _injury_heal_changes(impact: int, rng: random.Random) -> Dict[str, float]:
    return {f"physical.{name}": -float(impact) * rng.uniform(0.8, 1.2) for name in INJURY_IMPACT_ATTRIBUTES}


def _post_game_player(
    player: Player,
    line: Optional[StatLine],
    new_injury: Optional[InjuryRecord],
    *,
    game_id: str,
    rules: EvolutionRules,
) -> Tuple[Player, List[EvolutionRecord]]:
    history = validate_history(player.player_id, player.recent_performances)
    rng = random.Random(stable_seed("micro", game_id, player.player_id))
    p, records = enforce_bounds(player, cycle="game", ref=game_id, floor=rules.floor)

    if line is not None and line.seconds > 0:
        rating = performance_rating(line)
        base = baseline(history, rules.baseline_window)
        _, changes = micro_changes(line, rating, base, rng, rules)
        window = push_window(history, rating, rules.window_cap)
        p = replace(
            p,
            recent_performances=window,
            streak=detect_streak(window, rules),
            fatigue=clamp(p.fatigue + rules.fatigue_per_minute * line.minutes, 0.0, 100.0),
        )
        p, recs = apply_changes(p, changes, cause="performance", cycle="game", ref=game_id, floor=rules.floor)
        records.extend(recs)
        p = roll_player_counters(p, line)
    else:
        p = replace(p, fatigue=clamp(p.fatigue - rules.rest_recovery, 0.0, 100.0))
        if p.injury is not None and p.injury.is_active:
            remaining = int(p.injury.games_remaining) - 1
            if remaining > 0:
                p = replace(p, injury=replace(p.injury, games_remaining=remaining))
            else:
                impact = int(p.injury.permanent_impact)
                p = replace(p, injury=None)
                if impact > 0:
                    p, recs = apply_changes(
                        p, _injury_heal_changes(impact, rng), cause="injury", cycle="game", ref=game_id, floor=rules.floor
                    )
                    records.extend(recs)

    if new_injury is not None:
        p = replace(
            p,
            injury=InjuryState(
                injury_type=new_injury.injury_type,
                games_remaining=int(new_injury.games_out),
                permanent_impact=int(new_injury.permanent_impact),
                severity=new_injury.severity,
            ),
        )

    return p, records


def process_post_game(
    players: Sequence[Player],
    final: FinalBoxScore,
    *,
    game_id: str,
    injuries: Sequence[InjuryRecord] = (),
    rules: EvolutionRules = DEFAULT_EVOLUTION_RULES,
) -> EvolutionReport:
    lines = {fl.line.player_id: fl.line for fl in final.players}
    injured = {r.player_id: r for r in injuries}
    out: List[Player] = []
    records: List[EvolutionRecord] = []
    skipped: List[str] = []

    for player in players:
        try:
            updated, recs = _post_game_player(
                player,
                lines.get(player.player_id),
                injured.get(player.player_id),
                game_id=str(game_id),
                rules=rules,
            )
        except (EvolutionDataError, AttributeDataError):
            logger.warning(
                "EVOLUTION_SKIPPED cycle=game ref=%s player_id=%s", game_id, player.player_id, exc_info=True
            )
            out.append(player)
            skipped.append(player.player_id)
            continue
        out.append(updated)
        records.extend(recs)

    return EvolutionReport(players=tuple(out), records=tuple(records), skipped=tuple(skipped))


# ---------------------------------------------------------------------------
# Weekly
# ---------------------------------------------------------------------------


def _weekly_player(
    player: Player,
    *,
    week_id: str,
    minutes: float,
    games: int,
    facility_level: int,
    teammates: Sequence[Player],
    catalog: Optional[BadgeCatalog],
    rules: EvolutionRules,
) -> Tuple[Player, List[EvolutionRecord]]:
    validate_history(player.player_id, player.recent_performances)
    rng = random.Random(stable_seed("weekly", week_id, player.player_id))
    avg_minutes = float(minutes) / games if games > 0 else 0.0

    dev = weekly_development_points(
        player,
        avg_minutes=avg_minutes,
        development_boost=development_boost(player, teammates, catalog),
        facility_level=facility_level,
        rules=rules,
    )
    if not player.is_available:
        # no growth while out injured; decline still applies
        dev = 0.0
    reg = weekly_regression_points(player.age, rules)

    growth: Dict[str, float] = {}
    decline: Dict[str, float] = {}
    for cat, names in ATTRIBUTE_NAMES.items():
        for name in names:
            key = f"{cat}.{name}"
            delta = attribute_change(key, int(player.age), dev * rng.uniform(0.8, 1.2), reg)
            if delta > 0:
                growth[key] = delta
            elif delta < 0:
                decline[key] = delta

    p, records = enforce_bounds(player, cycle="week", ref=week_id, floor=rules.floor)
    p = replace(p, fatigue=clamp(p.fatigue - rules.weekly_recovery, 0.0, 100.0))
    p, recs = apply_changes(p, growth, cause="growth", cycle="week", ref=week_id, floor=rules.floor)
    records.extend(recs)
    p, recs = apply_changes(p, decline, cause="decline", cycle="week", ref=week_id, floor=rules.floor)
    records.extend(recs)
    return p, records


def process_weekly(
    players: Sequence[Player],
    *,
    week_id: str,
    minutes: Optional[Mapping[str, float]] = None,
    games: Optional[Mapping[str, int]] = None,
    facility_level: int = 3,
    teammates: Optional[Sequence[Player]] = None,
    catalog: Optional[BadgeCatalog] = None,
    rules: EvolutionRules = DEFAULT_EVOLUTION_RULES,
) -> EvolutionReport:
    minutes = minutes or {}
    games = games or {}
    mates = list(teammates) if teammates is not None else list(players)
    out: List[Player] = []
    records: List[EvolutionRecord] = []
    skipped: List[str] = []

    for player in players:
        try:
            updated, recs = _weekly_player(
                player,
                week_id=str(week_id),
                minutes=float(minutes.get(player.player_id, 0.0)),
                games=int(games.get(player.player_id, 0)),
                facility_level=facility_level,
                teammates=mates,
                catalog=catalog,
                rules=rules,
            )
        except (EvolutionDataError, AttributeDataError):
            logger.warning(
                "EVOLUTION_SKIPPED cycle=week ref=%s player_id=%s", week_id, player.player_id, exc_info=True
            )
            out.append(player)
            skipped.append(player.player_id)
            continue
        out.append(updated)
        records.extend(recs)

    logger.info(
        "EVOLUTION_WEEKLY_DONE week_id=%s players=%d records=%d skipped=%d",
        week_id, len(out), len(records), len(skipped),
    )
    return EvolutionReport(players=tuple(out), records=tuple(records), skipped=tuple(skipped))
