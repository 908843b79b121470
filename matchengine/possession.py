from __future__ import annotations

"""Single-possession resolution.

``resolve_possession`` is pure given the supplied ``random.Random``: it reads the
two on-court sides and the lineup modifier sets, and returns a
``PossessionOutcome`` carrying one stat-delta row per involved player. It never
mutates game state; the game loop folds the outcome.

Flow per segment (a possession has 1 + offensive-rebound segments):
1) ball handler (usage / overall weighted) and matching defender
2) non-shooting foul check (free throws when the defense is in the bonus)
3) turnover check (steal credit to a defender)
4) action: drive / spot_up / post_up / pass
5) shot: make probability = base + sum(modifiers), clamped, shooting-foul check
6) miss: block roll, rebound contest; offensive rebound restarts the segment
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from badges.synergy import LineupEffects
from ratings.overall import overall_rating
from ratings.types import Player

from .config import (
    CLUTCH_MARGIN,
    CLUTCH_SECONDS,
    CONTEST_WEIGHT,
    DEFAULT_RULES,
    DEFENSE_CONTEST_ADJ,
    DEFENSE_FOUL_ADJ,
    DEFENSE_TURNOVER_ADJ,
    DEFENSIVE_REBOUND_ADVANTAGE,
    FATIGUE_SHOT_WEIGHT,
    FOUL_ATTR_SCALE,
    FOUL_CAUTION_AT,
    FOUL_CAUTION_MULT,
    FREE_THROW_BASE,
    GUARD_HANDLER_BONUS,
    MATCHUP_FACTOR_RANGE,
    MATCHUP_SCALE,
    OFFENSE_ACTION_MULT,
    OFFENSE_PACE,
    OREB_CHANCE_RANGE,
    REBOUND_HEIGHT_BASELINE_IN,
    REBOUND_POSITION_MULT,
    SEPARATION_WEIGHT,
    SHOT_BASE,
    SHOT_POINTS,
    TURNOVER_SKILL_WEIGHT,
    SimRules,
)
from .core import clamp, roll, weighted_choice
from .models import DELTA_FIELDS, OnCourtTeam, PossessionModifiers, PossessionOutcome, StatDelta

# shot type -> (category, attribute) for the shooter
SHOT_ATTR: Dict[str, Tuple[str, str]] = {
    "three": ("offense", "three_point"),
    "mid": ("offense", "mid_range"),
    "rim": ("offense", "layup"),
    "post": ("offense", "post_control"),
}
# shot type -> defender attribute that contests it
CONTEST_ATTR: Dict[str, Tuple[str, str]] = {
    "three": ("defense", "perimeter_defense"),
    "mid": ("defense", "perimeter_defense"),
    "rim": ("defense", "interior_defense"),
    "post": ("defense", "interior_defense"),
}

SHOT_ACTIONS: Tuple[str, ...] = ("drive", "spot_up", "post_up")


def effective_rating(player: Player, category: str, name: str, effects: LineupEffects) -> float:
    """Rating after synergy modifiers (relative, multiplicative)."""
    base = player.rating(category, name)
    return base * (1.0 + effects.modifier(player.player_id, f"{category}.{name}"))


def _matchup_factor(off_rating: float, def_rating: float) -> float:
    lo, hi = MATCHUP_FACTOR_RANGE
    return clamp(1.0 + (off_rating - def_rating) / MATCHUP_SCALE, lo, hi)


def _prob(rules: SimRules, p: float) -> float:
    return clamp(p, rules.prob_floor, rules.prob_ceil)


# ---------------------------------------------------------------------------
# Selection helpers
# ---------------------------------------------------------------------------


def select_ball_handler(offense: OnCourtTeam, rng: random.Random) -> Player:
    items: List[Tuple[Player, float]] = []
    for p in offense.players:
        w = float(overall_rating(p)) * (0.5 + float(p.tendencies.usage) / 100.0)
        if p.is_guard:
            w *= GUARD_HANDLER_BONUS
        items.append((p, w))
    return weighted_choice(rng, items)


def matching_defender(attacker: Player, defense: OnCourtTeam) -> Player:
    pos = attacker.primary_position
    for d in defense.players:
        if d.primary_position == pos:
            return d
    return defense.players[0]


def _shot_type_for(action: str, player: Player, rng: random.Random) -> str:
    if action == "drive":
        return "rim"
    if action == "post_up":
        return "post"
    return "three" if rng.random() < float(player.tendencies.three_rate) / 100.0 else "mid"


def choose_action(
    handler: Player,
    defender: Player,
    offense: OnCourtTeam,
    effects: PossessionModifiers,
    rng: random.Random,
    *,
    hurried: bool,
    allow_pass: bool = True,
) -> str:
    """Weighted draw over tendencies, scaled by scheme and matchup quality."""
    t = handler.tendencies
    mult = OFFENSE_ACTION_MULT.get(offense.scheme.offense, {})
    o_eff, d_eff = effects.offense, effects.defense

    handling = effective_rating(handler, "offense", "ball_handling", o_eff)
    shooting = max(
        effective_rating(handler, "offense", "three_point", o_eff),
        effective_rating(handler, "offense", "mid_range", o_eff),
    )
    post = effective_rating(handler, "offense", "post_control", o_eff)
    perim_d = effective_rating(defender, "defense", "perimeter_defense", d_eff)
    inside_d = effective_rating(defender, "defense", "interior_defense", d_eff)

    weights = {
        "drive": float(t.drive) * mult.get("drive", 1.0) * _matchup_factor(handling, perim_d),
        "spot_up": float(t.spot_up) * mult.get("spot_up", 1.0) * _matchup_factor(shooting, perim_d),
        "post_up": float(t.post_up) * mult.get("post_up", 1.0) * _matchup_factor(post, inside_d),
        "pass": float(t.passing) * mult.get("pass", 1.0) if allow_pass else 0.0,
    }
    if hurried:
        weights["pass"] *= 0.25
        weights["post_up"] *= 0.5
    return weighted_choice(rng, list(weights.items()))


# ---------------------------------------------------------------------------
# Probability models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ShotProbability:
    base: float
    modifiers: Mapping[str, float]
    raw: float
    value: float  # clamped to [prob_floor, prob_ceil]


def shot_probability(
    shooter: Player,
    defender: Player,
    shot_type: str,
    offense: OnCourtTeam,
    defense: OnCourtTeam,
    effects: PossessionModifiers,
    *,
    rules: SimRules = DEFAULT_RULES,
    forced: bool = False,
    quick: bool = False,
    clutch: bool = False,
) -> ShotProbability:
    cat, name = SHOT_ATTR[shot_type]
    rating = effective_rating(shooter, cat, name, effects.offense)
    lo, slope = SHOT_BASE[shot_type]
    base = lo + slope * rating / 100.0

    dcat, dname = CONTEST_ATTR[shot_type]
    def_rating = effective_rating(defender, dcat, dname, effects.defense)
    separation = (shooter.rating("physical", "speed") + shooter.rating("physical", "acceleration")) / 200.0
    contest = def_rating / 100.0 * (1.0 - SEPARATION_WEIGHT * separation)
    contest += effects.defense.profile(defender.player_id).contest.get(shot_type, 0.0)
    contest += DEFENSE_CONTEST_ADJ.get(defense.scheme.defense, {}).get(shot_type, 0.0)
    contest = clamp(contest, 0.0, 1.0)

    mods: Dict[str, float] = {"contest": -base * contest * CONTEST_WEIGHT}

    badge = effects.offense.profile(shooter.player_id).shot.get(shot_type, 0.0)
    if badge:
        mods["badges"] = base * badge

    fatigue = offense.fatigue_of(shooter.player_id)
    stamina = shooter.rating("physical", "stamina")
    mods["fatigue"] = -base * (fatigue / 100.0) * (1.0 - stamina / 200.0) * FATIGUE_SHOT_WEIGHT

    if offense.chemistry:
        mods["chemistry"] = base * offense.chemistry
    if forced:
        mods["forced"] = -rules.forced_shot_penalty
    elif quick:
        mods["quick"] = -rules.quick_shot_penalty
    if shooter.streak.kind == "hot":
        mods["streak"] = rules.streak_shot_modifier
    elif shooter.streak.kind == "cold":
        mods["streak"] = -rules.streak_shot_modifier
    if clutch:
        mods["clutch"] = (shooter.rating("mental", "clutch") - 50.0) / 1000.0

    raw = base + sum(mods.values())
    return ShotProbability(base=base, modifiers=mods, raw=raw, value=_prob(rules, raw))


def free_throw_probability(shooter: Player, offense: OnCourtTeam, rules: SimRules = DEFAULT_RULES) -> float:
    lo, slope = FREE_THROW_BASE
    base = lo + slope * shooter.rating("offense", "free_throw") / 100.0
    fatigue = offense.fatigue_of(shooter.player_id)
    stamina = shooter.rating("physical", "stamina")
    penalty = -base * (fatigue / 100.0) * (1.0 - stamina / 200.0) * FATIGUE_SHOT_WEIGHT
    return _prob(rules, base + penalty)


def turnover_probability(
    handler: Player,
    offense: OnCourtTeam,
    defense: OnCourtTeam,
    effects: PossessionModifiers,
    rules: SimRules = DEFAULT_RULES,
) -> float:
    steals = [effective_rating(d, "defense", "steal", effects.defense) for d in defense.players]
    avg_steal = sum(steals) / len(steals)
    handling = effective_rating(handler, "offense", "ball_handling", effects.offense)
    security = effects.offense.profile(handler.player_id).ball_security
    p = (
        rules.turnover_base
        + TURNOVER_SKILL_WEIGHT * (avg_steal - handling) / 100.0
        - 0.1 * security
        + DEFENSE_TURNOVER_ADJ.get(defense.scheme.defense, 0.0)
    )
    return _prob(rules, p)


def shooting_foul_probability(
    shooter: Player,
    defender: Player,
    shot_type: str,
    defense: OnCourtTeam,
    rules: SimRules = DEFAULT_RULES,
) -> float:
    p = float(rules.shooting_foul_base.get(shot_type, 0.05))
    p += (defender.rating("mental", "aggression") - 50.0) / FOUL_ATTR_SCALE
    p += (shooter.rating("offense", "draw_foul") - 50.0) / FOUL_ATTR_SCALE
    p += DEFENSE_FOUL_ADJ.get(defense.scheme.defense, 0.0)
    if defense.fouls_of(defender.player_id) >= FOUL_CAUTION_AT:
        p *= FOUL_CAUTION_MULT
    return _prob(rules, p)


def non_shooting_foul_probability(fouler: Player, defense: OnCourtTeam, rules: SimRules = DEFAULT_RULES) -> float:
    p = rules.non_shooting_foul_base
    p += (fouler.rating("mental", "aggression") - 50.0) / FOUL_ATTR_SCALE
    p += DEFENSE_FOUL_ADJ.get(defense.scheme.defense, 0.0)
    if defense.fouls_of(fouler.player_id) >= FOUL_CAUTION_AT:
        p *= FOUL_CAUTION_MULT
    return _prob(rules, p)


def offensive_rebound_chance(offense: OnCourtTeam, defense: OnCourtTeam, effects: PossessionModifiers) -> float:
    off_total = sum(_rebound_weight(p, "offensive_rebound", effects.offense) for p in offense.players)
    def_total = sum(_rebound_weight(p, "defensive_rebound", effects.defense) for p in defense.players)
    total = off_total + def_total * DEFENSIVE_REBOUND_ADVANTAGE
    if total <= 0:
        total = 1.0
    lo, hi = OREB_CHANCE_RANGE
    return clamp(off_total / total, lo, hi)


def _rebound_weight(p: Player, attr: str, effects: LineupEffects) -> float:
    w = effective_rating(p, "defense", attr, effects) * REBOUND_POSITION_MULT.get(p.primary_position, 1.0)
    w *= max(float(p.height_in), 1.0) / REBOUND_HEIGHT_BASELINE_IN
    return w * (1.0 + effects.profile(p.player_id).rebound)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class _Ledger:
    """Accumulates stat deltas per involved player, in first-touch order."""

    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, int]] = {}
        self._teams: Dict[str, str] = {}

    def add(self, player: Player, team_id: str, **counts: int) -> None:
        row = self._rows.setdefault(player.player_id, {})
        self._teams[player.player_id] = team_id
        for k, v in counts.items():
            row[k] = row.get(k, 0) + int(v)

    def points(self, team_id: str) -> int:
        return sum(r.get("pts", 0) for pid, r in self._rows.items() if self._teams[pid] == team_id)

    def freeze(self) -> Tuple[StatDelta, ...]:
        out = []
        for pid, row in self._rows.items():
            out.append(StatDelta(pid, self._teams[pid], **{f: row.get(f, 0) for f in DELTA_FIELDS}))
        return tuple(out)


class _PossessionRun:
    def __init__(
        self,
        offense: OnCourtTeam,
        defense: OnCourtTeam,
        game_clock: float,
        effects: PossessionModifiers,
        rng: random.Random,
        rules: SimRules,
    ) -> None:
        self.offense = offense
        self.defense = defense
        self.game_clock = float(game_clock)
        self.effects = effects
        self.rng = rng
        self.rules = rules
        self.ledger = _Ledger()
        self.elapsed = 0.0
        self.fouls: List[str] = []
        self.synergies: List[str] = []
        self.handler: Optional[Player] = None
        self.shooter: Optional[Player] = None
        self.assister: Optional[Player] = None
        self.shot_type: Optional[str] = None
        self.shot_prob: Optional[float] = None
        self.action = "noop"
        self.forced = False
        self.second_chances = 0

    # -- small helpers --

    def _off(self, p: Player, **counts: int) -> None:
        self.ledger.add(p, self.offense.team_id, **counts)

    def _def(self, p: Player, **counts: int) -> None:
        self.ledger.add(p, self.defense.team_id, **counts)

    def _clutch(self) -> bool:
        e = self.effects
        remaining = self.game_clock - self.elapsed
        return (
            e.period >= e.regulation_periods
            and remaining <= CLUTCH_SECONDS
            and abs(e.score_margin) <= CLUTCH_MARGIN
        )

    def _free_throws(self, shooter: Player, n: int) -> None:
        p = free_throw_probability(shooter, self.offense, self.rules)
        made = sum(1 for _ in range(n) if roll(self.rng, p))
        self._off(shooter, fta=n, ftm=made, pts=made)

    def _charge_foul(self, fouler: Player) -> None:
        self._def(fouler, pf=1)
        self.fouls.append(fouler.player_id)

    def _pick_teammate(self, exclude: Player, attr: Tuple[str, str], boost: str = "") -> Optional[Player]:
        items = []
        for p in self.offense.players:
            if p.player_id == exclude.player_id:
                continue
            w = p.rating(*attr)
            if boost:
                w *= 1.0 + getattr(self.effects.offense.profile(p.player_id), boost)
            items.append((p, w))
        if not items:
            return None
        return weighted_choice(self.rng, items)

    # -- segment --

    def run(self, shot_clock: float) -> str:
        """Resolve segments until the possession ends. Returns the result string."""
        pace = OFFENSE_PACE.get(self.offense.scheme.offense, 1.0)
        draw = self.rng.uniform(self.rules.possession_seconds_min, self.rules.possession_seconds_max) / pace
        forced = draw >= shot_clock
        seg_time = min(draw, shot_clock)
        hurried = self.game_clock <= self.rules.quick_shot_window
        if seg_time >= self.game_clock:
            seg_time = self.game_clock
            forced = False
            hurried = True
        self.elapsed = seg_time

        while True:
            result = self._segment(forced=forced, hurried=hurried)
            if result != "oreb":
                return result
            self.second_chances += 1
            extra = self.rng.uniform(self.rules.second_chance_seconds_min, self.rules.second_chance_seconds_max)
            extra = min(extra, self.rules.oreb_shot_clock_seconds)
            if self.elapsed + extra >= self.game_clock:
                self.elapsed = self.game_clock
                return "missed"
            self.elapsed += extra
            forced = False
            hurried = (self.game_clock - self.elapsed) <= self.rules.quick_shot_window

    def _segment(self, *, forced: bool, hurried: bool) -> str:
        rng, rules = self.rng, self.rules
        handler = select_ball_handler(self.offense, rng)
        if self.handler is None:
            self.handler = handler
        defender = matching_defender(handler, self.defense)

        # non-shooting foul
        fouler = weighted_choice(
            rng, [(d, d.rating("mental", "aggression")) for d in self.defense.players]
        )
        if roll(rng, non_shooting_foul_probability(fouler, self.defense, rules)):
            self._charge_foul(fouler)
            team_fouls = self.defense.team_fouls + len(self.fouls)
            if team_fouls >= rules.bonus_team_fouls:
                self.action = "foul"
                self.shooter = handler
                self._free_throws(handler, 2)
                return "foul"

        # turnover
        if roll(rng, turnover_probability(handler, self.offense, self.defense, self.effects, rules)):
            self.action = "turnover"
            self._off(handler, tov=1)
            steal_p = rules.steal_credit_chance * (1.0 + self.defense.chemistry)
            steal_p += sum(self.effects.defense.profile(d.player_id).steal for d in self.defense.players) * 0.5
            if roll(rng, _prob(rules, steal_p)):
                stealer = weighted_choice(
                    rng,
                    [
                        (
                            d,
                            effective_rating(d, "defense", "steal", self.effects.defense)
                            * (1.0 + self.effects.defense.profile(d.player_id).steal),
                        )
                        for d in self.defense.players
                    ],
                )
                self._def(stealer, stl=1)
            return "turnover"

        action = choose_action(
            handler,
            defender,
            self.offense,
            self.effects,
            rng,
            hurried=hurried or forced,
            allow_pass=len(self.offense.players) > 1,
        )
        self.action = action
        shooter = handler
        assister: Optional[Player] = None
        shot_action = action
        if action == "pass":
            receiver = self._pick_teammate(handler, ("offense", "three_point"))
            if receiver is not None:
                assister = handler
                shooter = receiver
            shot_action = weighted_choice(
                rng,
                [
                    ("drive", float(shooter.tendencies.drive)),
                    ("spot_up", float(shooter.tendencies.spot_up)),
                    ("post_up", float(shooter.tendencies.post_up)),
                ],
            )
            defender = matching_defender(shooter, self.defense)
        else:
            chem = self.offense.chemistry
            pre_pass = rules.pre_pass_chance * (1.0 + chem)
            if roll(rng, _prob(rules, pre_pass)):
                assister = self._pick_teammate(handler, ("offense", "pass_vision"), boost="assist")

        shot_type = _shot_type_for(shot_action, shooter, rng)
        return self._shoot(shooter, defender, assister, shot_type, forced=forced, hurried=hurried)

    def _shoot(
        self,
        shooter: Player,
        defender: Player,
        assister: Optional[Player],
        shot_type: str,
        *,
        forced: bool,
        hurried: bool,
    ) -> str:
        rng, rules = self.rng, self.rules
        sp = shot_probability(
            shooter,
            defender,
            shot_type,
            self.offense,
            self.defense,
            self.effects,
            rules=rules,
            forced=forced,
            quick=hurried,
            clutch=self._clutch(),
        )
        self.shooter, self.assister, self.shot_type = shooter, assister, shot_type
        self.shot_prob = sp.value
        self.forced = self.forced or forced
        for act in self.effects.offense.activations_for(shooter.player_id):
            if act.synergy_id not in self.synergies:
                self.synergies.append(act.synergy_id)

        fouled = roll(rng, shooting_foul_probability(shooter, defender, shot_type, self.defense, rules))
        made = roll(rng, sp.value)
        pts = SHOT_POINTS[shot_type]
        is_three = 1 if shot_type == "three" else 0

        if fouled:
            self._charge_foul(defender)
            if made:
                self._off(shooter, fga=1, fgm=1, tpa=is_three, tpm=is_three, pts=pts)
                if assister is not None:
                    self._off(assister, ast=1)
                self._free_throws(shooter, 1)
                return "made"
            self.assister = None
            self._free_throws(shooter, pts)
            return "foul"

        self._off(shooter, fga=1, tpa=is_three)
        if made:
            self._off(shooter, fgm=1, tpm=is_three, pts=pts)
            if assister is not None:
                self._off(assister, ast=1)
            return "made"
        self.assister = None

        if shot_type != "three":
            block_p = rules.block_chance + 0.1 * sum(
                self.effects.defense.profile(d.player_id).block for d in self.defense.players
            )
            if roll(rng, _prob(rules, block_p)):
                blocker = weighted_choice(
                    rng,
                    [
                        (
                            d,
                            effective_rating(d, "defense", "block", self.effects.defense)
                            * (1.0 + self.effects.defense.profile(d.player_id).block),
                        )
                        for d in self.defense.players
                    ],
                )
                self._def(blocker, blk=1)

        # rebound; once the second-chance budget is spent the defense secures it
        capped = self.second_chances >= rules.max_second_chances
        oreb_p = offensive_rebound_chance(self.offense, self.defense, self.effects)
        if not capped and roll(rng, oreb_p):
            reb = weighted_choice(
                rng, [(p, _rebound_weight(p, "offensive_rebound", self.effects.offense)) for p in self.offense.players]
            )
            self._off(reb, orb=1)
            return "oreb"
        reb = weighted_choice(
            rng, [(p, _rebound_weight(p, "defensive_rebound", self.effects.defense)) for p in self.defense.players]
        )
        self._def(reb, drb=1)
        return "missed"


def resolve_possession(
    offense: OnCourtTeam,
    defense: OnCourtTeam,
    game_clock: float,
    shot_clock: float,
    modifiers: PossessionModifiers,
    rng: random.Random,
    *,
    rules: SimRules = DEFAULT_RULES,
    seq: int = 1,
) -> PossessionOutcome:
    """Simulate one offensive possession.

    Raises AttributeDataError on malformed player data; the caller decides how to
    recover (the game loop records a no-op possession).
    """
    if not offense.players or not defense.players:
        raise ValueError("resolve_possession requires players on both sides")

    run = _PossessionRun(offense, defense, game_clock, modifiers, rng, rules)
    result = run.run(float(shot_clock))

    return PossessionOutcome(
        seq=int(seq),
        period=int(modifiers.period),
        offense_team_id=offense.team_id,
        defense_team_id=defense.team_id,
        ball_handler_id=run.handler.player_id if run.handler else None,
        action=run.action,
        result=result,
        points=run.ledger.points(offense.team_id),
        elapsed=float(run.elapsed),
        game_clock=float(game_clock),
        offense_on_court=offense.player_ids,
        defense_on_court=defense.player_ids,
        deltas=run.ledger.freeze(),
        shot_type=run.shot_type,
        shooter_id=run.shooter.player_id if run.shooter else None,
        assister_id=run.assister.player_id if run.assister else None,
        shot_probability=run.shot_prob,
        second_chances=run.second_chances,
        forced=run.forced,
        fouls=tuple(run.fouls),
        synergies=tuple(run.synergies),
    )
