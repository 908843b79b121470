import random

import pytest

from badges import active_effects
from engine_errors import AttributeDataError
from matchengine import DEFAULT_RULES, SimRules, resolve_possession, shot_probability
from matchengine.fatigue import possession_gain
from matchengine.injuries import injury_probability, roll_injury
from matchengine.models import OnCourtTeam, PossessionModifiers
from matchengine.possession import (
    offensive_rebound_chance,
    shooting_foul_probability,
    turnover_probability,
)
from ratings import StreakState
from ratings.config import DEFAULT_ATTRIBUTE
from tests.util.factories import make_player, make_roster

RESULTS = {"made", "missed", "turnover", "foul"}


def _side(team_id, players, **kw):
    return OnCourtTeam(team_id=team_id, players=tuple(players), **kw)


def _five(prefix, rating=60, **fields):
    return make_roster(prefix, 5, rating, **fields)


def _modifiers(off_players, def_players, enabled=True, **kw):
    return PossessionModifiers(
        offense=active_effects(off_players, enabled=enabled),
        defense=active_effects(def_players, enabled=enabled),
        **kw,
    )


def test_synergy_raises_make_probability():
    passer = make_player("pg", position="PG", badges=[("dimer", "gold")])
    shooter = make_player("sg", position="SG", badges=[("catch_and_shoot", "gold")])
    offense = [passer, shooter] + list(make_roster("o", 3))
    defense = list(_five("d"))
    o, d = _side("O", offense), _side("D", defense)

    on = shot_probability(shooter, defense[1], "three", o, d, _modifiers(offense, defense, enabled=True))
    off = shot_probability(shooter, defense[1], "three", o, d, _modifiers(offense, defense, enabled=False))

    assert on.value > off.value
    assert on.base > off.base


def test_shot_probability_is_clamped():
    star = make_player("s", 99)
    scrub = make_player("x", 1)
    o_star, o_scrub = _side("O", [star]), _side("O", [scrub])
    d = _side("D", [make_player("d", 99)])
    mods = PossessionModifiers()

    capped = SimRules.from_overrides({"prob_ceil": 0.30})
    assert shot_probability(star, d.players[0], "rim", o_star, d, mods, rules=capped).value == 0.30

    floored = SimRules.from_overrides({"prob_floor": 0.40})
    sp = shot_probability(scrub, d.players[0], "three", o_scrub, d, mods, rules=floored, forced=True)
    assert sp.raw < 0.40
    assert sp.value == 0.40


def test_shot_probability_breakdown_sums_to_raw():
    shooter = make_player("s", 70)
    d = _side("D", [make_player("d", 60)])
    o = _side("O", [shooter], fatigue={"s": 60.0}, chemistry=0.02)
    sp = shot_probability(shooter, d.players[0], "mid", o, d, PossessionModifiers(), quick=True, clutch=True)
    assert sp.raw == pytest.approx(sp.base + sum(sp.modifiers.values()))
    assert sp.modifiers["fatigue"] < 0
    assert sp.modifiers["quick"] == -DEFAULT_RULES.quick_shot_penalty
    assert "forced" not in sp.modifiers


def test_fatigue_and_streak_move_probability():
    shooter = make_player("s", 70)
    hot = make_player("s", 70, streak=StreakState("hot", 3))
    d = _side("D", [make_player("d", 60)])
    fresh = _side("O", [shooter])
    tired = _side("O", [shooter], fatigue={"s": 90.0})
    mods = PossessionModifiers()
    base = shot_probability(shooter, d.players[0], "three", fresh, d, mods).value
    assert shot_probability(shooter, d.players[0], "three", tired, d, mods).value < base
    assert shot_probability(hot, d.players[0], "three", fresh, d, mods).value > base


def test_resolve_possession_invariants_hold_across_seeds():
    off, de = _five("o", 65), _five("d", 60)
    o, d = _side("O", off), _side("D", de)
    mods = _modifiers(off, de)
    for seed in range(300):
        out = resolve_possession(o, d, 720.0, 24.0, mods, random.Random(seed), seq=seed + 1)
        assert out.result in RESULTS
        assert 0 < out.elapsed <= 720.0
        assert out.second_chances <= DEFAULT_RULES.max_second_chances
        off_pts = sum(x.pts for x in out.deltas if x.team_id == "O")
        assert out.points == off_pts
        assert all(x.pts == 0 for x in out.deltas if x.team_id == "D")
        for x in out.deltas:
            assert x.fgm <= x.fga
            assert x.tpm <= x.tpa
            assert x.ftm <= x.fta
        if out.result == "made":
            assert out.points in (2, 3, 4)
            assert out.shooter_id in o.player_ids
        if out.assister_id is not None:
            assert out.result == "made"
            assert out.assister_id != out.shooter_id
        assert set(out.fouls) <= set(d.player_ids)


def test_resolve_possession_is_deterministic_for_a_seed():
    off, de = _five("o"), _five("d")
    o, d = _side("O", off), _side("D", de)
    mods = _modifiers(off, de)
    a = resolve_possession(o, d, 300.0, 24.0, mods, random.Random(42))
    b = resolve_possession(o, d, 300.0, 24.0, mods, random.Random(42))
    assert a == b


def test_possession_never_outlasts_the_game_clock():
    off, de = _five("o"), _five("d")
    o, d = _side("O", off), _side("D", de)
    for seed in range(100):
        out = resolve_possession(o, d, 3.5, 24.0, _modifiers(off, de), random.Random(seed))
        assert out.elapsed <= 3.5


def test_empty_side_raises():
    with pytest.raises(ValueError):
        resolve_possession(_side("O", []), _side("D", _five("d")), 720.0, 24.0, PossessionModifiers(), random.Random(1))


def test_corrupt_attribute_raises_attribute_error():
    off = [make_player(f"o{i}", overrides={"offense.ball_handling": "bad"}) for i in range(5)]
    de = list(_five("d"))
    with pytest.raises(AttributeDataError):
        resolve_possession(_side("O", off), _side("D", de), 720.0, 24.0, PossessionModifiers(), random.Random(1))


def test_offensive_rebound_chance_is_bounded():
    bigs = [make_player(f"b{i}", 99, position="C", height_in=86) for i in range(5)]
    smalls = [make_player(f"s{i}", 1, position="PG", height_in=70) for i in range(5)]
    mods = PossessionModifiers()
    assert offensive_rebound_chance(_side("O", bigs), _side("D", smalls), mods) == 0.40
    assert offensive_rebound_chance(_side("O", smalls), _side("D", bigs), mods) == 0.15


def test_height_helps_rebounding():
    tall = [make_player(f"t{i}", 60, height_in=84) for i in range(5)]
    short = [make_player(f"s{i}", 60, height_in=74) for i in range(5)]
    d = _side("D", _five("d"))
    mods = PossessionModifiers()
    assert offensive_rebound_chance(_side("O", tall), d, mods) > offensive_rebound_chance(_side("O", short), d, mods)


def test_defender_in_foul_trouble_plays_cautiously():
    shooter = make_player("s", 60)
    defender = make_player("d", 60)
    clean = _side("D", [defender])
    loaded = _side("D", [defender], fouls={"d": 4})
    assert shooting_foul_probability(shooter, defender, "rim", loaded) < shooting_foul_probability(
        shooter, defender, "rim", clean
    )


def test_ball_security_lowers_turnovers():
    careless = make_player("h", 40)
    secure = make_player("h", 40, badges=[("tight_handles", "hof")])
    d = _side("D", [make_player("d", 80)])
    p_careless = turnover_probability(
        careless, _side("O", [careless]), d, PossessionModifiers(offense=active_effects([careless]))
    )
    p_secure = turnover_probability(
        secure, _side("O", [secure]), d, PossessionModifiers(offense=active_effects([secure]))
    )
    assert p_secure < p_careless


def test_injury_probability_grows_with_fatigue_and_risk():
    rules = DEFAULT_RULES
    fragile = make_player("h", 60, injury_risk="H")
    sturdy = make_player("l", 60, injury_risk="L")
    assert injury_probability(fragile, 95.0, rules) > injury_probability(fragile, 20.0, rules)
    assert injury_probability(fragile, 50.0, rules) > injury_probability(sturdy, 50.0, rules)
    durable = make_player("d", 60, injury_risk="H", overrides={"physical.durability": 95})
    assert injury_probability(durable, 50.0, rules) < injury_probability(fragile, 50.0, rules)


def test_corrupt_durability_rolls_as_an_average_player():
    average = make_player("a", 60, overrides={"physical.durability": DEFAULT_ATTRIBUTE})
    for bad in ("n/a", 140, float("nan")):
        player = make_player("c", 60, overrides={"physical.durability": bad})
        assert injury_probability(player, 50.0, DEFAULT_RULES) == injury_probability(average, 50.0, DEFAULT_RULES)


def test_corrupt_stamina_tires_like_an_average_player():
    average = make_player("a", 60, overrides={"physical.stamina": DEFAULT_ATTRIBUTE})
    player = make_player("c", 60, overrides={"physical.stamina": "n/a"})
    kw = dict(pace=1.0, team_modifier=0.0, rules=DEFAULT_RULES)
    assert possession_gain(player, **kw) == possession_gain(average, **kw) > 0


def test_roll_injury_is_consistent_with_severity_table():
    from matchengine.config import INJURY_NAMES, INJURY_SEVERITIES

    rng = random.Random(7)
    for _ in range(200):
        inj = roll_injury(rng)
        _, lo, hi, impact = INJURY_SEVERITIES[inj.severity]
        assert lo <= inj.games_out <= hi
        assert inj.permanent_impact == impact
        assert inj.injury_type in INJURY_NAMES[inj.severity]
