import json

import pytest

from badges import (
    SynergyCache,
    active_effects,
    chemistry_contribution,
    default_catalog,
    development_boost,
    dynamic_duos,
    load_catalog,
    roster_synergies,
)
from engine_errors import CatalogError
from tests.util.factories import make_player


def _kick_out_pair(level="gold"):
    passer = make_player("pg", position="PG", badges=[("dimer", level)])
    shooter = make_player("sg", position="SG", badges=[("catch_and_shoot", level)])
    return passer, shooter


def test_default_catalog_is_cached_and_complete():
    cat = default_catalog()
    assert cat is default_catalog()
    assert "dimer" in cat.badges
    ids = {s.synergy_id for s in cat.synergies}
    assert {"dimer_catch_and_shoot", "lob_city", "screen_and_roll", "paint_fortress"} <= ids


def test_dimer_catch_and_shoot_boosts_the_shooter_only():
    passer, shooter = _kick_out_pair()
    fx = active_effects([passer, shooter, make_player("c", position="C")])
    assert fx.modifier("sg", "offense.three_point") == pytest.approx(0.05)
    assert fx.modifier("pg", "offense.three_point") == 0.0
    assert [a.synergy_id for a in fx.activations] == ["dimer_catch_and_shoot"]
    assert fx.activations_for("sg")[0].player_a == "pg"


def test_disabled_engine_activates_nothing_but_keeps_badge_profiles():
    passer, shooter = _kick_out_pair()
    fx = active_effects([passer, shooter], enabled=False)
    assert fx.activations == ()
    assert fx.modifier("sg", "offense.three_point") == 0.0
    assert fx.profile("sg").shot["three"] == pytest.approx(0.10)


def test_min_level_gate():
    passer = make_player("pg", badges=[("floor_general", "bronze")])
    shooter = make_player("sg", badges=[("deadeye", "gold")])
    fx = active_effects([passer, shooter])
    assert not any(a.synergy_id == "general_deadeye" for a in fx.activations)


def test_team_synergy_applies_to_every_teammate():
    general = make_player("pg", badges=[("floor_general", "silver")])
    shooter = make_player("sf", badges=[("deadeye", "silver")])
    big = make_player("c", position="C")
    fx = active_effects([general, shooter, big])
    assert fx.modifier("c", "offense.three_point") == pytest.approx(0.03)
    assert fx.modifier("pg", "offense.three_point") == pytest.approx(0.03)


def test_stacked_modifiers_respect_ceiling():
    source = {
        "badges": [
            {"id": "a", "effects": {}},
            {"id": "b", "effects": {}},
        ],
        "synergies": [
            {"id": "s1", "badge_a": "a", "badge_b": "b", "beneficiary": "both",
             "modifiers": {"offense.layup": 0.3}},
            {"id": "s2", "badge_a": "b", "badge_b": "a", "beneficiary": "both",
             "modifiers": {"offense.layup": 0.3}},
        ],
    }
    cat = load_catalog(source)
    x = make_player("x", badges=[("a", "bronze")])
    y = make_player("y", badges=[("b", "bronze")])
    fx = active_effects([x, y], cat)
    assert fx.modifier("x", "offense.layup") == pytest.approx(0.40)


def test_load_catalog_from_json_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "badges": [{"id": "a", "effects": {"gold": {"catchShootBoost": 0.2}}}],
        "synergies": [],
    }))
    cat = load_catalog(path)
    assert cat.badge("a").effects_at("gold")["catchShootBoost"] == 0.2


@pytest.mark.parametrize("source", [
    {"badges": [{"id": "a"}, {"id": "a"}]},
    {"badges": [{"id": "a", "effects": {"platinum": {}}}]},
    {"badges": [{"id": "a"}], "synergies": [{"id": "s", "badge_a": "a", "badge_b": "missing"}]},
    {"badges": [{"id": "a"}, {"id": "b"}],
     "synergies": [{"id": "s", "badge_a": "a", "badge_b": "b", "modifiers": {"offense.dunk": 0.1}}]},
    {"badges": [{"id": "a"}, {"id": "b"}],
     "synergies": [{"id": "s", "badge_a": "a", "badge_b": "b", "beneficiary": "coach"}]},
])
def test_invalid_catalog_rows_raise(source):
    with pytest.raises(CatalogError):
        load_catalog(source)


def test_unreadable_catalog_file_raises(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "nope.json")


def test_synergy_cache_recomputes_only_on_lineup_change():
    passer, shooter = _kick_out_pair()
    cache = SynergyCache()
    first = cache.get([passer, shooter])
    assert cache.get([shooter, passer]) is first
    cache.get([passer, make_player("z")])
    assert (cache.hits, cache.misses) == (1, 2)


def test_roster_queries():
    a = make_player("a", badges=[("floor_general", "gold"), ("dimer", "gold")])
    b = make_player("b", badges=[("catch_and_shoot", "gold"), ("deadeye", "gold")])
    c = make_player("c")
    roster = [a, b, c]

    pairs = roster_synergies(roster)
    assert [(p.player_a, p.player_b) for p in pairs] == [("a", "b")]
    assert len(pairs[0].synergies) == 3
    assert [(d.player_a, d.player_b) for d in dynamic_duos(roster)] == [("a", "b")]
    assert development_boost(a, roster) == pytest.approx(0.15)
    assert development_boost(c, roster) == 0.0
    assert chemistry_contribution(roster) == 2
