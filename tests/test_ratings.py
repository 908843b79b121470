import math

import pytest

from engine_errors import AttributeDataError
from ratings import Badge, CoachingScheme, InjuryState, Player, overall_rating
from tests.util.factories import make_player, make_team


def test_missing_attribute_defaults_to_fifty():
    p = Player(player_id="p1", name="Sparse")
    assert p.rating("offense", "three_point") == 50.0


@pytest.mark.parametrize("bad", ["seventy", float("nan"), 120, -3, True])
def test_invalid_attribute_raises(bad):
    p = Player(player_id="p1", name="Bad", offense={"three_point": bad})
    with pytest.raises(AttributeDataError):
        p.rating("offense", "three_point")


def test_unknown_category_raises_key_error():
    p = make_player("p1")
    with pytest.raises(KeyError):
        p.attributes("spirit")


def test_overall_rating_is_weighted_and_clamped():
    assert overall_rating(make_player("avg", 70)) == 70
    assert overall_rating(make_player("low", 5)) == 40
    assert overall_rating(make_player("high", 99)) == 99


def test_overall_weights_offense_most():
    shooter = make_player("o", 60, overrides={f"offense.{n}": 90 for n in (
        "three_point", "mid_range", "close_shot", "layup", "free_throw",
        "ball_handling", "pass_accuracy", "pass_vision", "post_control", "draw_foul",
    )})
    athlete = make_player("ph", 60, overrides={f"physical.{n}": 90 for n in (
        "speed", "acceleration", "strength", "vertical", "stamina", "durability",
    )})
    assert overall_rating(shooter) > overall_rating(athlete)


def test_validation_of_enums():
    with pytest.raises(ValueError):
        Badge("deadeye", "platinum")
    with pytest.raises(ValueError):
        CoachingScheme(offense="triangle")
    with pytest.raises(ValueError):
        make_player("x", injury_risk="Z")
    with pytest.raises(ValueError):
        make_player("x", position="G")


def test_badge_rank_and_missing_badge():
    p = make_player("p", badges=[("deadeye", "gold")])
    assert p.badge_rank("deadeye") == 3
    assert p.badge_rank("dimer") == 0


def test_injured_player_is_not_eligible():
    hurt = make_player("h", injury=InjuryState("sprained_ankle", games_remaining=2))
    healed = make_player("ok", injury=InjuryState("sprained_ankle", games_remaining=0))
    team = make_team("T", roster=[hurt, healed])
    assert not hurt.is_available
    assert healed.is_available
    assert [p.player_id for p in team.eligible_players()] == ["ok"]


def test_chemistry_tracks_morale_and_is_capped():
    happy = make_team("H", roster=[make_player(f"h{i}", morale=100.0) for i in range(5)])
    sad = make_team("S", roster=[make_player(f"s{i}", morale=0.0) for i in range(5)])
    neutral = make_team("N", roster=[make_player(f"n{i}", morale=80.0) for i in range(5)])
    assert math.isclose(happy.chemistry_modifier(), 0.0075)
    assert sad.chemistry_modifier() == -0.03
    assert neutral.chemistry_modifier() == 0.0


def test_chemistry_override_wins():
    team = make_team("T", chemistry_override=0.02)
    assert team.chemistry_modifier() == 0.02
