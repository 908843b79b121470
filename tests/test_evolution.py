import pytest

from boxscore import BoxScore, StatLine, finalize
from evolution import DEFAULT_EVOLUTION_RULES, detect_streak, performance_rating, process_post_game, process_weekly
from matchengine.models import InjuryRecord
from ratings import InjuryState
from ratings.config import ATTRIBUTE_NAMES
from tests.util.factories import make_player

BIG_GAME = dict(seconds=1800.0, pts=40, fgm=15, fga=25, tpm=5, tpa=9, orb=2, drb=10, ast=10, stl=3, blk=3)
QUIET_GAME = dict(seconds=1800.0, fga=6)


def _final(*lines):
    box = BoxScore(
        home_team_id="H",
        away_team_id="A",
        lines={ln.player_id: ln for ln in lines},
        team_points={"H": sum(ln.pts for ln in lines if ln.team_id == "H"), "A": 0},
    )
    return finalize(box)


def _post_game(players, *lines, game_id="g1", **kw):
    return process_post_game(players, _final(*lines), game_id=game_id, **kw)


def test_performance_rating_formula():
    line = StatLine("p", "H", seconds=1800.0, pts=20, orb=2, drb=5, ast=4, stl=1, blk=1, tov=2)
    # (20 + 7 + 1.5*4 + 2 + 2 - 2) / 30 * 10
    assert performance_rating(line) == pytest.approx(11.67)


def test_performance_rating_uses_at_least_one_minute():
    assert performance_rating(StatLine("p", "H", seconds=10.0, pts=2)) == 20.0


@pytest.mark.parametrize("history,expected", [
    ((30.0, 26.0, 25.0), ("hot", 3)),
    ((12.0, 5.0, 8.0, 10.0), ("cold", 3)),
    ((30.0, 5.0, 30.0), ("none", 0)),
    ((30.0, 30.0), ("none", 0)),
])
def test_detect_streak(history, expected):
    s = detect_streak(history, DEFAULT_EVOLUTION_RULES)
    assert (s.kind, s.length) == expected


def test_big_game_develops_attributes_through_the_carry():
    player = make_player("p", 60, recent_performances=(26.0, 27.0))
    report = _post_game([player], StatLine("p", "H", **BIG_GAME))
    updated = report.player("p")

    recs = report.records_for("p")
    assert recs
    assert all(r.cause == "performance" and r.delta > 0 and r.cycle == "game" for r in recs)
    assert updated.attribute_progress["offense.three_point"] > 0
    assert updated.rating("offense", "three_point") == 60
    assert updated.streak.kind == "hot"
    assert len(updated.recent_performances) == 3
    assert updated.season.games == 1
    assert updated.season.points == 40
    assert updated.fatigue == pytest.approx(15.0)


def test_carry_crossing_one_moves_the_integer_rating():
    player = make_player("p", 60, attribute_progress={"offense.three_point": 0.95})
    updated = _post_game([player], StatLine("p", "H", **BIG_GAME)).player("p")
    assert updated.rating("offense", "three_point") == 61
    assert 0 <= updated.attribute_progress["offense.three_point"] < 1


def test_poor_game_regresses():
    player = make_player("p", 60)
    report = _post_game([player], StatLine("p", "H", **QUIET_GAME))
    recs = report.records_for("p")
    assert recs
    assert all(r.cause == "performance" and r.delta < 0 for r in recs)
    assert len({r.attribute for r in recs}) <= 3


def test_short_stint_does_not_regress():
    player = make_player("p", 60)
    report = _post_game([player], StatLine("p", "H", seconds=300.0))
    assert not report.records_for("p")


def test_corrupt_history_skips_only_that_player():
    bad = make_player("bad", recent_performances=("n/a",))
    good = make_player("good")
    report = _post_game([bad, good], StatLine("bad", "H", **BIG_GAME), StatLine("good", "H", **BIG_GAME))
    assert report.skipped == ("bad",)
    assert report.player("bad") is bad
    assert report.player("good").season.games == 1


def test_bounds_are_enforced_and_recorded():
    player = make_player("b", 60, potential=70, overrides={"offense.three_point": 80, "offense.layup": 10})
    report = _post_game([player])
    updated = report.player("b")
    assert updated.rating("offense", "three_point") == 70
    assert updated.rating("offense", "layup") == 25
    bounds = {r.attribute: r for r in report.records_for("b") if r.cause == "bounds"}
    assert bounds["three_point"].after == 70
    assert bounds["layup"].before == 10


def test_floor_wins_over_a_potential_below_it():
    player = make_player("lo", 10, potential=20)
    report = _post_game([player], StatLine("lo", "H", **BIG_GAME))
    updated = report.player("lo")
    assert {updated.rating(cat, name) for cat in ATTRIBUTE_NAMES for name in ATTRIBUTE_NAMES[cat]} == {25}
    assert all(r.after == 25 for r in report.records_for("lo"))

    poor = _post_game([updated], StatLine("lo", "H", **QUIET_GAME)).player("lo")
    assert poor.rating("offense", "three_point") == 25


def test_rest_recovers_fatigue():
    player = make_player("p", fatigue=50.0)
    assert _post_game([player]).player("p").fatigue == 25.0


def test_injury_counts_down_while_out():
    player = make_player("p", injury=InjuryState("sprained_ankle", 2))
    updated = _post_game([player]).player("p")
    assert updated.injury.games_remaining == 1


def test_healed_injury_applies_permanent_impact():
    player = make_player("p", 70, injury=InjuryState("torn_meniscus", 1, permanent_impact=2, severity="severe"))
    report = _post_game([player])
    updated = report.player("p")
    assert updated.injury is None
    assert updated.rating("physical", "speed") < 70
    assert {r.cause for r in report.records_for("p")} == {"injury"}


def test_new_injury_is_attached():
    player = make_player("p")
    rec = InjuryRecord("p", "H", "sprained_ankle", "minor", 3, 0, 2, 100.0)
    updated = _post_game([player], StatLine("p", "H", **BIG_GAME), injuries=[rec]).player("p")
    assert updated.injury.games_remaining == 3
    assert not updated.is_available


def test_weekly_growth_for_young_players():
    player = make_player("y", 60, age=20, potential=90)
    report = process_weekly([player], week_id="w1", minutes={"y": 120.0}, games={"y": 4})
    recs = report.records_for("y")
    assert recs
    assert all(r.cause == "growth" and r.delta > 0 and r.cycle == "week" for r in recs)


def test_weekly_decline_for_veterans():
    player = make_player("v", 60, age=36, potential=90)
    recs = process_weekly([player], week_id="w1").records_for("v")
    assert recs
    assert all(r.cause == "decline" and r.delta < 0 for r in recs)


def test_injured_players_do_not_grow():
    player = make_player("y", 60, age=20, injury=InjuryState("sprained_ankle", 3))
    recs = process_weekly([player], week_id="w1").records_for("y")
    assert not [r for r in recs if r.cause == "growth"]


def test_weekly_fatigue_recovery():
    player = make_player("p", fatigue=40.0)
    assert process_weekly([player], week_id="w1").player("p").fatigue == 25.0


def test_better_facilities_develop_faster():
    player = make_player("y", 60, age=20, potential=90)

    def _growth(level):
        report = process_weekly([player], week_id="w1", facility_level=level)
        return sum(r.delta for r in report.records_for("y"))

    assert _growth(5) > _growth(3) > _growth(1)


def test_weekly_is_deterministic_per_week():
    player = make_player("y", 60, age=20, potential=90)
    a = process_weekly([player], week_id="w1")
    b = process_weekly([player], week_id="w1")
    assert a == b
