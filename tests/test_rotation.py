import pytest

from engine_errors import RosterError
from matchengine import DEFAULT_RULES
from matchengine.rotation import Substitution, TeamGameState
from tests.util.factories import make_player, make_roster, make_team

STARTERS = ("t0", "t1", "t2", "t3", "t4")


def _state(size=10, extra=(), **team_fields):
    team_fields.setdefault("starters", STARTERS)
    roster = make_roster("t", size) + tuple(extra)
    return TeamGameState(make_team("T", roster=roster, **team_fields), rules=DEFAULT_RULES)


def test_starters_take_the_floor():
    state = _state()
    assert state.on_court_ids == list(STARTERS)
    assert state.rotate(period=1, closing=False) == []


def test_short_roster_is_rejected():
    with pytest.raises(RosterError):
        _state(size=4, starters=())


def test_tired_player_gives_way_to_best_rested_same_position():
    ace = make_player("ace", 70, position="PG")
    spent = make_player("spent", 80, position="PG")
    state = _state(extra=(ace, spent))
    state.fatigue["spent"] = 90.0
    state.fatigue["t0"] = 85.0

    subs = state.rotate(period=1, closing=False)

    assert subs == [Substitution("T", "t0", "ace", "fatigue")]
    assert "ace" in state.on_court_ids
    assert "t0" not in state.on_court_ids


def test_fatigue_at_the_threshold_stays_on():
    state = _state()
    state.fatigue["t0"] = DEFAULT_RULES.sub_fatigue_threshold
    assert state.rotate(period=1, closing=False) == []


def test_rested_starter_returns():
    state = _state()
    state.fatigue["t0"] = 85.0
    assert state.rotate(period=1, closing=False) == [Substitution("T", "t0", "t5", "fatigue")]

    state.fatigue["t0"] = 60.0
    assert state.rotate(period=1, closing=False) == []

    state.fatigue["t0"] = 40.0
    assert state.rotate(period=1, closing=False) == [Substitution("T", "t5", "t0", "restore")]
    assert state.on_court_ids == list(STARTERS)


def test_closing_lineup_uses_the_lower_bar():
    state = _state()
    state.fatigue["t0"] = 85.0
    state.rotate(period=4, closing=False)
    state.fatigue["t0"] = 60.0

    assert state.rotate(period=4, closing=False) == []
    assert state.rotate(period=4, closing=True) == [Substitution("T", "t5", "t0", "closing")]


def test_foul_trouble_benches_for_the_rest_of_the_period():
    state = _state()
    state.add_fouls(["t1", "t1"])

    assert state.rotate(period=1, closing=False) == [Substitution("T", "t1", "t6", "foul_trouble")]
    assert "t1" in state.benched_for_period
    assert state.rotate(period=1, closing=False) == []
    assert "t1" not in state.on_court_ids

    state.start_period(2)
    assert state.rotate(period=2, closing=False) == [Substitution("T", "t6", "t1", "restore")]


def test_foul_trouble_limit_rises_by_period():
    state = _state()
    state.add_fouls(["t1", "t1"])
    assert state.rotate(period=2, closing=False) == []


def test_fouled_out_player_is_replaced():
    state = _state()
    assert state.add_fouls(["t2"] * DEFAULT_RULES.foul_out) == ["t2"]

    subs = state.rotate(period=4, closing=False)

    assert subs == [Substitution("T", "t2", "t7", "foul_out")]
    state.fatigue["t2"] = 0.0
    assert state.rotate(period=4, closing=True) == []
    assert "t2" not in state.on_court_ids


def test_fouled_out_player_stays_on_without_a_replacement():
    state = _state(size=5)
    state.add_fouls(["t0"] * DEFAULT_RULES.foul_out)

    assert state.rotate(period=4, closing=False) == []
    assert state.on_court_ids == list(STARTERS)


def test_fouled_out_player_leaves_once_the_bench_opens_up():
    state = _state(size=6)
    state.benched_for_period.add("t5")
    state.add_fouls(["t0"] * DEFAULT_RULES.foul_out)
    assert state.rotate(period=3, closing=False) == []
    assert len(state.on_court) == 5

    state.start_period(4)
    assert state.rotate(period=4, closing=False) == [Substitution("T", "t0", "t5", "foul_out")]


def test_injury_without_a_replacement_plays_short_handed():
    state = _state(size=6)
    state.add_fouls(["t0", "t0"])
    assert state.rotate(period=1, closing=False) == [Substitution("T", "t0", "t5", "foul_trouble")]

    state.mark_injured("t1")
    assert state.rotate(period=1, closing=False) == []
    assert len(state.on_court) == 4
    assert "t1" not in state.on_court_ids

    state.start_period(2)
    subs = state.rotate(period=2, closing=False)
    assert subs == [Substitution("T", "t5", "t0", "restore")]
    assert sorted(state.on_court_ids) == ["t0", "t2", "t3", "t4", "t5"]
