import random
from collections import Counter

import pytest

from engine_errors import GameUnresolvedError, ResultSealedError, RosterError
from matchengine import GameSimulator, SimRules, simulate_game
from matchengine.models import GameEvent
from ratings import InjuryState
from tests.util.factories import make_player, make_roster, make_team


def _game(seed=11, **kw):
    return simulate_game(make_team("HOM", rating=62), make_team("AWY", rating=60), seed=seed, game_id="g1", **kw)


def _overtimes(result):
    end = [e for e in result.events if e.kind == "game_end"]
    assert len(end) == 1
    return end[0].payload["overtimes"]


def test_game_completes_with_a_winner():
    result = _game()
    assert result.completed
    assert result.winner in ("HOM", "AWY")
    assert result.home_score != result.away_score
    assert result.final is not None
    assert result.final.home_score == result.home_score


def test_no_ties_across_seeds():
    for seed in range(8):
        result = _game(seed=seed)
        assert result.home_score != result.away_score


def test_box_score_totals_are_consistent():
    result = _game()
    final = result.final
    for tid, score in ((result.home_team_id, result.home_score), (result.away_team_id, result.away_score)):
        lines = [fl.line for fl in final.players if fl.line.team_id == tid]
        assert sum(ln.pts for ln in lines) == score
        assert sum(result.quarter_scores[tid]) == score
        assert final.teams[tid].line.pts == score
        for ln in lines:
            assert ln.fgm <= ln.fga
            assert ln.tpm <= ln.tpa <= ln.fga
            assert ln.ftm <= ln.fta
            assert ln.pts == 2 * (ln.fgm - ln.tpm) + 3 * ln.tpm + ln.ftm


def test_minutes_and_plus_minus_add_up():
    result = _game(seed=5)
    ot = _overtimes(result)
    game_seconds = 4 * 720.0 + ot * 300.0
    margin = result.home_score - result.away_score
    for tid, sign in ((result.home_team_id, 1), (result.away_team_id, -1)):
        lines = result.box.team_lines(tid)
        assert sum(ln.seconds for ln in lines) == pytest.approx(5 * game_seconds)
        assert sum(ln.plus_minus for ln in lines) == 5 * margin * sign


def test_same_seed_same_game():
    a = _game(seed=99).to_dict()
    b = _game(seed=99).to_dict()
    assert a == b


def test_different_seeds_diverge():
    assert _game(seed=1).to_dict()["play_by_play"] != _game(seed=2).to_dict()["play_by_play"]


def test_explicit_rng_matches_seed():
    home, away = make_team("HOM"), make_team("AWY")
    a = simulate_game(home, away, seed=7, game_id="x")
    b = GameSimulator(home, away, rng=random.Random(7), game_id="x").run()
    assert a.to_dict() == b.to_dict()


def test_events_are_structured_and_ordered():
    result = _game()
    kinds = [e.kind for e in result.events]
    assert kinds[-1] == "game_end"
    assert kinds.count("period_end") == 4 + _overtimes(result)
    scored = sum(e.payload["points"] for e in result.events if e.kind == "score")
    assert scored == result.home_score + result.away_score
    assert "substitution" in kinds
    assert all(isinstance(e.to_dict()["payload"], dict) for e in result.events)


def test_timeouts_are_limited():
    result = _game(seed=3)
    per_team = Counter(e.team_id for e in result.events if e.kind == "timeout")
    assert all(n <= 7 for n in per_team.values())


def test_nobody_exceeds_the_foul_limit():
    result = _game(seed=4)
    assert all(fl.line.pf <= 6 for fl in result.final.players)


def test_end_fatigue_is_reported_in_range():
    result = _game()
    assert set(result.end_fatigue) >= {p.player_id for p in make_team("HOM").roster}
    assert all(0.0 <= v <= 100.0 for v in result.end_fatigue.values())


def test_sealed_result_rejects_writes():
    result = _game()
    with pytest.raises(ResultSealedError):
        result.record_event(GameEvent("score", 4, 0.0))


def test_simulator_runs_once():
    sim = GameSimulator(make_team("HOM"), make_team("AWY"), seed=1)
    sim.run()
    with pytest.raises(RuntimeError):
        sim.run()


def test_roster_with_fewer_than_five_eligible_players_fails():
    roster = list(make_roster("h", 6))
    for i in range(2):
        roster[i] = make_player(roster[i].player_id, injury=InjuryState("acl_tear", 40, 3, "season_ending"))
    with pytest.raises(RosterError):
        simulate_game(make_team("HOM", roster=roster), make_team("AWY"), seed=1)


def test_same_team_on_both_sides_fails():
    team = make_team("HOM")
    with pytest.raises(RosterError):
        GameSimulator(team, team, seed=1)


def test_corrupt_player_data_becomes_noop_possessions():
    roster = list(make_roster("h", 10))
    roster[0] = make_player("h0", position="PG", overrides={"offense.ball_handling": "corrupt"})
    home = make_team("HOM", roster=roster, starters=("h0", "h1", "h2", "h3", "h4"))
    result = simulate_game(home, make_team("AWY"), seed=2, game_id="bad")
    assert result.completed
    assert result.errors
    noops = [o for o in result.outcomes if o.is_noop]
    assert noops
    assert all("h0" in o.offense_on_court or "h0" in o.defense_on_court for o in noops)
    assert all(o.points == 0 and not o.deltas for o in noops)


@pytest.mark.parametrize("attribute,value", [
    ("physical.stamina", "corrupt"),
    ("physical.stamina", 150),
    ("physical.durability", "corrupt"),
    ("physical.durability", -3),
])
def test_corrupt_fatigue_or_injury_inputs_do_not_stop_the_game(attribute, value):
    roster = list(make_roster("h", 10))
    roster[0] = make_player("h0", position="PG", overrides={attribute: value})
    home = make_team("HOM", roster=roster, starters=("h0", "h1", "h2", "h3", "h4"))
    result = simulate_game(home, make_team("AWY"), seed=3, game_id="bad-physical")
    assert result.completed
    assert result.winner in ("HOM", "AWY")
    assert result.final.player("h0").line.seconds > 0


def test_injuries_are_capped_per_team_and_game():
    rules = SimRules.from_overrides({"injury_base_per_possession": 1.0})
    result = _game(rules=rules)
    assert len(result.injuries) == 2
    assert Counter(r.team_id for r in result.injuries) == {"HOM": 1, "AWY": 1}
    for rec in result.injuries:
        assert rec.games_out >= 1
        assert rec.severity in ("minor", "moderate", "severe", "season_ending")
    assert sum(1 for e in result.events if e.kind == "injury") == 2


def test_injured_player_leaves_the_court():
    rules = SimRules.from_overrides({"injury_base_per_possession": 1.0})
    result = _game(rules=rules)
    hurt = {r.player_id: (r.period, r.clock) for r in result.injuries}
    for o in result.outcomes:
        for pid, (period, clock) in hurt.items():
            if o.period > period or (o.period == period and o.game_clock <= clock):
                assert pid not in o.offense_on_court + o.defense_on_court


def test_synergy_events_follow_the_switch():
    passer = make_player("pg", 70, position="PG", badges=[("dimer", "gold")])
    shooter = make_player("sg", 70, position="SG", badges=[("catch_and_shoot", "gold")])
    roster = [passer, shooter] + list(make_roster("h", 8))
    home = make_team("HOM", roster=roster, starters=("pg", "sg", "h2", "h3", "h4"))
    away = make_team("AWY")

    on = simulate_game(home, away, seed=21, game_id="syn")
    off = simulate_game(home, away, seed=21, game_id="syn", synergies_enabled=False)

    syn_events = [e for e in on.events if e.kind == "badge_synergy"]
    assert syn_events
    assert {e.payload["synergy_id"] for e in syn_events} == {"dimer_catch_and_shoot"}
    assert {e.player_id for e in syn_events} <= {"pg", "sg"}
    assert not [e for e in off.events if e.kind == "badge_synergy"]


def test_scoreless_tie_is_unresolved_after_max_overtimes():
    rules = SimRules.from_overrides(
        {"prob_floor": 0.0, "prob_ceil": 0.0, "max_overtimes": 1, "injuries_enabled": False}
    )
    with pytest.raises(GameUnresolvedError):
        simulate_game(make_team("HOM"), make_team("AWY"), seed=3, rules=rules)
