import random
from dataclasses import replace

import pytest

from badges import active_effects
from boxscore import SeasonLedger, StatLine, apply, empty_box, finalize, replay, roll_player_counters
from matchengine import resolve_possession, simulate_game
from matchengine.models import OnCourtTeam, PossessionModifiers, PossessionOutcome, StatDelta
from tests.util.factories import make_player, make_roster, make_team

HOME = ("h1", "h2", "h3", "h4", "h5")
AWAY = ("a1", "a2", "a3", "a4", "a5")


def _outcome(seq, *deltas, offense="H", defense="A", elapsed=20.0, on=HOME, off=AWAY):
    pts = sum(d.pts for d in deltas if d.team_id == offense)
    return PossessionOutcome(
        seq=seq,
        period=1,
        offense_team_id=offense,
        defense_team_id=defense,
        ball_handler_id=on[0],
        action="spot_up",
        result="made" if pts else "missed",
        points=pts,
        elapsed=elapsed,
        game_clock=720.0,
        offense_on_court=on,
        defense_on_court=off,
        deltas=tuple(deltas),
    )


def _log():
    return [
        _outcome(1, StatDelta("h1", "H", pts=3, fgm=1, fga=1, tpm=1, tpa=1), StatDelta("h2", "H", ast=1)),
        _outcome(2, StatDelta("a1", "A", fga=1), StatDelta("h3", "H", drb=1), offense="A", defense="H", on=AWAY, off=HOME),
        _outcome(3, StatDelta("h2", "H", pts=1, fta=2, ftm=1), StatDelta("a2", "A", pf=1)),
    ]


def _box():
    return empty_box("H", "A", HOME + ("h6",), AWAY)


def test_apply_is_pure_and_advances_the_watermark():
    box = _box()
    out = apply(_log()[0], box)
    assert box.watermark == 0
    assert box.line("h1").pts == 0
    assert out.watermark == 1
    assert out.line("h1").pts == 3
    assert out.points("H") == 3


def test_replaying_the_same_log_does_not_double_count():
    once = replay(_log(), _box())
    twice = replay(_log(), once)
    assert twice == once
    assert once.points("H") == 4
    assert once.points("A") == 0


def test_out_of_order_outcome_is_ignored():
    box = replay(_log(), _box())
    assert apply(_log()[1], box) is box


def test_seconds_and_plus_minus_follow_the_lineups():
    box = replay(_log(), _box())
    assert box.line("h1").seconds == 60.0
    assert box.line("h1").plus_minus == 4
    assert box.line("a1").plus_minus == -4
    assert box.line("h6").seconds == 0.0


def test_finalize_reports_none_for_zero_attempts():
    final = finalize(replay(_log(), _box()))
    h1 = final.player("h1")
    assert h1.fg_pct == 1.0
    assert h1.ft_pct is None
    assert final.player("h2").ft_pct == 0.5
    assert final.player("h6").fg_pct is None
    assert final.home_score == 4
    assert final.away_score == 0


def test_final_box_dict_uses_box_score_columns():
    row = finalize(replay(_log(), _box())).to_dict()["players"][0]
    for key in ("PTS", "FGM", "FGA", "FG%", "3PM", "3PA", "3P%", "FT%", "REB", "AST", "+/-", "MIN"):
        assert key in row


def test_team_totals_match_player_lines():
    final = finalize(replay(_log(), _box()))
    home = final.teams["H"].line
    assert home.pts == sum(fl.line.pts for fl in final.players if fl.line.team_id == "H")
    assert home.ast == 1
    assert home.drb == 1


def test_season_ledger_skips_duplicate_games():
    result = simulate_game(make_team("HOM"), make_team("AWY"), seed=8, game_id="g8")
    ledger = SeasonLedger("2026")
    assert ledger.accumulate("g8", result.final)
    assert not ledger.accumulate("g8", result.final)
    assert ledger.games_applied == 1

    winner, loser = (("HOM", "AWY") if result.home_score > result.away_score else ("AWY", "HOM"))
    assert ledger.team_totals(winner)["wins"] == 1
    assert ledger.team_totals(loser)["losses"] == 1
    assert ledger.team_totals("HOM")["pts"] == result.home_score


def test_season_ledger_sums_across_games():
    home, away = make_team("HOM"), make_team("AWY")
    ledger = SeasonLedger()
    total = 0
    for i in range(3):
        result = simulate_game(home, away, seed=i, game_id=f"g{i}")
        ledger.accumulate(f"g{i}", result.final)
        total += result.home_score
    assert ledger.team_totals("HOM")["pts"] == total
    assert ledger.team_totals("HOM")["games"] == 3


def test_roll_player_counters_skips_dnp():
    player = make_player("p")
    line = StatLine("p", "T", seconds=1800.0, pts=20, orb=2, drb=5, ast=4, fgm=8, fga=15)
    rolled = roll_player_counters(player, line)
    assert rolled.season.games == 1
    assert rolled.season.points == 20
    assert rolled.season.rebounds == 7
    assert rolled.career.minutes == 30.0
    assert roll_player_counters(player, StatLine("p", "T")) is player


def test_first_possession_counts_on_a_fresh_box():
    out = apply(_log()[0], _box())
    assert out.watermark == 1
    assert out.points("H") == 3


def test_seq_below_one_is_rejected():
    with pytest.raises(ValueError):
        apply(replace(_log()[0], seq=0), _box())


def test_resolved_possession_without_seq_lands_in_the_box():
    offense, defense = make_roster("o", 5), make_roster("d", 5)
    mods = PossessionModifiers(offense=active_effects(offense), defense=active_effects(defense))
    for seed in range(20):
        o = OnCourtTeam(team_id="O", players=offense)
        d = OnCourtTeam(team_id="D", players=defense)
        out = resolve_possession(o, d, 720.0, 24.0, mods, random.Random(seed))
        box = apply(out, empty_box("O", "D", [p.player_id for p in offense], [p.player_id for p in defense]))
        assert box.watermark == out.seq == 1
        assert box.points("O") == out.points
        assert box.line("o0").seconds == out.elapsed
