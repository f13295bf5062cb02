import pytest

from playoff_pool.data_classes import MAX_POINTS, Participant, Pick, ScoreBreakdown
from playoff_pool.scoring import (
    calculate_participant_score,
    calculate_possible_remaining,
    count_correct_picks,
    generate_leaderboard,
    get_eliminated_teams,
    get_elimination_round,
    is_team_eliminated,
    pick_status,
)
from playoff_pool.season_config import DEFAULT_SEASON
from playoff_pool.tests.data.test_pool_2025 import (
    completed_bracket_games,
    expected_final_ranks,
    expected_final_totals,
    final_results,
    make_game,
    participant,
    pool_participants,
    wild_card_games,
    wild_card_results,
)


# Test calculate_participant_score function
def test_score_full_bracket_david():
    score = calculate_participant_score(participant("David"), final_results)
    assert score == ScoreBreakdown(wild_card=6, divisional=8, conference=3, super_bowl=5)
    assert score.total == 22


@pytest.mark.parametrize("p", pool_participants, ids=lambda p: p.name)
def test_score_total_is_sum_of_rounds(p):
    for results in ({}, wild_card_results, final_results):
        score = calculate_participant_score(p, results)
        assert score.total == score.wild_card + score.divisional + score.conference + score.super_bowl
        assert score.as_dict()["total"] == score.total


def test_perfect_bracket_scores_max_points():
    perfect = Participant.from_picks("Perfect", final_results)
    assert calculate_participant_score(perfect, final_results) == MAX_POINTS
    assert MAX_POINTS.total == 25
    assert count_correct_picks(perfect, final_results) == 13


# PIT @ HOU, HOU wins: a PIT pick earns nothing and PIT is out
def test_pit_at_hou_scenario():
    games = [make_game("401", "wildcard", "AFC", 1, "HOU", "PIT", "HOU")]
    jen = participant("Jen")
    results = {"afcWc1": "HOU"}

    assert jen.pick_for("afcWc1") == "PIT"
    assert calculate_participant_score(jen, results).wild_card == 0
    assert calculate_participant_score(participant("David"), results).wild_card == 1
    assert "PIT" in get_eliminated_teams(games)
    assert "HOU" not in get_eliminated_teams(games)


def test_eliminated_teams_round_trip():
    games = wild_card_games(wild_card_results)
    eliminated = get_eliminated_teams(games)

    assert eliminated == {"PIT", "JAX", "LAC", "CAR", "SF", "GB"}
    for winner in wild_card_results.values():
        assert winner not in eliminated
        assert not is_team_eliminated(winner, games)


def test_eliminated_teams_ignores_unfinished_games():
    assert get_eliminated_teams(wild_card_games({})) == set()


def test_get_elimination_round():
    games = completed_bracket_games()
    assert get_elimination_round("PIT", games) == "wildcard"
    assert get_elimination_round("BUF", games) == "divisional"
    assert get_elimination_round("DEN", games) == "conference"
    assert get_elimination_round("NE", games) == "superbowl"
    assert get_elimination_round("SEA", games) is None


def test_pick_status():
    eliminated = {"PIT", "JAX"}
    results = {"afcWc1": "HOU"}

    assert pick_status(Pick("afcWc1", "HOU"), results, eliminated) == "correct"
    assert pick_status(Pick("afcWc1", "PIT"), results, eliminated) == "incorrect"
    assert pick_status(Pick("afcDiv2", "JAX"), results, eliminated) == "eliminated"
    assert pick_status(Pick("afcDiv2", "NE"), results, eliminated) == "pending"


def test_possible_remaining_before_kickoff_is_max_points():
    eliminated = set()
    for p in pool_participants:
        assert calculate_possible_remaining(p, [], eliminated, DEFAULT_SEASON) == MAX_POINTS.total


def test_possible_remaining_after_wild_card_round():
    games = wild_card_games(wild_card_results)
    eliminated = get_eliminated_teams(games)

    # Jen: DEN x2, NE and PHI alive (2 + 2 + 3 + 5 + 2 = 14); GB picks are dead
    assert calculate_possible_remaining(participant("Jen"), games, eliminated, DEFAULT_SEASON) == 14
    # David: every later pick is still alive
    assert calculate_possible_remaining(participant("David"), games, eliminated, DEFAULT_SEASON) == 19


def test_possible_remaining_is_zero_when_bracket_is_done():
    games = completed_bracket_games()
    eliminated = get_eliminated_teams(games)
    for p in pool_participants:
        assert calculate_possible_remaining(p, games, eliminated, DEFAULT_SEASON) == 0


# Test generate_leaderboard function
def test_leaderboard_full_bracket():
    leaderboard = generate_leaderboard(pool_participants, completed_bracket_games(), DEFAULT_SEASON)

    assert {e.participant.name: e.score.total for e in leaderboard} == expected_final_totals
    assert {e.participant.name: e.rank for e in leaderboard} == expected_final_ranks
    assert [e.participant.name for e in leaderboard][:2] == ["David", "Aidan"]


def test_leaderboard_ranks_monotonic_and_shared_on_ties():
    leaderboard = generate_leaderboard(pool_participants, completed_bracket_games(), DEFAULT_SEASON)

    for prev, entry in zip(leaderboard, leaderboard[1:]):
        assert entry.score.total <= prev.score.total
        assert entry.rank >= prev.rank
        if entry.score.total == prev.score.total:
            assert entry.rank == prev.rank


def test_leaderboard_breaks_order_on_possible_remaining():
    games = wild_card_games(wild_card_results)
    leaderboard = generate_leaderboard(pool_participants, games, DEFAULT_SEASON)

    # Everyone with 6 Wild Card points shares rank 1, ordered by possible remaining
    top = [e for e in leaderboard if e.score.total == 6]
    assert {e.participant.name for e in top} == {"Matt", "David", "Aidan"}
    assert all(e.rank == 1 for e in top)
    remaining = [e.possible_remaining for e in top]
    assert remaining == sorted(remaining, reverse=True)


def test_leaderboard_entry_as_dict():
    entry = generate_leaderboard([participant("David")], completed_bracket_games(), DEFAULT_SEASON)[0]
    assert entry.as_dict() == {
        "name": "David",
        "rank": 1,
        "score": {"wild_card": 6, "divisional": 8, "conference": 3, "super_bowl": 5, "total": 22},
        "correct_picks": 12,
        "possible_remaining": 0,
    }
