import time

import pytest

from playoff_pool import outcome_enumerator
from playoff_pool.data_classes import GameOdds, Participant
from playoff_pool.outcome_enumerator import calculate_win_probabilities, get_possible_winners, probability_tier
from playoff_pool.season_config import DEFAULT_SEASON
from playoff_pool.tests.data.test_pool_2025 import (
    completed_bracket_games,
    final_results,
    make_game,
    participant,
    pool_participants,
    wild_card_games,
    wild_card_results,
)


def _with_super_bowl_pick(p: Participant, name: str, team: str) -> Participant:
    picks = p.picks_by_slot()
    picks["superBowl"] = team
    return Participant.from_picks(name, picks)


# Test get_possible_winners function
def test_possible_winners_wild_card_uses_live_game():
    games = [make_game("1", "wildcard", "AFC", 1, "PIT", "HOU")]
    assert get_possible_winners("afcWc1", {}, games, DEFAULT_SEASON) == ["PIT", "HOU"]


def test_possible_winners_wild_card_falls_back_to_season_table():
    assert get_possible_winners("afcWc1", {}, [], DEFAULT_SEASON) == ["HOU", "PIT"]
    assert get_possible_winners("nfcWc3", {}, [], DEFAULT_SEASON) == ["GB", "CHI"]


def test_possible_winners_later_rounds():
    assert get_possible_winners("afcDiv1", wild_card_results, [], DEFAULT_SEASON) == ["DEN", "BUF"]
    assert get_possible_winners("afcDiv1", {}, [], DEFAULT_SEASON) == []

    results = dict(wild_card_results, nfcDiv1="SEA")
    assert get_possible_winners("nfcConf", results, [], DEFAULT_SEASON) == ["SEA"]
    results["nfcDiv2"] = "PHI"
    assert get_possible_winners("nfcConf", results, [], DEFAULT_SEASON) == ["SEA", "PHI"]

    assert get_possible_winners("superBowl", {"afcConf": "NE", "nfcConf": "SEA"}, [], DEFAULT_SEASON) == ["NE", "SEA"]
    assert get_possible_winners("proBowl", final_results, [], DEFAULT_SEASON) == []


def test_contestant_lookup_matches_possible_winners():
    games = wild_card_games({"afcWc2": "JAX"})
    contestants = outcome_enumerator._contestant_lookup(games, DEFAULT_SEASON)

    for results in ({}, wild_card_results, dict(wild_card_results, afcWc1="PIT"), dict(wild_card_results, nfcDiv1="SEA")):
        for slot in ("afcWc1", "afcWc2", "nfcWc3", "afcDiv1", "afcDiv2", "nfcDiv2", "nfcConf", "superBowl"):
            assert contestants(slot, results) == get_possible_winners(slot, results, games, DEFAULT_SEASON)


# Test calculate_win_probabilities function
def test_terminal_case_unique_winner():
    result = calculate_win_probabilities(completed_bracket_games(), pool_participants, {}, DEFAULT_SEASON)

    assert result.probabilities["David"].fifty_fifty == 1.0
    assert result.probabilities["David"].vegas == 1.0
    assert result.is_eliminated["David"] is False
    for p in pool_participants:
        if p.name != "David":
            assert result.probabilities[p.name].fifty_fifty == 0.0
            assert result.probabilities[p.name].vegas == 0.0
            assert result.is_eliminated[p.name] is True


def test_terminal_case_tied_winners_split():
    twin = Participant.from_picks("David's Twin", participant("David").picks_by_slot())
    result = calculate_win_probabilities(
        completed_bracket_games(), [participant("David"), twin, participant("Jen")], {}, DEFAULT_SEASON
    )

    assert result.probabilities["David"].fifty_fifty == 0.5
    assert result.probabilities["David's Twin"].vegas == 0.5
    assert result.is_eliminated["Jen"] is True
    assert sum(p.fifty_fifty for p in result.probabilities.values()) == pytest.approx(1.0)


def test_all_undecided_without_odds():
    result = calculate_win_probabilities([], pool_participants, {}, DEFAULT_SEASON)

    assert result.valid_scenarios == 1 << 13
    for name, probs in result.probabilities.items():
        assert probs.fifty_fifty == pytest.approx(probs.vegas)
    assert sum(p.fifty_fifty for p in result.probabilities.values()) == pytest.approx(1.0)
    assert sum(p.vegas for p in result.probabilities.values()) == pytest.approx(1.0)


def test_after_wild_card_round():
    games = wild_card_games(wild_card_results)
    result = calculate_win_probabilities(games, pool_participants, {}, DEFAULT_SEASON)

    assert result.valid_scenarios == 1 << 7
    assert sum(p.fifty_fifty for p in result.probabilities.values()) == pytest.approx(1.0)
    # David leads Jen 6-2 after the Wild Card round
    assert result.probabilities["David"].fifty_fifty > result.probabilities["Jen"].fifty_fifty


def test_super_bowl_only_left_weights_by_odds():
    games = completed_bracket_games(super_bowl_winner=None)
    sea_fan = participant("David")
    ne_fan = _with_super_bowl_pick(sea_fan, "Patriots Fan", "NE")
    odds_map = {("NE", "SEA"): GameOdds(home_team="SEA", away_team="NE", home_win_probability=0.7, away_win_probability=0.3)}

    result = calculate_win_probabilities(games, [sea_fan, ne_fan], odds_map, DEFAULT_SEASON)

    assert result.valid_scenarios == 2
    assert result.probabilities["David"].fifty_fifty == pytest.approx(0.5)
    assert result.probabilities["David"].vegas == pytest.approx(0.7)
    assert result.probabilities["Patriots Fan"].vegas == pytest.approx(0.3)
    assert not any(result.is_eliminated.values())


def test_leader_clinched_before_super_bowl():
    games = completed_bracket_games(super_bowl_winner=None)
    result = calculate_win_probabilities(games, pool_participants, {}, DEFAULT_SEASON)

    assert result.probabilities["David"].fifty_fifty == pytest.approx(1.0)
    assert [name for name, out in result.is_eliminated.items() if not out] == ["David"]


def test_is_idempotent():
    games = wild_card_games({"afcWc1": "HOU", "nfcWc1": "CAR", "nfcWc3": "GB"})
    odds_map = {("BUF", "JAX"): GameOdds("JAX", "BUF", 0.45, 0.55)}

    first = calculate_win_probabilities(games, pool_participants, odds_map, DEFAULT_SEASON)
    second = calculate_win_probabilities(games, pool_participants, odds_map, DEFAULT_SEASON)
    assert first == second


def test_no_valid_scenarios_reports_zero(monkeypatch):
    monkeypatch.setattr(outcome_enumerator, "get_possible_winners", lambda *args: [])
    games = wild_card_games(wild_card_results)

    result = calculate_win_probabilities(games, pool_participants[:3], {}, DEFAULT_SEASON)

    assert result.valid_scenarios == 0
    for name in ("Jen", "Matt", "Rita"):
        assert result.probabilities[name].fifty_fifty == 0.0
        assert result.probabilities[name].vegas == 0.0
        assert result.is_eliminated[name] is True


def test_worst_case_finishes_quickly():
    games = wild_card_games({})

    start = time.perf_counter()
    result = calculate_win_probabilities(games, pool_participants, {}, DEFAULT_SEASON)
    elapsed = time.perf_counter() - start

    assert result.valid_scenarios == 1 << 13
    assert sum(p.fifty_fifty for p in result.probabilities.values()) == pytest.approx(1.0)
    assert elapsed < 1.0


def test_no_participants():
    result = calculate_win_probabilities([], [], {}, DEFAULT_SEASON)
    assert result.probabilities == {}
    assert result.is_eliminated == {}


@pytest.mark.parametrize(
    "probability, tier",
    [(0.0, "eliminated"), (0.05, "low"), (0.15, "medium"), (0.4, "medium"), (0.41, "high"), (1.0, "high")],
)
def test_probability_tier(probability, tier):
    assert probability_tier(probability) == tier
