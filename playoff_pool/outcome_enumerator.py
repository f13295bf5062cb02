"""
Win probabilities for every pool participant, by brute-force enumeration of
the undecided bracket.

Each undecided slot has exactly two possible winners once the slots before it
are settled, so the remaining bracket is a vector of n bits and the whole
outcome space is 2^n scenarios. The bracket never has more than 13 slots, so
the worst case (nothing decided) is 8192 scenarios of O(participants x 13)
scoring each. That bound is what keeps this exhaustive; a bracket with more
slots would need a smarter search.

Two models are reported per participant:
  fifty_fifty: every scenario counts equally.
  vegas:       every scenario is weighted by the product of its winners'
               vig-removed moneyline probabilities (0.5 where no odds exist).
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Tuple

from playoff_pool.data_classes import (
    ALL_GAME_SLOTS,
    POINTS_BY_ROUND,
    SLOT_TO_ROUND,
    Game,
    GameOdds,
    Participant,
    ProbabilityResult,
    WinProbabilities,
    divisional_slots,
    slot_conference,
    wild_card_slots,
)
from playoff_pool.odds_pipeline import get_team_win_probability
from playoff_pool.reseeding import divisional_matchup_from_results
from playoff_pool.season_config import SeasonConfig
from playoff_pool.slot_resolver import find_game_for_slot, get_game_results


# -------------------------
# Contestants per slot
# -------------------------


def get_possible_winners(
    slot: str, results: Mapping[str, str], games: Sequence[Game], season: SeasonConfig
) -> List[str]:
    """
    The two teams that can win `slot` given the winners decided so far in
    `results`. Returns fewer than two teams when an earlier slot the matchup
    depends on is still open.
    """
    rnd = SLOT_TO_ROUND.get(slot)

    if rnd == "wildcard":
        game = find_game_for_slot(games, slot, season)
        if game is not None and game.home_team and game.away_team:
            return [game.home_team.abbreviation, game.away_team.abbreviation]
        pair = season.wild_card_matchups.get(slot)
        if pair is None:
            return []
        away, home = pair
        return [home, away]

    if rnd == "divisional":
        matchup = divisional_matchup_from_results(slot, results, season)
        return list(matchup) if matchup else []

    if rnd == "conference":
        conference = slot_conference(slot)
        if conference is None:
            return []
        return [results[s] for s in divisional_slots(conference) if s in results]

    if rnd == "superbowl":
        return [results[s] for s in ("afcConf", "nfcConf") if s in results]

    return []


# -------------------------
# Helpers
# -------------------------


def _contestant_lookup(games: Sequence[Game], season: SeasonConfig):
    """
    Contestants-per-slot function for the enumeration loop. Wild Card pairs
    are read off the live games once; a Divisional pair depends only on its
    conference's three Wild Card winners, so it is worked out once per
    combination of them.
    """
    wc_idx = {
        slot: get_possible_winners(slot, {}, games, season)
        for slot in ALL_GAME_SLOTS
        if SLOT_TO_ROUND[slot] == "wildcard"
    }
    div_idx: Dict[Tuple[str | None, ...], List[str]] = {}
    wc_slots_by_conf = {conf: wild_card_slots(conf) for conf in ("AFC", "NFC")}

    def contestants(slot: str, scenario: Mapping[str, str]) -> List[str]:
        if slot in wc_idx:
            return wc_idx[slot]
        if SLOT_TO_ROUND.get(slot) == "divisional":
            key = (slot,) + tuple(scenario.get(s) for s in wc_slots_by_conf[slot_conference(slot)])
            if key not in div_idx:
                div_idx[key] = get_possible_winners(slot, scenario, games, season)
            return div_idx[key]
        return get_possible_winners(slot, scenario, games, season)

    return contestants


def _flatten_picks(
    participants: Sequence[Participant], completed: Mapping[str, str]
) -> List[Tuple[str, int, Tuple[Tuple[str, str, int], ...]]]:
    """
    (name, banked, open_picks) per participant: points already earned against
    `completed`, and (slot, team, points) for every pick still undecided.
    """
    flat = []
    for p in participants:
        banked = 0
        open_picks = []
        for pick in p.picks:
            points = POINTS_BY_ROUND[SLOT_TO_ROUND[pick.slot]]
            if pick.slot not in completed:
                open_picks.append((pick.slot, pick.team, points))
            elif completed[pick.slot] == pick.team:
                banked += points
        flat.append((p.name, banked, tuple(open_picks)))
    return flat


def _top_scorers(flat_picks, results: Mapping[str, str]) -> List[str]:
    """Names of every participant sharing the highest score."""
    scores = {
        name: banked + sum(points for slot, team, points in open_picks if results.get(slot) == team)
        for name, banked, open_picks in flat_picks
    }
    best = max(scores.values())
    return [name for name, score in scores.items() if score == best]


def _play_out_scenario(
    outcome_mask: int,
    remaining: Sequence[str],
    completed: Mapping[str, str],
    contestants,
    odds_map: Mapping[Tuple[str, str], GameOdds],
) -> Tuple[Dict[str, str], float] | None:
    """
    Fill in the remaining slots as chosen by `outcome_mask` (bit j picks the
    winner of remaining[j]). Returns the full results map and the scenario's
    odds weight, or None when a slot's contestants cannot be determined.
    """
    scenario = dict(completed)
    weight = 1.0
    for j, slot in enumerate(remaining):
        pair = contestants(slot, scenario)
        if len(pair) != 2:
            return None
        bit = (outcome_mask >> j) & 1
        winner = pair[bit]
        weight *= get_team_win_probability(odds_map, pair[0], pair[1], winner)
        scenario[slot] = winner
    return scenario, weight


# -------------------------
# Win probabilities
# -------------------------


def calculate_win_probabilities(
    games: Sequence[Game],
    participants: Sequence[Participant],
    odds_map: Mapping[Tuple[str, str], GameOdds],
    season: SeasonConfig,
) -> ProbabilityResult:
    """
    Probability that each participant finishes alone or tied at the top.
    Tied winners split a scenario's win share evenly. A participant is
    eliminated when no scenario lets them finish first.
    """
    if not participants:
        return ProbabilityResult()

    completed = get_game_results(games, season)
    remaining = [slot for slot in ALL_GAME_SLOTS if slot not in completed]
    flat_picks = _flatten_picks(participants, completed)

    # ----- Nothing left to play: the final standings decide it -----
    if not remaining:
        winners = _top_scorers(flat_picks, completed)
        share = 1.0 / len(winners)
        result = ProbabilityResult(valid_scenarios=1)
        for p in participants:
            value = share if p.name in winners else 0.0
            result.probabilities[p.name] = WinProbabilities(fifty_fifty=value, vegas=value)
            result.is_eliminated[p.name] = p.name not in winners
        return result

    # ----- Otherwise enumerate all 2^n outcome vectors -----
    contestants = _contestant_lookup(games, season)
    fifty_counts: Dict[str, float] = {p.name: 0.0 for p in participants}
    vegas_counts: Dict[str, float] = {p.name: 0.0 for p in participants}
    valid_scenarios = 0
    total_weight = 0.0

    total_masks = 1 << len(remaining)
    for outcome_mask in range(total_masks):
        played = _play_out_scenario(outcome_mask, remaining, completed, contestants, odds_map)
        if played is None:
            continue
        scenario, weight = played
        valid_scenarios += 1
        total_weight += weight

        winners = _top_scorers(flat_picks, scenario)
        share = 1.0 / len(winners)
        for name in winners:
            fifty_counts[name] += share
            vegas_counts[name] += weight * share

    result = ProbabilityResult(valid_scenarios=valid_scenarios)
    for p in participants:
        fifty = fifty_counts[p.name] / valid_scenarios if valid_scenarios > 0 else 0.0
        vegas = vegas_counts[p.name] / total_weight if total_weight > 0 else 0.0
        result.probabilities[p.name] = WinProbabilities(fifty_fifty=fifty, vegas=vegas)
        result.is_eliminated[p.name] = fifty == 0 and vegas == 0
    return result


def probability_tier(probability: float) -> str:
    """Display bucket for a win probability."""
    if probability == 0:
        return "eliminated"
    if probability > 0.4:
        return "high"
    if probability >= 0.15:
        return "medium"
    return "low"
