from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Set

from playoff_pool.data_classes import (
    POINTS_BY_ROUND,
    SLOT_TO_ROUND,
    Game,
    LeaderboardEntry,
    Participant,
    Pick,
    ScoreBreakdown,
)
from playoff_pool.season_config import SeasonConfig
from playoff_pool.slot_resolver import get_game_results, resolve_slot


# -------------------------
# Participant scoring
# -------------------------


def calculate_participant_score(participant: Participant, results: Mapping[str, str]) -> ScoreBreakdown:
    """
    Points earned by a participant against a slot -> winner map.
    Correct picks earn their round's value; wrong or undecided picks earn nothing.
    """
    by_round = {r: 0 for r in POINTS_BY_ROUND}
    for pick in participant.picks:
        winner = results.get(pick.slot)
        if winner and winner == pick.team:
            rnd = SLOT_TO_ROUND[pick.slot]
            by_round[rnd] += POINTS_BY_ROUND[rnd]
    return ScoreBreakdown(
        wild_card=by_round["wildcard"],
        divisional=by_round["divisional"],
        conference=by_round["conference"],
        super_bowl=by_round["superbowl"],
    )


def count_correct_picks(participant: Participant, results: Mapping[str, str]) -> int:
    return sum(1 for pick in participant.picks if results.get(pick.slot) == pick.team)


# -------------------------
# Eliminations
# -------------------------


def get_eliminated_teams(games: Iterable[Game]) -> Set[str]:
    """Every team that has lost a final game, whatever the round."""
    eliminated: Set[str] = set()
    for game in games:
        if game.is_final and game.winner:
            for abbr in game.team_abbreviations():
                if abbr != game.winner:
                    eliminated.add(abbr)
    return eliminated


def is_team_eliminated(team: str, games: Iterable[Game]) -> bool:
    return team in get_eliminated_teams(games)


def get_elimination_round(team: str, games: Iterable[Game]) -> str | None:
    """Round in which a team lost, or None if it is still alive."""
    for game in games:
        if game.is_final and game.winner and game.winner != team and team in game.team_abbreviations():
            return game.round
    return None


def pick_status(pick: Pick, results: Mapping[str, str], eliminated: Set[str]) -> str:
    """correct / incorrect once the slot is decided; eliminated / pending before that."""
    winner = results.get(pick.slot)
    if winner:
        return "correct" if winner == pick.team else "incorrect"
    return "eliminated" if pick.team in eliminated else "pending"


# -------------------------
# Possible remaining points
# -------------------------


def calculate_possible_remaining(
    participant: Participant,
    games: Sequence[Game],
    eliminated: Set[str],
    season: SeasonConfig,
) -> int:
    """
    Ceiling on the points a participant can still add: every pick whose slot
    has no final game yet and whose team has not been knocked out.

    This does not check that the picked team can still structurally reach
    the slot (e.g. a Divisional pick reseeded into the other game).
    """
    slot_games: Dict[str, Game] = {}
    for game in games:
        slot = resolve_slot(game, season).slot
        if slot and slot not in slot_games:
            slot_games[slot] = game

    possible = 0
    for pick in participant.picks:
        game = slot_games.get(pick.slot)
        if game is not None and game.is_final:
            continue
        if pick.team in eliminated:
            continue
        possible += POINTS_BY_ROUND[SLOT_TO_ROUND[pick.slot]]
    return possible


# -------------------------
# Leaderboard
# -------------------------


def generate_leaderboard(
    participants: Sequence[Participant], games: Sequence[Game], season: SeasonConfig
) -> List[LeaderboardEntry]:
    """
    Score every participant, order by total then possible remaining points,
    and assign competition ranks: equal totals share a rank and the next
    distinct total ranks at its 1-based position.
    """
    results = get_game_results(games, season)
    eliminated = get_eliminated_teams(games)

    entries = [
        LeaderboardEntry(
            participant=p,
            score=calculate_participant_score(p, results),
            rank=0,
            correct_picks=count_correct_picks(p, results),
            possible_remaining=calculate_possible_remaining(p, games, eliminated, season),
        )
        for p in participants
    ]
    entries.sort(key=lambda e: (-e.score.total, -e.possible_remaining))

    current_rank = 1
    for index, entry in enumerate(entries):
        if index > 0 and entry.score.total < entries[index - 1].score.total:
            current_rank = index + 1
        entry.rank = current_rank

    return entries
