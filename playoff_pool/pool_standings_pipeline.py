from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from prefect import flow, get_run_logger, task

from playoff_pool.data_classes import (
    DivisionalMatchups,
    Game,
    GameOdds,
    LeaderboardEntry,
    Participant,
    ProbabilityResult,
)
from playoff_pool.data_helpers import load_participants, pct_str
from playoff_pool.espn_scores_pipeline import fetch_playoff_games
from playoff_pool.odds_pipeline import fetch_odds_task
from playoff_pool.outcome_enumerator import calculate_win_probabilities, probability_tier
from playoff_pool.reseeding import all_divisional_matchups
from playoff_pool.scoring import generate_leaderboard, get_eliminated_teams, pick_status
from playoff_pool.season_config import SeasonConfig, load_season_config
from playoff_pool.slot_resolver import resolve_games


# -------------------------
# Config
# -------------------------

POOL_PICKS_FILE = os.getenv("POOL_PICKS_FILE", "picks.csv")


# -------------------------
# Helpers
# -------------------------


def _matchups_as_dict(matchups: DivisionalMatchups) -> Dict[str, str | None]:
    def abbr(team):
        return team.abbreviation if team else None
    return {
        "div1_home": abbr(matchups.div1_home),
        "div1_away": abbr(matchups.div1_away),
        "div2_home": abbr(matchups.div2_home),
        "div2_away": abbr(matchups.div2_away),
    }


def build_snapshot(
    season: SeasonConfig,
    games: Sequence[Game],
    leaderboard: Sequence[LeaderboardEntry],
    probabilities: ProbabilityResult,
    matchups: Mapping[str, DivisionalMatchups],
    results: Mapping[str, str],
    unresolved_ids: Sequence[str],
) -> Dict[str, Any]:
    """Plain-dict view of the standings for whatever renders them."""
    eliminated = get_eliminated_teams(games)
    rows = []
    for entry in leaderboard:
        name = entry.participant.name
        odds = probabilities.probabilities.get(name)
        row = entry.as_dict()
        row["win_probability"] = {
            "fifty_fifty": odds.fifty_fifty if odds else 0.0,
            "vegas": odds.vegas if odds else 0.0,
            "fifty_fifty_pct": pct_str(odds.fifty_fifty) if odds else "0%",
            "vegas_pct": pct_str(odds.vegas) if odds else "0%",
            "tier": probability_tier(odds.vegas if odds else 0.0),
        }
        row["is_eliminated"] = probabilities.is_eliminated.get(name, False)
        row["picks"] = {
            p.slot: {"team": p.team, "status": pick_status(p, results, eliminated)}
            for p in entry.participant.picks
        }
        rows.append(row)

    return {
        "season": season.season,
        "results": dict(results),
        "eliminated_teams": sorted(eliminated),
        "divisional_matchups": {conf: _matchups_as_dict(m) for conf, m in matchups.items()},
        "leaderboard": rows,
        "valid_scenarios": probabilities.valid_scenarios,
        "unresolved_games": list(unresolved_ids),
    }


# -------------------------
# Prefect tasks
# -------------------------


@task(task_run_name="Load Season Config")
def load_season_task(season_path: str | None = None) -> SeasonConfig:
    logger = get_run_logger()
    season = load_season_config(season_path)
    logger.info("Loaded %d season with %d teams", season.season, len(season.teams))
    return season


@task(task_run_name="Load Pool Participants")
def load_participants_task(picks_path: str, season: SeasonConfig) -> List[Participant]:
    logger = get_run_logger()
    participants = load_participants(Path(picks_path), season)
    logger.info("Loaded picks for %d participants from %s", len(participants), picks_path)
    return participants


@task(task_run_name="Resolve Bracket Slots")
def resolve_slots_task(games: List[Game], season: SeasonConfig) -> Tuple[Dict[str, str], List[str]]:
    logger = get_run_logger()
    results, unresolved = resolve_games(games, season)
    for r in unresolved:
        logger.warning("Could not place game %s (%s) in the bracket: %s", r.game.id, r.game.round, r.reason)
    logger.info("%d of 13 bracket slots decided", len(results))
    return results, [r.game.id for r in unresolved]


@task(task_run_name="Compute Divisional Matchups")
def divisional_matchups_task(games: List[Game], season: SeasonConfig) -> Dict[str, DivisionalMatchups]:
    logger = get_run_logger()
    matchups = all_divisional_matchups(games, season)
    for conf, m in matchups.items():
        logger.debug("%s divisional matchups: %s", conf, _matchups_as_dict(m))
    return matchups


@task(task_run_name="Generate Leaderboard")
def leaderboard_task(participants: List[Participant], games: List[Game], season: SeasonConfig) -> List[LeaderboardEntry]:
    logger = get_run_logger()
    leaderboard = generate_leaderboard(participants, games, season)
    for entry in leaderboard:
        logger.debug("#%d %s: %d pts (%d possible)", entry.rank, entry.participant.name,
                     entry.score.total, entry.possible_remaining)
    return leaderboard


@task(task_run_name="Calculate Win Probabilities")
def win_probabilities_task(
    games: List[Game],
    participants: List[Participant],
    odds_map: Dict[Tuple[str, str], GameOdds],
    season: SeasonConfig,
) -> ProbabilityResult:
    logger = get_run_logger()
    result = calculate_win_probabilities(games, participants, odds_map, season)
    if result.valid_scenarios == 0:
        logger.warning("No valid scenarios; every participant reported at 0%")
    logger.info("Evaluated %d valid scenarios", result.valid_scenarios)
    for name, p in result.probabilities.items():
        logger.debug("%s: fifty/fifty %s, vegas %s", name, pct_str(p.fifty_fifty), pct_str(p.vegas))
    return result


# -------------------------
# Prefect flow
# -------------------------


@flow(name="Pool Standings Data Flow")
def pool_standings_data_flow(picks_path: str = POOL_PICKS_FILE, season_path: str | None = None) -> Dict[str, Any]:
    """
    Pull live games and odds, score every participant, and project each
    participant's chance of winning the pool.
    """
    logger = get_run_logger()

    season = load_season_task(season_path)
    participants = load_participants_task(picks_path, season)
    games = fetch_playoff_games(season)
    odds_map = fetch_odds_task(season)

    results, unresolved_ids = resolve_slots_task(games, season)
    matchups = divisional_matchups_task(games, season)
    leaderboard = leaderboard_task(participants, games, season)
    probabilities = win_probabilities_task(games, participants, odds_map, season)

    snapshot = build_snapshot(season, games, leaderboard, probabilities, matchups, results, unresolved_ids)
    if leaderboard:
        leader = leaderboard[0]
        logger.info("Leader: %s with %d pts", leader.participant.name, leader.score.total)
    return snapshot
