from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from prefect import get_run_logger, task

from playoff_pool.data_classes import Game
from playoff_pool.season_config import SeasonConfig
from playoff_pool.web_helpers import get_json


# -------------------------
# Config
# -------------------------

ESPN_BASE_URL = os.getenv("ESPN_BASE_URL", "https://site.api.espn.com/apis/site/v2/sports/football/nfl")

# seasontype=3 is the postseason; its weeks are WC, Div, Conf, Pro Bowl/SB, SB
POSTSEASON = 3
PLAYOFF_WEEKS = (1, 2, 3, 4, 5)

WEEK_TO_ROUND = {
    1: "wildcard",
    2: "divisional",
    3: "conference",
    4: "superbowl",
    5: "superbowl",
}


# -------------------------
# Helpers
# -------------------------


def parse_status(status_name: str | None) -> str:
    """ESPN status type name (e.g. STATUS_FINAL, STATUS_IN_PROGRESS) -> game status."""
    name = (status_name or "").lower()
    if "final" in name:
        return "final"
    if "progress" in name or "live" in name:
        return "live"
    if "postponed" in name:
        return "postponed"
    return "scheduled"


def week_to_round(week: int | None) -> str | None:
    return WEEK_TO_ROUND.get(week) if week is not None else None


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _is_pro_bowl(event: Mapping[str, Any]) -> bool:
    name = f"{event.get('name') or ''} {event.get('shortName') or ''}".lower()
    return "pro bowl" in name


def parse_espn_event(event: Mapping[str, Any], season: SeasonConfig, week: int | None = None) -> Game | None:
    """
    Convert one scoreboard event into a Game. Position within the round is
    left at 0 and filled in by assign_positions once every week is loaded.
    Returns None for events that are not part of the bracket (Pro Bowl,
    unknown weeks, events without a competition).
    """
    if _is_pro_bowl(event):
        return None

    if week is None:
        week = _to_int((event.get("week") or {}).get("number"))
    rnd = week_to_round(week)
    if rnd is None:
        return None

    competitions = event.get("competitions") or []
    if not competitions:
        return None
    competition = competitions[0]
    competitors = competition.get("competitors") or []
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    if home is None or away is None:
        return None

    home_abbr = ((home.get("team") or {}).get("abbreviation") or "").upper()
    away_abbr = ((away.get("team") or {}).get("abbreviation") or "").upper()
    home_team = season.team_by_abbreviation(home_abbr)
    away_team = season.team_by_abbreviation(away_abbr)
    home_score = _to_int(home.get("score"))
    away_score = _to_int(away.get("score"))

    status_block = competition.get("status") or event.get("status") or {}
    status = parse_status((status_block.get("type") or {}).get("name"))

    winner = None
    if status == "final":
        if home.get("winner") is True:
            winner = home_abbr
        elif away.get("winner") is True:
            winner = away_abbr
        elif home_score is not None and away_score is not None and home_score != away_score:
            winner = home_abbr if home_score > away_score else away_abbr

    conference = None
    if rnd != "superbowl":
        conference = season.conference_of(home_abbr) or season.conference_of(away_abbr)

    return Game(
        id=str(event.get("id") or ""),
        round=rnd,
        conference=conference,
        slot=0,
        home_team=home_team,
        away_team=away_team,
        home_score=home_score,
        away_score=away_score,
        winner=winner,
        status=status,
        game_time=event.get("date"),
        display_clock=status_block.get("displayClock"),
        period=_to_int(status_block.get("period")),
    )


def assign_positions(games: Iterable[Game], season: SeasonConfig) -> List[Game]:
    """
    Number games 1..n within each (round, conference), ordered by kickoff
    then id. A conference's Divisional game hosted by its bye team always
    comes first so it maps to Div1.
    """
    grouped: Dict[Tuple[str, str | None], List[Game]] = defaultdict(list)
    for game in games:
        grouped[(game.round, game.conference)].append(game)

    positioned: List[Game] = []
    for (rnd, conference), group in grouped.items():
        bye = season.bye_team(conference) if rnd == "divisional" and conference else None
        bye_abbr = bye.abbreviation if bye else None

        def sort_key(g: Game):
            hosts_bye = bye_abbr is not None and bye_abbr in g.team_abbreviations()
            return (0 if hosts_bye else 1, g.game_time or "", g.id)

        for idx, game in enumerate(sorted(group, key=sort_key), start=1):
            positioned.append(replace(game, slot=idx))
    return positioned


def fetch_playoff_week(week: int) -> Dict[str, Any]:
    """Raw ESPN scoreboard for one postseason week."""
    url = f"{ESPN_BASE_URL}/scoreboard"
    return get_json(url, params={"seasontype": POSTSEASON, "week": week})


def parse_scoreboards(scoreboards: Mapping[int, Mapping[str, Any]], season: SeasonConfig) -> List[Game]:
    """Parse every week's scoreboard and number the games within their rounds."""
    games: List[Game] = []
    seen: set = set()
    for week, board in sorted(scoreboards.items()):
        for event in board.get("events") or []:
            game = parse_espn_event(event, season, week)
            if game is None or game.id in seen:
                continue
            seen.add(game.id)
            games.append(game)
    return assign_positions(games, season)


# -------------------------
# Prefect tasks
# -------------------------


@task(retries=2, retry_delay_seconds=10, task_run_name="Fetch ESPN Playoff Games")
def fetch_playoff_games(season: SeasonConfig) -> List[Game]:
    logger = get_run_logger()
    scoreboards: Dict[int, Dict[str, Any]] = {}
    for week in PLAYOFF_WEEKS:
        scoreboards[week] = fetch_playoff_week(week)
        logger.debug("Week %d: %d events", week, len(scoreboards[week].get("events") or []))

    games = parse_scoreboards(scoreboards, season)
    final_count = sum(1 for g in games if g.is_final)
    logger.info("Parsed %d playoff games (%d final)", len(games), final_count)
    return games
