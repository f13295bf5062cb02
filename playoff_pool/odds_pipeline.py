from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import requests
from prefect import get_run_logger, task

from playoff_pool.data_classes import GameOdds
from playoff_pool.data_helpers import odds_key
from playoff_pool.season_config import SeasonConfig
from playoff_pool.web_helpers import get_json


# -------------------------
# Config
# -------------------------

ODDS_API_BASE_URL = os.getenv("ODDS_API_BASE_URL", "https://api.the-odds-api.com/v4")
ODDS_API_KEY = os.getenv("ODDS_API_KEY")
ODDS_REGIONS = os.getenv("ODDS_REGIONS", "us")
ODDS_BOOKMAKER = os.getenv("ODDS_BOOKMAKER", "draftkings")
SPORT = "americanfootball_nfl"

NEUTRAL_PROBABILITY = 0.5

OddsMap = Dict[Tuple[str, str], GameOdds]


# -------------------------
# Helpers
# -------------------------


def decimal_odds_to_probability(odds: float) -> float:
    """Implied probability of a decimal price (vig still included)."""
    return 1.0 / odds


def remove_vig(home_probability: float, away_probability: float) -> Tuple[float, float]:
    """Normalize a pair of implied probabilities so they sum to 1."""
    total = home_probability + away_probability
    return home_probability / total, away_probability / total


def parse_odds_events(events: Iterable[Mapping[str, Any]], season: SeasonConfig, bookmaker: str = ODDS_BOOKMAKER) -> OddsMap:
    """
    Turn The Odds API `/odds` payload into vig-removed win probabilities keyed
    by the sorted abbreviation pair. Uses the preferred bookmaker when it
    quotes the game, otherwise the first one; games without a usable
    moneyline are skipped.
    """
    odds_map: OddsMap = {}
    for event in events:
        books = event.get("bookmakers") or []
        book = next((b for b in books if b.get("key") == bookmaker), books[0] if books else None)
        if not book:
            continue

        market = next((m for m in book.get("markets") or [] if m.get("key") == "h2h"), None)
        outcomes = (market or {}).get("outcomes") or []
        if len(outcomes) < 2:
            continue

        home_name, away_name = event.get("home_team") or "", event.get("away_team") or ""
        home = next((o for o in outcomes if o.get("name") == home_name), None)
        away = next((o for o in outcomes if o.get("name") == away_name), None)
        if not home or not away:
            continue
        try:
            raw_home = decimal_odds_to_probability(float(home["price"]))
            raw_away = decimal_odds_to_probability(float(away["price"]))
        except (KeyError, TypeError, ValueError, ZeroDivisionError):
            continue

        home_p, away_p = remove_vig(raw_home, raw_away)
        home_abbr = season.normalize_team_name(home_name)
        away_abbr = season.normalize_team_name(away_name)
        odds_map[odds_key(home_abbr, away_abbr)] = GameOdds(
            home_team=home_abbr,
            away_team=away_abbr,
            home_win_probability=home_p,
            away_win_probability=away_p,
        )
    return odds_map


def get_team_win_probability(odds_map: Mapping[Tuple[str, str], GameOdds], team1: str, team2: str, target: str) -> float:
    """
    Probability that `target` wins the team1/team2 matchup. Orientation-free;
    matchups without odds, or targets not in the quoted game, are a coin flip.
    """
    odds = odds_map.get(odds_key(team1, team2))
    if odds is None:
        return NEUTRAL_PROBABILITY
    if target == odds.home_team:
        return odds.home_win_probability
    if target == odds.away_team:
        return odds.away_win_probability
    return NEUTRAL_PROBABILITY


def fetch_nfl_odds(api_key: str, regions: str = ODDS_REGIONS, bookmaker: str = ODDS_BOOKMAKER) -> List[Dict[str, Any]]:
    """Raw moneyline odds for upcoming NFL games."""
    url = f"{ODDS_API_BASE_URL}/sports/{SPORT}/odds"
    params = {
        "apiKey": api_key,
        "regions": regions,
        "markets": "h2h",
        "oddsFormat": "decimal",
        "bookmakers": bookmaker,
    }
    data = get_json(url, params=params)
    return data if isinstance(data, list) else []


# -------------------------
# Prefect tasks
# -------------------------


@task(task_run_name="Fetch NFL Moneyline Odds")
def fetch_odds_task(season: SeasonConfig, api_key: str | None = ODDS_API_KEY) -> OddsMap:
    """
    Odds are optional: without an API key, or when the request fails, every
    matchup falls back to 50/50.
    """
    logger = get_run_logger()
    if not api_key:
        logger.warning("ODDS_API_KEY not set, using 50/50 odds")
        return {}
    try:
        events = fetch_nfl_odds(api_key)
    except requests.RequestException as e:
        logger.warning("Failed to fetch odds, using 50/50 odds: %s", e)
        return {}
    odds_map = parse_odds_events(events, season)
    logger.info("Parsed odds for %d matchups", len(odds_map))
    return odds_map
