from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from playoff_pool.data_classes import CONFERENCES, Team, wild_card_slots
from playoff_pool.data_helpers import norm_name


# -------------------------
# Config
# -------------------------

PLAYOFF_SEASON_FILE = os.getenv("PLAYOFF_SEASON_FILE")

# Seeds paired in the Wild Card round; the #1 seed has a bye.
WILD_CARD_SEED_PAIRS: Tuple[Tuple[int, int], ...] = ((2, 7), (3, 6), (4, 5))


# --- Per-season bracket reference data ---
@dataclass
class SeasonConfig:
    """
    Everything about the bracket that changes from one season to the next:
    the 14 playoff teams with their seeds, which teams meet in each Wild Card
    slot, and the free-form names participants used when filling out picks.
    """
    season: int
    teams: Tuple[Team, ...]
    wild_card_matchups: Dict[str, Tuple[str, str]]
    team_aliases: Dict[str, str] = field(default_factory=dict)
    _by_abbreviation: Dict[str, Team] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._by_abbreviation = {t.abbreviation: t for t in self.teams}

    # ----- Lookups -----

    def team_by_abbreviation(self, abbreviation: str | None) -> Team | None:
        if not abbreviation:
            return None
        return self._by_abbreviation.get(abbreviation.strip().upper())

    def team_by_name(self, name: str) -> Team | None:
        """Match on full name, short name, abbreviation or a known alias."""
        wanted = norm_name(name)
        for t in self.teams:
            if wanted in (norm_name(t.name), norm_name(t.short_name), norm_name(t.abbreviation)):
                return t
        alias = self.team_aliases.get(wanted)
        return self.team_by_abbreviation(alias) if alias else None

    def normalize_team_name(self, name: str) -> str:
        """Free-form team name -> abbreviation; unknown names come back upper-cased."""
        team = self.team_by_name(name)
        return team.abbreviation if team else name.strip().upper()

    def teams_by_conference(self, conference: str) -> List[Team]:
        return [t for t in self.teams if t.conference == conference]

    def bye_team(self, conference: str) -> Team | None:
        return next((t for t in self.teams if t.conference == conference and t.seed == 1), None)

    def conference_of(self, abbreviation: str | None) -> str | None:
        team = self.team_by_abbreviation(abbreviation)
        return team.conference if team else None

    def wild_card_slot_for(self, abbreviations: Iterable[str | None]) -> str | None:
        """Wild Card slot whose fixed pairing contains any of the given teams."""
        present = {a for a in abbreviations if a}
        for slot, pair in self.wild_card_matchups.items():
            if present & set(pair):
                return slot
        return None

    # ----- Construction -----

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SeasonConfig":
        """
        Build and validate a SeasonConfig from a season file's contents.
        Raises ValueError listing every structural problem found.
        """
        errors: List[str] = []

        try:
            teams = tuple(Team.from_dict(row) for row in data.get("teams") or [])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid season file: {e}") from e

        matchups = {
            str(slot): (str(pair[0]).upper(), str(pair[1]).upper())
            for slot, pair in (data.get("wild_card_matchups") or {}).items()
        }
        aliases = {norm_name(k): str(v).upper() for k, v in (data.get("team_aliases") or {}).items()}

        abbrs = [t.abbreviation for t in teams]
        dupes = sorted({a for a in abbrs if abbrs.count(a) > 1})
        if dupes:
            errors.append(f"Duplicate team abbreviations: {dupes}")

        by_abbr = {t.abbreviation: t for t in teams}
        for conf in CONFERENCES:
            seeds = sorted(t.seed for t in teams if t.conference == conf)
            if seeds != list(range(1, 8)):
                errors.append(f"{conf}: seeds must be 1-7 exactly once, got {seeds}")
            for slot in wild_card_slots(conf):
                pair = matchups.get(slot)
                if pair is None:
                    errors.append(f"{conf}: missing Wild Card matchup for {slot}")
                    continue
                pair_teams = [by_abbr.get(abbr) for abbr in pair]
                for abbr, team in zip(pair, pair_teams):
                    if team is None:
                        errors.append(f"{slot}: unknown team {abbr}")
                    elif team.conference != conf:
                        errors.append(f"{slot}: {abbr} is not an {conf} team")
                if all(pair_teams):
                    seed_pair = tuple(sorted(t.seed for t in pair_teams))  # type: ignore[union-attr]
                    if seed_pair not in WILD_CARD_SEED_PAIRS:
                        errors.append(f"{slot}: seeds {seed_pair} do not meet in the Wild Card round")

        valid_slots = set(wild_card_slots("AFC")) | set(wild_card_slots("NFC"))
        unknown_slots = sorted(s for s in matchups if s not in valid_slots)
        if unknown_slots:
            errors.append(f"Unknown Wild Card slots: {unknown_slots}")

        bad_aliases = sorted(k for k, v in aliases.items() if v not in by_abbr)
        if bad_aliases:
            errors.append(f"Aliases point at unknown teams: {bad_aliases}")

        if errors:
            raise ValueError("Invalid season file:\n  " + "\n  ".join(errors))

        return cls(
            season=int(data.get("season") or 0),
            teams=teams,
            wild_card_matchups=matchups,
            team_aliases=aliases,
        )


# -------------------------
# 2025-26 bracket
# -------------------------

DEFAULT_SEASON_DATA: Dict[str, Any] = {
    "season": 2025,
    "teams": [
        # AFC
        {"abbreviation": "DEN", "name": "Denver Broncos", "short_name": "Denver", "conference": "AFC", "seed": 1,
         "primary_color": "#FB4F14", "secondary_color": "#002244"},
        {"abbreviation": "NE", "name": "New England Patriots", "short_name": "New England", "conference": "AFC", "seed": 2,
         "primary_color": "#002244", "secondary_color": "#C60C30"},
        {"abbreviation": "JAX", "name": "Jacksonville Jaguars", "short_name": "Jacksonville", "conference": "AFC", "seed": 3,
         "primary_color": "#006778", "secondary_color": "#D7A22A"},
        {"abbreviation": "PIT", "name": "Pittsburgh Steelers", "short_name": "Pittsburgh", "conference": "AFC", "seed": 4,
         "primary_color": "#FFB612", "secondary_color": "#101820"},
        {"abbreviation": "HOU", "name": "Houston Texans", "short_name": "Houston", "conference": "AFC", "seed": 5,
         "primary_color": "#03202F", "secondary_color": "#A71930"},
        {"abbreviation": "BUF", "name": "Buffalo Bills", "short_name": "Buffalo", "conference": "AFC", "seed": 6,
         "primary_color": "#00338D", "secondary_color": "#C60C30"},
        {"abbreviation": "LAC", "name": "Los Angeles Chargers", "short_name": "LA Chargers", "conference": "AFC", "seed": 7,
         "primary_color": "#0080C6", "secondary_color": "#FFC20E"},
        # NFC
        {"abbreviation": "SEA", "name": "Seattle Seahawks", "short_name": "Seattle", "conference": "NFC", "seed": 1,
         "primary_color": "#002244", "secondary_color": "#69BE28"},
        {"abbreviation": "CHI", "name": "Chicago Bears", "short_name": "Chicago", "conference": "NFC", "seed": 2,
         "primary_color": "#0B162A", "secondary_color": "#C83803"},
        {"abbreviation": "PHI", "name": "Philadelphia Eagles", "short_name": "Philadelphia", "conference": "NFC", "seed": 3,
         "primary_color": "#004C54", "secondary_color": "#A5ACAF"},
        {"abbreviation": "CAR", "name": "Carolina Panthers", "short_name": "Carolina", "conference": "NFC", "seed": 4,
         "primary_color": "#0085CA", "secondary_color": "#101820"},
        {"abbreviation": "LAR", "name": "Los Angeles Rams", "short_name": "LA Rams", "conference": "NFC", "seed": 5,
         "primary_color": "#003594", "secondary_color": "#FFA300"},
        {"abbreviation": "SF", "name": "San Francisco 49ers", "short_name": "San Francisco", "conference": "NFC", "seed": 6,
         "primary_color": "#AA0000", "secondary_color": "#B3995D"},
        {"abbreviation": "GB", "name": "Green Bay Packers", "short_name": "Green Bay", "conference": "NFC", "seed": 7,
         "primary_color": "#203731", "secondary_color": "#FFB612"},
    ],
    # Listed as (away, home) from the ESPN schedule
    "wild_card_matchups": {
        "afcWc1": ["PIT", "HOU"],
        "afcWc2": ["JAX", "BUF"],
        "afcWc3": ["NE", "LAC"],
        "nfcWc1": ["CAR", "LAR"],
        "nfcWc2": ["PHI", "SF"],
        "nfcWc3": ["CHI", "GB"],
    },
    "team_aliases": {
        "broncos": "DEN",
        "patriots": "NE",
        "jaguars": "JAX",
        "steelers": "PIT",
        "texans": "HOU",
        "bills": "BUF",
        "chargers": "LAC",
        "seahawks": "SEA",
        "bears": "CHI",
        "eagles": "PHI",
        "panthers": "CAR",
        "rams": "LAR",
        "49ers": "SF",
        "niners": "SF",
        "packers": "GB",
    },
}

DEFAULT_SEASON = SeasonConfig.from_dict(DEFAULT_SEASON_DATA)


def load_season_config(path: str | Path | None = None) -> SeasonConfig:
    """
    Load a season file (JSON with the same shape as DEFAULT_SEASON_DATA).
    Falls back to PLAYOFF_SEASON_FILE, then to the built-in 2025-26 bracket.
    """
    path = path or PLAYOFF_SEASON_FILE
    if not path:
        return DEFAULT_SEASON
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return SeasonConfig.from_dict(data)
