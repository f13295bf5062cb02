from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Tuple

from playoff_pool.data_classes import ALL_GAME_SLOTS, Participant, RawParticipantPicks

if TYPE_CHECKING:
    from playoff_pool.season_config import SeasonConfig


# -------------------------
# Constants
# -------------------------

SPACE_RE = re.compile(r"\s+")


# -------------------------
# Helpers
# -------------------------


def norm_name(s: str) -> str:
    """Lower-case, single-spaced, curly apostrophes straightened."""
    s = (s or "").strip()
    s = s.replace("’", "'")
    s = SPACE_RE.sub(" ", s).strip()
    return s.lower()


def normalize_pair(x: str, y: str) -> Tuple[str, str, int]:
    """
    Given two team abbreviations x and y, return a tuple (a, b, sign) where a <= b (lexicographically) and sign is +1 if x==a else -1.
    """
    return (x, y, +1) if x <= y else (y, x, -1)


def odds_key(x: str, y: str) -> Tuple[str, str]:
    """Orientation-free key for a matchup, used to index odds maps."""
    a, b, _ = normalize_pair(x, y)
    return (a, b)


def pct_str(x: float) -> str:
    """Format a float as a percentage string with no more than 2 significant digits."""
    val = x * 100.0
    if abs(val - round(val)) < 1e-9:
        return f"{int(round(val))}%"
    return f"{val:.0f}%".rstrip('0').rstrip('.')


# -------------------------
# Participant picks
# -------------------------


def parse_participant_picks(raw: RawParticipantPicks | Mapping[str, str], season: "SeasonConfig") -> Participant:
    """
    Convert one spreadsheet row (team names as entered) into a Participant.
    Raises ValueError when the row has no name, a blank slot, or a team that
    is not in the season's bracket.
    """
    name = (raw.get("name") or "").strip()
    if not name:
        raise ValueError(f"Picks row has no participant name: {dict(raw)!r}")

    picks: Dict[str, str] = {}
    problems: List[str] = []
    for slot in ALL_GAME_SLOTS:
        entered = (raw.get(slot) or "").strip()
        if not entered:
            problems.append(f"{slot} is blank")
            continue
        team = season.team_by_name(entered)
        if team is None:
            problems.append(f"{slot}: unknown team {entered!r}")
            continue
        picks[slot] = team.abbreviation

    if problems:
        raise ValueError(f"Invalid picks for {name}: " + "; ".join(problems))

    return Participant.from_picks(name, picks)


def load_participants(path: str | Path, season: "SeasonConfig") -> List[Participant]:
    """
    Load pool participants from a CSV with a `name` column and one column per slot.
    Raises ValueError listing every invalid row, or duplicate participant names.
    """
    participants: List[Participant] = []
    errors: List[str] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            # Skip fully blank rows
            if not any((v or "").strip() for v in row.values()):
                continue
            try:
                participants.append(parse_participant_picks(row, season))
            except ValueError as e:
                errors.append(f"line {line_no}: {e}")

    names = [p.name for p in participants]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        errors.append(f"Duplicate participant names: {dupes}")

    if errors:
        raise ValueError("Invalid picks file:\n  " + "\n  ".join(errors))
    return participants
