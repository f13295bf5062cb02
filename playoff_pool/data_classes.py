from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple, TypedDict

# -------------------------
# Constants
# -------------------------

Conference = Literal["AFC", "NFC"]
Round = Literal["wildcard", "divisional", "conference", "superbowl"]
GameStatus = Literal["scheduled", "live", "final", "postponed"]
PickStatus = Literal["correct", "incorrect", "pending", "eliminated"]

CONFERENCES: Tuple[str, str] = ("AFC", "NFC")
ROUNDS: Tuple[str, ...] = ("wildcard", "divisional", "conference", "superbowl")

# All bracket slots in canonical order. Later slots depend on earlier ones,
# so anything that walks the bracket must walk it in this order.
ALL_GAME_SLOTS: Tuple[str, ...] = (
    "afcWc1", "afcWc2", "afcWc3",
    "nfcWc1", "nfcWc2", "nfcWc3",
    "afcDiv1", "afcDiv2", "nfcDiv1", "nfcDiv2",
    "afcConf", "nfcConf",
    "superBowl",
)

SLOT_TO_ROUND: Dict[str, str] = {
    "afcWc1": "wildcard",
    "afcWc2": "wildcard",
    "afcWc3": "wildcard",
    "nfcWc1": "wildcard",
    "nfcWc2": "wildcard",
    "nfcWc3": "wildcard",
    "afcDiv1": "divisional",
    "afcDiv2": "divisional",
    "nfcDiv1": "divisional",
    "nfcDiv2": "divisional",
    "afcConf": "conference",
    "nfcConf": "conference",
    "superBowl": "superbowl",
}

POINTS_BY_ROUND: Dict[str, int] = {
    "wildcard": 1,
    "divisional": 2,
    "conference": 3,
    "superbowl": 5,
}


def wild_card_slots(conference: str) -> Tuple[str, str, str]:
    prefix = conference.lower()
    return (f"{prefix}Wc1", f"{prefix}Wc2", f"{prefix}Wc3")


def divisional_slots(conference: str) -> Tuple[str, str]:
    prefix = conference.lower()
    return (f"{prefix}Div1", f"{prefix}Div2")


def conference_slot(conference: str) -> str:
    return f"{conference.lower()}Conf"


def slot_conference(slot: str) -> Optional[str]:
    """Conference a slot belongs to, None for the Super Bowl."""
    if slot.startswith("afc"):
        return "AFC"
    if slot.startswith("nfc"):
        return "NFC"
    return None


# -------------------------
# Data Classes
# -------------------------

# --- Data class for a playoff team (static reference data) ---
@dataclass(frozen=True)
class Team:
    id: str
    name: str
    abbreviation: str
    short_name: str
    conference: str
    seed: int
    primary_color: str = ""
    secondary_color: str = ""
    logo: str | None = None

    @classmethod
    def from_dict(cls, row: Dict[str, object]) -> "Team":
        """
        Create a Team from a season file entry.
        Requires abbreviation, name, conference and seed; everything else is optional.
        """
        missing = [k for k in ("abbreviation", "name", "conference", "seed") if not row.get(k)]
        if missing:
            raise ValueError(f"Team entry {row!r} is missing {missing}")
        abbreviation = str(row["abbreviation"]).strip().upper()
        return cls(
            id=str(row.get("id") or abbreviation.lower()),
            name=str(row["name"]).strip(),
            abbreviation=abbreviation,
            short_name=str(row.get("short_name") or row["name"]).strip(),
            conference=str(row["conference"]).strip().upper(),
            seed=int(row["seed"]),  # type: ignore[arg-type]
            primary_color=str(row.get("primary_color") or ""),
            secondary_color=str(row.get("secondary_color") or ""),
            logo=row.get("logo") or None,  # type: ignore[arg-type]
        )


# --- Data class for a real-world playoff game from the live feed ---
@dataclass(frozen=True)
class Game:
    id: str
    round: str
    conference: str | None  # None for the Super Bowl
    slot: int               # 1-based position within (round, conference)
    home_team: Team | None
    away_team: Team | None
    home_score: int | None
    away_score: int | None
    winner: str | None      # team abbreviation, only set when final
    status: str
    game_time: str | None = None
    display_clock: str | None = None
    period: int | None = None

    @property
    def is_final(self) -> bool:
        return self.status == "final"

    def team_abbreviations(self) -> List[str]:
        return [t.abbreviation for t in (self.home_team, self.away_team) if t is not None]

    @property
    def loser(self) -> str | None:
        """Abbreviation of the losing team of a decided game."""
        if not self.is_final or not self.winner:
            return None
        for abbr in self.team_abbreviations():
            if abbr != self.winner:
                return abbr
        return None


# --- Data class for a single pick ---
@dataclass(frozen=True)
class Pick:
    slot: str
    team: str  # team abbreviation


# --- Data class for a pool participant and their 13 picks ---
@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    picks: Tuple[Pick, ...]

    def __post_init__(self):
        slots = [p.slot for p in self.picks]
        unknown = sorted(set(slots) - set(ALL_GAME_SLOTS))
        missing = [s for s in ALL_GAME_SLOTS if s not in slots]
        dupes = sorted({s for s in slots if slots.count(s) > 1})
        if unknown or missing or dupes:
            raise ValueError(
                f"Participant {self.name!r} must pick every slot exactly once "
                f"(unknown={unknown}, missing={missing}, duplicated={dupes})"
            )

    @classmethod
    def from_picks(cls, name: str, picks: Dict[str, str], id: str | None = None) -> "Participant":
        """Build a Participant from a slot -> abbreviation mapping, in canonical slot order."""
        ordered = tuple(Pick(slot, picks[slot]) for slot in ALL_GAME_SLOTS if slot in picks)
        extra = tuple(Pick(slot, team) for slot, team in picks.items() if slot not in ALL_GAME_SLOTS)
        return cls(
            id=id or "-".join(name.lower().split()),
            name=name,
            picks=ordered + extra,
        )

    def picks_by_slot(self) -> Dict[str, str]:
        return {p.slot: p.team for p in self.picks}

    def pick_for(self, slot: str) -> str | None:
        for p in self.picks:
            if p.slot == slot:
                return p.team
        return None


# --- Data class for a participant's points, per round ---
@dataclass(frozen=True)
class ScoreBreakdown:
    wild_card: int = 0    # max 6 (6 games x 1 pt)
    divisional: int = 0   # max 8 (4 games x 2 pts)
    conference: int = 0   # max 6 (2 games x 3 pts)
    super_bowl: int = 0   # max 5 (1 game x 5 pts)

    @property
    def total(self) -> int:
        return self.wild_card + self.divisional + self.conference + self.super_bowl

    def as_dict(self) -> Dict[str, int]:
        return {
            "wild_card": self.wild_card,
            "divisional": self.divisional,
            "conference": self.conference,
            "super_bowl": self.super_bowl,
            "total": self.total,
        }


MAX_POINTS = ScoreBreakdown(wild_card=6, divisional=8, conference=6, super_bowl=5)


# --- Data class for a row of the leaderboard ---
@dataclass
class LeaderboardEntry:
    participant: Participant
    score: ScoreBreakdown
    rank: int
    correct_picks: int
    possible_remaining: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.participant.name,
            "rank": self.rank,
            "score": self.score.as_dict(),
            "correct_picks": self.correct_picks,
            "possible_remaining": self.possible_remaining,
        }


# --- Data class for vig-removed moneyline odds of a single matchup ---
@dataclass(frozen=True)
class GameOdds:
    home_team: str
    away_team: str
    home_win_probability: float
    away_win_probability: float


# --- Data class for reseeded Divisional matchups of one conference ---
@dataclass(frozen=True)
class DivisionalMatchups:
    div1_home: Team | None = None  # #1 seed (bye team)
    div1_away: Team | None = None  # lowest remaining seed
    div2_home: Team | None = None  # best remaining Wild Card winner
    div2_away: Team | None = None  # middle remaining Wild Card winner

    @property
    def is_complete(self) -> bool:
        return None not in (self.div1_home, self.div1_away, self.div2_home, self.div2_away)


# --- Data classes for win probability output ---
@dataclass(frozen=True)
class WinProbabilities:
    fifty_fifty: float
    vegas: float


@dataclass
class ProbabilityResult:
    probabilities: Dict[str, WinProbabilities] = field(default_factory=dict)
    is_eliminated: Dict[str, bool] = field(default_factory=dict)
    valid_scenarios: int = 0


# --- Data class for the outcome of mapping a Game onto a bracket slot ---
@dataclass(frozen=True)
class SlotResolution:
    game: Game
    slot: str | None
    reason: str | None = None

    @property
    def resolved(self) -> bool:
        return self.slot is not None


# --- Raw spreadsheet row of a participant's picks (team names as entered) ---
class RawParticipantPicks(TypedDict):
    name: str
    afcWc1: str
    afcWc2: str
    afcWc3: str
    afcDiv1: str
    afcDiv2: str
    afcConf: str
    nfcWc1: str
    nfcWc2: str
    nfcWc3: str
    nfcDiv1: str
    nfcDiv2: str
    nfcConf: str
    superBowl: str
