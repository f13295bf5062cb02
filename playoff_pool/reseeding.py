from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from playoff_pool.data_classes import (
    DivisionalMatchups,
    Game,
    Team,
    conference_slot,
    divisional_slots,
    slot_conference,
    wild_card_slots,
)
from playoff_pool.season_config import SeasonConfig


# -------------------------
# NFL reseeding
# -------------------------
#
# Four teams remain in each conference after the Wild Card round: the #1 seed
# (bye) and three Wild Card winners. The bye team hosts the worst remaining
# seed; the other two winners meet with the better seed hosting.


def reseed(bye_team: Team | None, winners: Sequence[Team]) -> DivisionalMatchups:
    """
    Apply the reseeding rule to the three Wild Card winners of a conference.
    Anything other than exactly three winners yields the bye-team-only result.
    """
    if len(winners) != 3:
        return DivisionalMatchups(div1_home=bye_team)

    best, middle, worst = sorted(winners, key=lambda t: t.seed)
    return DivisionalMatchups(
        div1_home=bye_team,
        div1_away=worst,
        div2_home=best,
        div2_away=middle,
    )


def wild_card_winners(games: Iterable[Game], conference: str, season: SeasonConfig) -> List[Team]:
    """Teams that have won a final Wild Card game in the given conference."""
    winners: List[Team] = []
    for game in games:
        if game.round == "wildcard" and game.conference == conference and game.is_final and game.winner:
            team = season.team_by_abbreviation(game.winner)
            if team is not None:
                winners.append(team)
    return winners


def are_wild_card_games_complete(games: Iterable[Game], conference: str) -> bool:
    """Exactly three Wild Card games exist for the conference and all are final."""
    wc_games = [g for g in games if g.round == "wildcard" and g.conference == conference]
    return len(wc_games) == 3 and all(g.is_final for g in wc_games)


def compute_divisional_matchups(games: Sequence[Game], conference: str, season: SeasonConfig) -> DivisionalMatchups:
    """
    Divisional matchups for a conference, derived from live Wild Card results.
    Until every Wild Card game is final only the bye team is known.
    """
    bye_team = season.bye_team(conference)
    if not are_wild_card_games_complete(games, conference):
        return DivisionalMatchups(div1_home=bye_team)
    return reseed(bye_team, wild_card_winners(games, conference, season))


def bye_team_opponent(games: Sequence[Game], conference: str, season: SeasonConfig) -> Team | None:
    return compute_divisional_matchups(games, conference, season).div1_away


def divisional_matchup_from_results(
    slot: str, results: Mapping[str, str], season: SeasonConfig
) -> Tuple[str, str] | None:
    """
    (home, away) abbreviations for a Divisional slot given a slot -> winner map,
    or None when the conference's Wild Card round is not fully decided in it.
    """
    conference = slot_conference(slot)
    if conference is None:
        return None

    winners: List[Team] = []
    for wc_slot in wild_card_slots(conference):
        team = season.team_by_abbreviation(results.get(wc_slot))
        if team is None:
            return None
        winners.append(team)

    matchups = reseed(season.bye_team(conference), winners)
    if not matchups.is_complete:
        return None

    div1, _ = divisional_slots(conference)
    if slot == div1:
        return (matchups.div1_home.abbreviation, matchups.div1_away.abbreviation)  # type: ignore[union-attr]
    return (matchups.div2_home.abbreviation, matchups.div2_away.abbreviation)  # type: ignore[union-attr]


# -------------------------
# Expected matchups from a participant's own picks
# -------------------------


def expected_opponent(picks: Mapping[str, str], slot: str, season: SeasonConfig) -> str | None:
    """
    The opponent a participant expects their pick to face in a slot, derived
    from their own earlier-round picks. Wild Card opponents come from the
    schedule, so Wild Card slots return None.
    """
    if slot == "superBowl":
        pick, afc, nfc = picks.get("superBowl"), picks.get("afcConf"), picks.get("nfcConf")
        return nfc if pick == afc else afc

    conference = slot_conference(slot)
    if conference is None:
        return None

    div1_slot, div2_slot = divisional_slots(conference)
    if slot == conference_slot(conference):
        pick, div1_pick, div2_pick = picks.get(slot), picks.get(div1_slot), picks.get(div2_slot)
        return div2_pick if pick == div1_pick else div1_pick

    if slot in (div1_slot, div2_slot):
        return _expected_divisional_opponent(picks, conference, slot == div1_slot, season)

    return None


def _expected_divisional_opponent(
    picks: Mapping[str, str], conference: str, is_div1: bool, season: SeasonConfig
) -> str | None:
    bye_team = season.bye_team(conference)
    bye_abbr = bye_team.abbreviation if bye_team else None
    div1_slot, div2_slot = divisional_slots(conference)
    div1_pick, div2_pick = picks.get(div1_slot), picks.get(div2_slot)

    # Participant's Wild Card winners, best seed first
    wc_teams = [season.team_by_abbreviation(picks.get(s)) for s in wild_card_slots(conference)]
    wc_winners: List[str] = [t.abbreviation for t in sorted((t for t in wc_teams if t), key=lambda t: t.seed)]
    worst = wc_winners[2] if len(wc_winners) > 2 else None

    if is_div1:
        if div1_pick != bye_abbr:
            return bye_abbr
        # Picked the bye team: normally the worst WC winner, but never the team they sent to Div2
        for candidate in (worst, wc_winners[1] if len(wc_winners) > 1 else None):
            if candidate and candidate != div2_pick:
                return candidate
        return wc_winners[0] if wc_winners else None

    div1_teams = {bye_abbr, div1_pick}
    if div1_pick == bye_abbr:
        div1_teams.add(worst)
    candidates = [abbr for abbr in wc_winners if abbr not in div1_teams]
    opponent = next((abbr for abbr in candidates if abbr != div2_pick), None)
    return opponent or (candidates[0] if candidates else None)


def all_divisional_matchups(games: Sequence[Game], season: SeasonConfig) -> Dict[str, DivisionalMatchups]:
    """Divisional matchups for both conferences, keyed by conference."""
    return {conf: compute_divisional_matchups(games, conf, season) for conf in ("AFC", "NFC")}
