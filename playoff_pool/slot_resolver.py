from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from playoff_pool.data_classes import Game, SlotResolution, conference_slot, divisional_slots
from playoff_pool.season_config import SeasonConfig


# -------------------------
# Slot resolution
# -------------------------


def resolve_slot(game: Game, season: SeasonConfig) -> SlotResolution:
    """
    Map a live-feed Game onto one of the 13 fixed bracket slots.

    Wild Card games are matched by team membership against the season's fixed
    pairings, since the feed's game ordering is arbitrary. Later rounds are
    positional: the first Divisional game of a conference is Div1, any other
    is Div2; each conference has one Conference game and there is one Super Bowl.
    """
    if game.round == "wildcard":
        slot = season.wild_card_slot_for(game.team_abbreviations())
        if slot is None:
            return SlotResolution(game, None, f"no Wild Card pairing contains {game.team_abbreviations()}")
        if game.conference and not slot.startswith(game.conference.lower()):
            return SlotResolution(game, None, f"{slot} does not belong to {game.conference}")
        return SlotResolution(game, slot)

    if game.round == "divisional":
        if game.conference not in ("AFC", "NFC"):
            return SlotResolution(game, None, f"divisional game with conference {game.conference!r}")
        div1, div2 = divisional_slots(game.conference)
        return SlotResolution(game, div1 if game.slot == 1 else div2)

    if game.round == "conference":
        if game.conference not in ("AFC", "NFC"):
            return SlotResolution(game, None, f"conference game with conference {game.conference!r}")
        return SlotResolution(game, conference_slot(game.conference))

    if game.round == "superbowl":
        return SlotResolution(game, "superBowl")

    return SlotResolution(game, None, f"unknown round {game.round!r}")


def resolve_games(games: Iterable[Game], season: SeasonConfig) -> Tuple[Dict[str, str], List[SlotResolution]]:
    """
    Build the slot -> winner map of decided games.
    Returns (results, unresolved) where unresolved lists every game that could
    not be placed in the bracket, decided or not.
    """
    results: Dict[str, str] = {}
    unresolved: List[SlotResolution] = []
    for game in games:
        resolution = resolve_slot(game, season)
        if not resolution.resolved:
            unresolved.append(resolution)
            continue
        if game.is_final and game.winner:
            results[resolution.slot] = game.winner  # type: ignore[index]
    return results, unresolved


def get_game_results(games: Iterable[Game], season: SeasonConfig) -> Dict[str, str]:
    """Map of slot -> winning team abbreviation for every final game."""
    results, _ = resolve_games(games, season)
    return results


def find_game_for_slot(games: Iterable[Game], slot: str, season: SeasonConfig) -> Game | None:
    for game in games:
        if resolve_slot(game, season).slot == slot:
            return game
    return None
