"""Validation functions for rosters and live scores."""

from collections import Counter
from typing import Mapping

from .constants import (
    BENCH_GK_SLOT,
    FORMATION_MAXIMUM,
    FORMATION_MINIMUM,
    MULTIPLIER_CAPTAIN,
    MULTIPLIER_TRIPLE_CAPTAIN,
    SQUAD_COMPOSITION,
    SQUAD_SIZE,
    Chip,
    Position,
)
from .models import Player, RosterSnapshot, ScoredRoster


def validate_roster(roster: RosterSnapshot, players: Mapping[int, Player]) -> list[str]:
    """
    Validate that a manager's picks follow squad rules.

    Checks:
    - 15 picks in slots 1-15, no duplicate players
    - Squad composition (2 GK, 5 DEF, 5 MID, 3 FWD)
    - Starting formation (1 GK, DEF/MID/FWD within limits)
    - Slot 12 holds a goalkeeper
    - Exactly one captain with a captain multiplier, at most one vice-captain
    - Triple multiplier only with the triple captain chip

    Args:
        roster: Picks to validate
        players: Player reference data by id

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    tag = f'Manager {roster.manager_id}'

    if len(roster.slots) != SQUAD_SIZE:
        errors.append(f'{tag} has {len(roster.slots)} picks (expected {SQUAD_SIZE})')

    slot_numbers = sorted(s.slot for s in roster.slots)
    if slot_numbers != list(range(1, len(roster.slots) + 1)):
        errors.append(f'{tag} has invalid slot numbers: {slot_numbers}')

    duplicates = sorted(pid for pid, n in Counter(s.player_id for s in roster.slots).items() if n > 1)
    if duplicates:
        errors.append(f'{tag} has duplicate players: {", ".join(str(d) for d in duplicates)}')

    unknown = [s.player_id for s in roster.slots if s.player_id not in players]
    if unknown:
        errors.append(f'{tag} has unknown players: {", ".join(str(u) for u in unknown)}')
        return errors

    squad = Counter(players[s.player_id].position for s in roster.slots)
    if len(roster.slots) == SQUAD_SIZE:
        for position, required in SQUAD_COMPOSITION.items():
            if squad[position] != required:
                errors.append(
                    f'{tag} has {squad[position]} {position.value} in squad (expected {required})'
                )

    starting = Counter(players[s.player_id].position for s in roster.starting)
    if starting[Position.GK] != 1:
        errors.append(f'{tag} starts {starting[Position.GK]} GK (expected 1)')
    for position, minimum in FORMATION_MINIMUM.items():
        if starting[position] < minimum:
            errors.append(f'{tag} starts {starting[position]} {position.value} (min {minimum})')
    for position, maximum in FORMATION_MAXIMUM.items():
        if starting[position] > maximum:
            errors.append(f'{tag} starts {starting[position]} {position.value} (max {maximum})')

    bench_gk = [s for s in roster.slots if s.slot == BENCH_GK_SLOT]
    if bench_gk and players[bench_gk[0].player_id].position is not Position.GK:
        errors.append(f'{tag} has no goalkeeper in bench slot {BENCH_GK_SLOT}')

    captains = [s for s in roster.slots if s.is_captain]
    if len(captains) != 1:
        errors.append(f'{tag} has {len(captains)} captains (expected 1)')
    elif captains[0].multiplier < MULTIPLIER_CAPTAIN:
        errors.append(f'{tag} captain has multiplier {captains[0].multiplier}')
    vice_captains = [s for s in roster.slots if s.is_vice_captain]
    if len(vice_captains) > 1:
        errors.append(f'{tag} has {len(vice_captains)} vice-captains (max 1)')

    tripled = [s for s in roster.slots if s.multiplier == MULTIPLIER_TRIPLE_CAPTAIN]
    if tripled and roster.chip is not Chip.TRIPLE_CAPTAIN:
        errors.append(f'{tag} has a triple multiplier without the triple captain chip')

    return errors


def validate_scored_roster(scored: ScoredRoster) -> list[str]:
    """
    Check that a live score is internally consistent.

    Sanity checks:
    - Played count within the countable maximum
    - Total equals the sum of counting slots that played
    - Total in a reasonable range (-20 to 250)

    Args:
        scored: ScoredRoster to check

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    tag = f'Manager {scored.manager_id}'

    if scored.played > scored.max_countable:
        warnings.append(f'{tag} has {scored.played} players counted (max {scored.max_countable})')

    counted = [s for s in scored.slots if s.counts]
    if len(counted) > scored.max_countable:
        warnings.append(f'{tag} has {len(counted)} counting slots (max {scored.max_countable})')

    slot_sum = sum(s.effective_points for s in counted if s.has_played)
    if slot_sum != scored.live_points:
        warnings.append(f'{tag} slot sum ({slot_sum}) != total ({scored.live_points})')

    if scored.live_points > 250:
        warnings.append(f'{tag} scored {scored.live_points} pts (unusually high - check for scoring bug)')
    elif scored.live_points < -20:
        warnings.append(f'{tag} scored {scored.live_points} pts (unusually low - check for scoring bug)')

    return warnings
