"""Live points for a manager's roster.

A slot counts toward the total when:
    - it is a starter who was not subbed out, or
    - it is a bench player who was subbed in, or
    - bench boost is active and it is a bench slot

Points for a counting slot are (base points + bonus) x multiplier, where the
bonus is the official bonus once confirmed, otherwise the projected one.
Only counting slots whose player has minutes contribute to the total.
"""

from typing import Mapping, Optional, Tuple

from .bonus import awarded_bonus
from .constants import MAX_COUNTABLE, MAX_COUNTABLE_BENCH_BOOST, MULTIPLIER_NORMAL, Chip
from .gameweek import GameweekData
from .models import (
    BonusAllocation,
    RosterSlot,
    RosterSnapshot,
    ScoredRoster,
    ScoredSlot,
    SubstitutionOutcome,
)


def slot_counts(slot: RosterSlot, chip: Chip, outcome: SubstitutionOutcome) -> bool:
    """Whether a slot's points count toward the roster total."""
    if slot.is_bench:
        return chip is Chip.BENCH_BOOST or slot.player_id in outcome.players_in
    return slot.player_id not in outcome.players_out


def counting_multiplier(slot: RosterSlot) -> int:
    """Multiplier for a counting slot; upstream reports 0 for bench picks."""
    return max(slot.multiplier, MULTIPLIER_NORMAL)


def player_points(
    player_id: int,
    data: GameweekData,
    allocations: Mapping[int, BonusAllocation],
) -> Tuple[int, int]:
    """
    Live points for a player before captaincy.

    Args:
        player_id: Player to score
        data: Gameweek lookups
        allocations: Bonus allocations by fixture id

    Returns:
        Tuple of (points including bonus, bonus)
    """
    stat = data.live_stat(player_id)
    player = data.player(player_id)

    bonus: Optional[int] = None
    if player is not None:
        bonus = awarded_bonus(player_id, player.team, data.team_fixtures(player.team), allocations)
    if bonus is None:
        bonus = stat.bonus

    return stat.base_points + bonus, bonus


def score_slot(
    slot: RosterSlot,
    roster: RosterSnapshot,
    data: GameweekData,
    allocations: Mapping[int, BonusAllocation],
    outcome: SubstitutionOutcome,
) -> ScoredSlot:
    """Score one roster slot."""
    player = data.player(slot.player_id)
    points, bonus = player_points(slot.player_id, data, allocations)
    counts = slot_counts(slot, roster.chip, outcome)
    multiplier = counting_multiplier(slot) if counts else slot.multiplier

    return ScoredSlot(
        player_id=slot.player_id,
        slot=slot.slot,
        name=player.web_name if player else 'Unknown',
        position=player.position if player else None,
        minutes=data.minutes(slot.player_id),
        points=points,
        bonus=bonus,
        multiplier=multiplier,
        effective_points=points * multiplier if counts else 0,
        counts=counts,
        is_captain=slot.is_captain,
        is_vice_captain=slot.is_vice_captain,
        subbed_in=slot.player_id in outcome.players_in,
        subbed_out=slot.player_id in outcome.players_out,
        fixture_status=data.fixture_status(slot.player_id) if player else None,
    )


def score_roster(
    roster: Optional[RosterSnapshot],
    data: GameweekData,
    allocations: Mapping[int, BonusAllocation],
    outcome: SubstitutionOutcome,
    manager_id: Optional[int] = None,
) -> ScoredRoster:
    """
    Score a manager's roster for the live gameweek.

    Args:
        roster: Manager's picks, or None if they are missing from the snapshot
        data: Gameweek lookups
        allocations: Bonus allocations by fixture id
        outcome: Resolved substitutions for the roster
        manager_id: Manager id to report when roster is None

    Returns:
        ScoredRoster (all zero when the roster is missing)
    """
    if roster is None:
        return ScoredRoster.empty(manager_id or 0)

    slots = tuple(
        score_slot(slot, roster, data, allocations, outcome) for slot in roster.ordered_slots
    )

    live_points = 0
    played = 0
    captain_name = None
    captain_played = False

    for scored in slots:
        if scored.counts and scored.has_played:
            played += 1
            live_points += scored.effective_points
        if scored.is_captain:
            captain_name = scored.name
            captain_played = scored.has_played

    return ScoredRoster(
        manager_id=roster.manager_id,
        slots=slots,
        live_points=live_points,
        played=played,
        max_countable=MAX_COUNTABLE_BENCH_BOOST if roster.chip is Chip.BENCH_BOOST else MAX_COUNTABLE,
        captain_name=captain_name,
        captain_played=captain_played,
        chip=roster.chip,
    )
