"""Bonus point allocation per fixture.

Official bonus is used for a whole fixture once it has finished and any
player in it has confirmed bonus. Until then, bonus is projected from BPS:

    - Highest BPS gets 3, second 2, third 1
    - Tied players share the award for their position
    - The next position is skipped for every extra tied player, so two
      players tied on top both get 3 and the next player gets 1
    - Awards stop once the position passes 3rd
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import BONUS_AWARDS
from .models import BonusAllocation, Fixture, LiveStat, Player

logger = logging.getLogger('fpl_live.bonus')


def provisional_bonus(bps_values: Iterable[Tuple[int, int]]) -> Dict[int, int]:
    """
    Project bonus points from BPS rankings.

    Args:
        bps_values: (player_id, bps) pairs for players who have played

    Returns:
        Dict mapping player id to projected bonus (only players who earn bonus)
    """
    ranked = sorted(bps_values, key=lambda pair: pair[1], reverse=True)
    awarded: Dict[int, int] = {}

    position = 1
    i = 0
    while i < len(ranked) and position in BONUS_AWARDS:
        current_bps = ranked[i][1]
        tied: List[int] = []
        while i < len(ranked) and ranked[i][1] == current_bps:
            tied.append(ranked[i][0])
            i += 1

        for player_id in tied:
            awarded[player_id] = BONUS_AWARDS[position]

        position += len(tied)

    return awarded


def allocate_fixture_bonus(
    fixture_id: int,
    bps_values: Iterable[Tuple[int, int]],
    confirmed_bonus: Mapping[int, int],
) -> BonusAllocation:
    """
    Allocate bonus for one fixture.

    Args:
        fixture_id: Fixture being allocated
        bps_values: (player_id, bps) for every player in the fixture with minutes > 0
        confirmed_bonus: Official bonus per player (0 or missing if unconfirmed)

    Returns:
        BonusAllocation flagged official when any confirmed bonus exists
    """
    official = {pid: pts for pid, pts in confirmed_bonus.items() if pts > 0}
    if official:
        logger.debug(f'Fixture {fixture_id}: using official bonus for {len(official)} players')
        return BonusAllocation(fixture_id=fixture_id, bonus=official, official=True)

    projected = provisional_bonus(bps_values)
    if projected:
        logger.debug(f'Fixture {fixture_id}: projected bonus {projected}')
    return BonusAllocation(fixture_id=fixture_id, bonus=projected, official=False)


def fixture_participants(
    fixture: Fixture,
    players: Mapping[int, Player],
    live_stats: Mapping[int, LiveStat],
) -> List[LiveStat]:
    """Live stats of players from either side of the fixture who have played."""
    participants = []
    for player_id, stat in live_stats.items():
        player = players.get(player_id)
        if player is None or not fixture.involves(player.team):
            continue
        if stat.minutes > 0:
            participants.append(stat)
    return participants


def allocate_bonus(
    fixtures: Iterable[Fixture],
    players: Mapping[int, Player],
    live_stats: Mapping[int, LiveStat],
) -> Dict[int, BonusAllocation]:
    """
    Allocate bonus for every started fixture.

    Confirmed bonus only makes a fixture official once it has finished.

    Args:
        fixtures: Fixtures of the gameweek
        players: Player reference data by id
        live_stats: Live stats by player id

    Returns:
        Dict mapping fixture id to its BonusAllocation
    """
    allocations: Dict[int, BonusAllocation] = {}

    for fixture in fixtures:
        if not fixture.status.has_started:
            continue
        participants = fixture_participants(fixture, players, live_stats)
        # Live bonus is a gameweek total; in a double gameweek it can come
        # from the team's other, already finished, fixture
        if fixture.status.is_finished:
            confirmed = {s.player_id: s.bonus for s in participants}
        else:
            confirmed = {}
        allocations[fixture.id] = allocate_fixture_bonus(
            fixture.id,
            [(s.player_id, s.bps) for s in participants],
            confirmed,
        )

    return allocations


def awarded_bonus(
    player_id: int,
    team_id: int,
    fixtures: Iterable[Fixture],
    allocations: Mapping[int, BonusAllocation],
) -> Optional[int]:
    """Bonus awarded to a player across the fixtures their team plays in.

    A double gameweek player is ranked with the same gameweek BPS in both
    fixtures, so the highest single award is taken rather than the sum.
    Returns None when none of the team's fixtures has an allocation.
    """
    best = None
    for fixture in fixtures:
        if not fixture.involves(team_id):
            continue
        allocation = allocations.get(fixture.id)
        if allocation is not None:
            best = max(best or 0, allocation.bonus_for(player_id))
    return best
