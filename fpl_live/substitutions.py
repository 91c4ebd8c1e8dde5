"""Automatic substitution resolution.

A starter is replaced when they recorded no minutes and their fixture is
over. Bench players are tried in bench order; a bench player whose fixture
has not been decided blocks everyone behind them, so the substitution stays
pending until that fixture resolves.

Formation rules:
    - Goalkeepers are only replaced by the bench goalkeeper (slot 12)
    - At least 3 DEF, 2 MID and 1 FWD; when the outgoing player's role is
      at or below its minimum among the safe starters, the replacement must
      share that role
    - At most 5 DEF, 5 MID and 3 FWD
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import (
    BENCH_GK_SLOT,
    FORMATION_MAXIMUM,
    FORMATION_MINIMUM,
    Chip,
    Position,
)
from .gameweek import GameweekData
from .models import (
    Authoritative,
    NeedsLocalResolution,
    PendingSubstitution,
    RosterSlot,
    RosterSnapshot,
    Substitution,
    SubstitutionOutcome,
    UpstreamSubstitutions,
)

logger = logging.getLogger('fpl_live.substitutions')


def classify_upstream_subs(substitutions: Optional[Iterable[Substitution]]) -> UpstreamSubstitutions:
    """
    Decide whether upstream substitutions are final.

    Only a non-empty list is authoritative; an empty or missing list means
    upstream has not processed substitutions yet.
    """
    subs = tuple(substitutions or ())
    if subs:
        return Authoritative(subs)
    return NeedsLocalResolution()


def needs_substitution(slot: RosterSlot, data: GameweekData) -> bool:
    """A starter needs replacing once their fixture is over without them playing."""
    if slot.is_bench:
        return False
    return data.minutes(slot.player_id) == 0 and data.fixture_status(slot.player_id).is_finished


def safe_formation(starting: Sequence[RosterSlot], data: GameweekData) -> Dict[Position, int]:
    """Count starters per role who do not need replacing (played or still to play)."""
    counts = {position: 0 for position in Position}
    for slot in starting:
        if needs_substitution(slot, data):
            continue
        player = data.player(slot.player_id)
        if player is not None:
            counts[player.position] += 1
    return counts


def required_role(position: Optional[Position], formation: Dict[Position, int]) -> Optional[Position]:
    """Role the replacement must have, or None when any outfield role will do."""
    if position is None or position not in FORMATION_MINIMUM:
        return None
    if formation[position] <= FORMATION_MINIMUM[position]:
        return position
    return None


def _exceeds_maximum(position: Position, formation: Dict[Position, int]) -> bool:
    limit = FORMATION_MAXIMUM.get(position)
    return limit is not None and formation[position] + 1 > limit


def _bench_candidates(position: Optional[Position], bench: List[RosterSlot]) -> List[RosterSlot]:
    if position is Position.GK:
        return [b for b in bench if b.slot == BENCH_GK_SLOT]
    return [b for b in bench if b.slot != BENCH_GK_SLOT]


def resolve_local(roster: RosterSnapshot, data: GameweekData) -> SubstitutionOutcome:
    """
    Work out substitutions for a roster from live data.

    Args:
        roster: Manager's picks
        data: Gameweek lookups

    Returns:
        SubstitutionOutcome with confirmed, pending and unresolved slots
    """
    starting = roster.starting
    bench = roster.bench
    formation = safe_formation(starting, data)

    used: set = set()
    confirmed: List[Substitution] = []
    pending: List[PendingSubstitution] = []
    unresolved: List[int] = []

    for slot_out in starting:
        if not needs_substitution(slot_out, data):
            continue

        out_player = data.player(slot_out.player_id)
        out_position = out_player.position if out_player else None
        role = None if out_position is Position.GK else required_role(out_position, formation)

        replacement = None
        waiting_on = None

        for candidate in _bench_candidates(out_position, bench):
            if candidate.player_id in used:
                continue

            bench_player = data.player(candidate.player_id)
            if bench_player is None:
                continue

            if out_position is not Position.GK:
                if bench_player.position is Position.GK:
                    continue
                if role is not None and bench_player.position is not role:
                    continue
                if _exceeds_maximum(bench_player.position, formation):
                    continue

            if data.minutes(candidate.player_id) > 0:
                replacement = candidate
                break
            if data.fixture_status(candidate.player_id).is_finished:
                continue

            waiting_on = candidate
            break

        if replacement is not None:
            used.add(replacement.player_id)
            formation[data.player(replacement.player_id).position] += 1
            confirmed.append(Substitution(slot_out.player_id, replacement.player_id))
            logger.debug(
                f'Manager {roster.manager_id}: {_name(data, slot_out.player_id)} (0 mins) '
                f'-> {_name(data, replacement.player_id)}'
            )
        elif waiting_on is not None:
            pending.append(PendingSubstitution(slot_out.player_id, (waiting_on.player_id,)))
            logger.debug(
                f'Manager {roster.manager_id}: {_name(data, slot_out.player_id)} waiting on '
                f'{_name(data, waiting_on.player_id)}'
            )
        else:
            unresolved.append(slot_out.player_id)
            logger.debug(
                f'Manager {roster.manager_id}: no valid substitute for {_name(data, slot_out.player_id)}'
            )

    if confirmed:
        logger.info(f'Manager {roster.manager_id}: {len(confirmed)} local auto-sub(s)')

    return SubstitutionOutcome(
        confirmed=tuple(confirmed),
        pending=tuple(pending),
        unresolved=tuple(unresolved),
    )


def resolve_substitutions(roster: RosterSnapshot, data: GameweekData) -> SubstitutionOutcome:
    """
    Resolve automatic substitutions for one roster.

    Bench boost has no substitutions since every slot counts. Substitutions
    already processed upstream are returned verbatim.

    Args:
        roster: Manager's picks
        data: Gameweek lookups

    Returns:
        SubstitutionOutcome
    """
    if roster.chip is Chip.BENCH_BOOST:
        return SubstitutionOutcome()

    if isinstance(roster.upstream_subs, Authoritative):
        return SubstitutionOutcome(confirmed=roster.upstream_subs.substitutions)

    return resolve_local(roster, data)


def _name(data: GameweekData, player_id: int) -> str:
    player = data.player(player_id)
    return player.web_name if player else 'Unknown'
