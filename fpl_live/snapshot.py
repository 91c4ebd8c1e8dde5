"""Convert validated upstream payloads into engine inputs.

The bundle is assembled by whatever fetches from upstream; this module only
reads it. Managers whose picks are missing or fail validation are kept with
a None roster so the engine can score them as zero instead of failing the
whole league.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from .constants import ELEMENT_TYPE_POSITIONS, UPSTREAM_CHIPS
from .gameweek import LeagueSnapshot
from .models import (
    Fixture,
    LiveStat,
    ManagerEntry,
    Player,
    RosterSlot,
    RosterSnapshot,
    Substitution,
    Team,
)
from .periods import current_gameweek
from .schemas import (
    Bootstrap,
    EntryHistory,
    EntryPicks,
    EventLive,
    ManagerBundle,
    SnapshotBundle,
    UpstreamFixture,
)
from .substitutions import classify_upstream_subs
from .utils import load_json

logger = logging.getLogger('fpl_live.snapshot')


def players_from_bootstrap(bootstrap: Bootstrap) -> Dict[int, Player]:
    return {
        e.id: Player(
            id=e.id,
            web_name=e.web_name,
            team=e.team,
            position=ELEMENT_TYPE_POSITIONS[e.element_type],
        )
        for e in bootstrap.elements
    }


def teams_from_bootstrap(bootstrap: Bootstrap) -> Dict[int, Team]:
    return {
        t.id: Team(id=t.id, name=t.name, short_name=t.short_name, code=t.code)
        for t in bootstrap.teams
    }


def fixture_from_upstream(fixture: UpstreamFixture) -> Fixture:
    return Fixture(
        id=fixture.id,
        gameweek=fixture.event,
        home_team=fixture.team_h,
        away_team=fixture.team_a,
        status=fixture.status,
        home_score=fixture.team_h_score,
        away_score=fixture.team_a_score,
        kickoff_time=fixture.kickoff_time,
    )


def live_stats_from_upstream(live: EventLive) -> Dict[int, LiveStat]:
    return {
        e.id: LiveStat(
            player_id=e.id,
            minutes=e.stats.minutes,
            points=e.stats.total_points,
            bonus=e.stats.bonus,
            bps=e.stats.bps,
            goals_scored=e.stats.goals_scored,
            assists=e.stats.assists,
            yellow_cards=e.stats.yellow_cards,
            red_cards=e.stats.red_cards,
        )
        for e in live.elements
    }


def roster_from_picks(manager_id: int, picks: EntryPicks) -> RosterSnapshot:
    """
    Build a RosterSnapshot from a manager's picks payload.

    Args:
        manager_id: Entry id of the manager
        picks: Validated picks payload

    Returns:
        RosterSnapshot with the chip translated and upstream subs classified
    """
    slots = tuple(
        RosterSlot(
            player_id=p.element,
            slot=p.position,
            multiplier=p.multiplier,
            is_captain=p.is_captain,
            is_vice_captain=p.is_vice_captain,
        )
        for p in sorted(picks.picks, key=lambda p: p.position)
    )
    upstream = classify_upstream_subs(
        Substitution(player_out=s.element_out, player_in=s.element_in)
        for s in picks.automatic_subs
    )
    return RosterSnapshot(
        manager_id=manager_id,
        slots=slots,
        chip=UPSTREAM_CHIPS[picks.active_chip],
        upstream_subs=upstream,
    )


def history_points(history: Optional[EntryHistory]) -> Dict[int, int]:
    """Confirmed points per gameweek from a manager's history."""
    if history is None:
        return {}
    return {h.event: h.points for h in history.current}


def validate_manager(
    manager_id: int, data: Optional[ManagerBundle]
) -> Tuple[Optional[EntryPicks], Optional[EntryHistory]]:
    """
    Validate one manager's picks and history on their own.

    A payload that fails validation is logged and treated as missing, so
    the manager is scored as zero instead of rejecting the whole league.

    Returns:
        Tuple of (picks, history), either None if missing or invalid
    """
    if data is None:
        return None, None

    picks = None
    if data.picks is not None:
        try:
            picks = EntryPicks.model_validate(data.picks)
        except ValidationError as e:
            logger.warning(f'Invalid picks for manager {manager_id}: {e.error_count()} error(s), scoring as zero')

    history = None
    if data.history is not None:
        try:
            history = EntryHistory.model_validate(data.history)
        except ValidationError as e:
            logger.warning(f'Invalid history for manager {manager_id}: {e.error_count()} error(s), ignoring')

    return picks, history


def active_gameweek(bundle: SnapshotBundle, now: datetime) -> int:
    """
    Gameweek to score: explicit, else from event status, else from events.

    Args:
        bundle: Validated upstream payloads
        now: Reference time for the events fallback

    Returns:
        Gameweek number
    """
    if bundle.gameweek is not None:
        return bundle.gameweek
    if bundle.event_status is not None:
        active = next((s.event for s in bundle.event_status.status if s.event), None)
        if active is not None:
            return active
    return current_gameweek(bundle.bootstrap.events, now)


def build_snapshot(bundle: SnapshotBundle, now: Optional[datetime] = None) -> LeagueSnapshot:
    """
    Turn a validated bundle into a LeagueSnapshot.

    Args:
        bundle: Validated upstream payloads
        now: Reference time for current gameweek detection (default: now, UTC)

    Returns:
        LeagueSnapshot ready for the engine
    """
    gameweek = active_gameweek(bundle, now or datetime.now(timezone.utc))

    if bundle.standings is not None:
        managers = tuple(
            ManagerEntry(
                id=r.entry,
                entry_name=r.entry_name,
                player_name=r.player_name,
                total=r.total,
            )
            for r in bundle.standings.standings.results
        )
    else:
        managers = tuple(
            ManagerEntry(id=manager_id, entry_name=str(manager_id))
            for manager_id in bundle.managers
        )

    rosters: Dict[int, Optional[RosterSnapshot]] = {}
    history: Dict[int, Dict[int, int]] = {}
    for manager in managers:
        picks, manager_history = validate_manager(manager.id, bundle.managers.get(manager.id))
        if picks is None:
            logger.warning(f'No picks for manager {manager.id} ({manager.entry_name})')
            rosters[manager.id] = None
        else:
            rosters[manager.id] = roster_from_picks(manager.id, picks)
        history[manager.id] = history_points(manager_history)

    return LeagueSnapshot(
        gameweek=gameweek,
        players=players_from_bootstrap(bundle.bootstrap),
        teams=teams_from_bootstrap(bundle.bootstrap),
        fixtures=tuple(fixture_from_upstream(f) for f in bundle.fixtures),
        live_stats=live_stats_from_upstream(bundle.live),
        managers=managers,
        rosters=rosters,
        history=history,
    )


def load_snapshot(path: Path | str, now: Optional[datetime] = None) -> LeagueSnapshot:
    """
    Load and validate a snapshot bundle file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file isn't valid JSON
        ValueError: If the bundle doesn't match the upstream schemas
    """
    bundle = load_json(path, schema=SnapshotBundle)
    return build_snapshot(bundle, now=now)
