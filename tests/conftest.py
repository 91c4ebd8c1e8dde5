"""Shared builders for engine tests.

Each player id doubles as its roster slot and its team id, and every team
plays its own fixture (fixture id == team id) against team 100 + id, so a
test controls each player's minutes and fixture status independently.
"""

import pytest

from fpl_live.constants import Chip, FixtureStatus, Position
from fpl_live.gameweek import GameweekData
from fpl_live.models import (
    Fixture,
    LiveStat,
    NeedsLocalResolution,
    Player,
    RosterSlot,
    RosterSnapshot,
)

GAMEWEEK = 22

# 4-4-2 with bench GK, MID, DEF, FWD
DEFAULT_POSITIONS = {
    1: Position.GK,
    2: Position.DEF, 3: Position.DEF, 4: Position.DEF, 5: Position.DEF,
    6: Position.MID, 7: Position.MID, 8: Position.MID, 9: Position.MID,
    10: Position.FWD, 11: Position.FWD,
    12: Position.GK,
    13: Position.MID,
    14: Position.DEF,
    15: Position.FWD,
}


def _build_data(
    positions=None,
    minutes=None,
    statuses=None,
    points=None,
    bonus=None,
    bps=None,
    missing_stats=(),
    blank=(),
    default_minutes=90,
    default_points=2,
):
    positions = positions or DEFAULT_POSITIONS
    minutes = minutes or {}
    statuses = statuses or {}
    points = points or {}
    bonus = bonus or {}
    bps = bps or {}

    players = {
        pid: Player(id=pid, web_name=f'P{pid}', team=pid, position=pos)
        for pid, pos in positions.items()
    }
    fixtures = tuple(
        Fixture(
            id=pid,
            gameweek=GAMEWEEK,
            home_team=pid,
            away_team=100 + pid,
            status=statuses.get(pid, FixtureStatus.FINISHED),
        )
        for pid in positions
        if pid not in blank
    )
    live_stats = {}
    for pid in positions:
        if pid in missing_stats:
            continue
        played = minutes.get(pid, default_minutes)
        live_stats[pid] = LiveStat(
            player_id=pid,
            minutes=played,
            points=points.get(pid, default_points if played else 0),
            bonus=bonus.get(pid, 0),
            bps=bps.get(pid, 0),
        )
    return GameweekData(GAMEWEEK, players, fixtures, live_stats)


def _build_roster(
    manager_id=1,
    captain=6,
    vice_captain=7,
    chip=Chip.NONE,
    upstream_subs=None,
    size=15,
):
    slots = []
    for slot in range(1, size + 1):
        if chip is Chip.BENCH_BOOST or slot <= 11:
            multiplier = 1
        else:
            multiplier = 0
        if slot == captain:
            multiplier = 3 if chip is Chip.TRIPLE_CAPTAIN else 2
        slots.append(
            RosterSlot(
                player_id=slot,
                slot=slot,
                multiplier=multiplier,
                is_captain=slot == captain,
                is_vice_captain=slot == vice_captain,
            )
        )
    return RosterSnapshot(
        manager_id=manager_id,
        slots=tuple(slots),
        chip=chip,
        upstream_subs=upstream_subs or NeedsLocalResolution(),
    )


@pytest.fixture
def make_data():
    """Factory for GameweekData over a 15-player squad."""
    return _build_data


@pytest.fixture
def make_roster():
    """Factory for a RosterSnapshot whose player ids equal slot numbers."""
    return _build_roster
