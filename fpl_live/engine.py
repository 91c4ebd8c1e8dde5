"""Live table engine: one full recomputation per refresh.

The engine reads a LeagueSnapshot and returns an EngineResult. It performs
no I/O and keeps nothing between runs, so running it twice on the same
snapshot gives the same result.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .bonus import allocate_bonus
from .constants import RankingView
from .events import FixtureEvents, fixture_events
from .gameweek import GameweekData, LeagueSnapshot
from .models import (
    BonusAllocation,
    ManagerEntry,
    PeriodAggregate,
    ScoredRoster,
    SubstitutionOutcome,
)
from .periods import gameweek_start_dates, gameweeks_for_month, month_key
from .scoring import score_roster
from .standings import compute_standings
from .substitutions import resolve_substitutions
from .validators import validate_roster, validate_scored_roster

logger = logging.getLogger('fpl_live.engine')


@dataclass(frozen=True)
class EngineResult:
    """Everything computed for one refresh."""
    gameweek: int
    period_gameweeks: Tuple[int, ...]
    view: RankingView
    bonus: Dict[int, BonusAllocation] = field(default_factory=dict)
    substitutions: Dict[int, SubstitutionOutcome] = field(default_factory=dict)
    rosters: Dict[int, ScoredRoster] = field(default_factory=dict)
    standings: List[PeriodAggregate] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'gameweek': self.gameweek,
            'period_gameweeks': list(self.period_gameweeks),
            'view': self.view.value,
            'standings': [a.to_dict() for a in self.standings],
            'rosters': {str(mid): r.to_dict() for mid, r in self.rosters.items()},
            'substitutions': {str(mid): o.to_dict() for mid, o in self.substitutions.items()},
            'bonus': {str(fid): a.to_dict() for fid, a in self.bonus.items()},
        }


class LiveTableEngine:
    """
    Scores every manager in a snapshot and ranks them.

    Usage:
        engine = LiveTableEngine(snapshot)
        result = engine.run(period_gameweeks=[21, 22])
    """

    def __init__(self, snapshot: LeagueSnapshot):
        """
        Initialize engine.

        Args:
            snapshot: Consistent snapshot for one refresh
        """
        self.snapshot = snapshot
        self.gameweek = snapshot.gameweek
        self.data = GameweekData.from_snapshot(snapshot)

    def allocate_bonus(self) -> Dict[int, BonusAllocation]:
        """Bonus allocation for every started fixture of the gameweek."""
        return allocate_bonus(self.data.fixtures, self.data.players, self.data.live_stats)

    def score_manager(
        self, manager_id: int, allocations: Dict[int, BonusAllocation]
    ) -> Tuple[SubstitutionOutcome, ScoredRoster]:
        """
        Resolve substitutions and score one manager.

        A manager without picks in the snapshot gets an empty outcome and a
        zeroed score.

        Args:
            manager_id: Entry id
            allocations: Bonus allocations by fixture id

        Returns:
            Tuple of (SubstitutionOutcome, ScoredRoster)
        """
        roster = self.snapshot.rosters.get(manager_id)
        if roster is None:
            logger.warning(f'Manager {manager_id}: no roster in snapshot, scoring as zero')
            return SubstitutionOutcome(), ScoredRoster.empty(manager_id)

        for error in validate_roster(roster, self.data.players):
            logger.warning(error)

        outcome = resolve_substitutions(roster, self.data)
        scored = score_roster(roster, self.data, allocations, outcome)

        for warning in validate_scored_roster(scored):
            logger.warning(warning)

        return outcome, scored

    def managers(self) -> Tuple[ManagerEntry, ...]:
        """League entries in standings order, falling back to roster order."""
        if self.snapshot.managers:
            return tuple(self.snapshot.managers)
        return tuple(ManagerEntry(id=mid, entry_name=str(mid)) for mid in self.snapshot.rosters)

    def default_period(self) -> Tuple[int, ...]:
        """Gameweeks in the calendar month the current gameweek starts in."""
        start = gameweek_start_dates(self.snapshot.fixtures).get(self.gameweek)
        if start is None:
            return (self.gameweek,)
        return tuple(gameweeks_for_month(self.snapshot.fixtures, month_key(start)))

    def run(
        self,
        period_gameweeks: Optional[Iterable[int]] = None,
        view: RankingView = RankingView.PERIOD,
    ) -> EngineResult:
        """
        Compute the full live table.

        Args:
            period_gameweeks: Gameweeks in the selected period (default: the
                current gameweek's calendar month)
            view: Primary sort field for the standings

        Returns:
            EngineResult
        """
        period = tuple(sorted(period_gameweeks)) if period_gameweeks is not None else self.default_period()
        allocations = self.allocate_bonus()

        substitutions: Dict[int, SubstitutionOutcome] = {}
        rosters: Dict[int, ScoredRoster] = {}
        managers = self.managers()
        for manager in managers:
            substitutions[manager.id], rosters[manager.id] = self.score_manager(manager.id, allocations)

        standings = compute_standings(
            managers,
            rosters,
            self.snapshot.history,
            period,
            self.gameweek,
            view,
        )

        logger.info(
            f'Gameweek {self.gameweek}: scored {len(rosters)} managers, '
            f'{len(allocations)} fixtures with bonus'
        )

        return EngineResult(
            gameweek=self.gameweek,
            period_gameweeks=period,
            view=view,
            bonus=allocations,
            substitutions=substitutions,
            rosters=rosters,
            standings=standings,
        )

    def fixture_events(self, fixture_id: int, allocations: Dict[int, BonusAllocation]) -> Optional[FixtureEvents]:
        """Goals, assists, cards and bonus for one fixture of the gameweek."""
        fixture = next((f for f in self.data.fixtures if f.id == fixture_id), None)
        if fixture is None:
            return None
        return fixture_events(
            fixture,
            self.data.players,
            self.data.teams,
            self.data.live_stats,
            allocations.get(fixture_id),
        )


def run_engine(
    snapshot: LeagueSnapshot,
    period_gameweeks: Optional[Iterable[int]] = None,
    view: RankingView = RankingView.PERIOD,
) -> EngineResult:
    """Score and rank a snapshot in one call."""
    return LiveTableEngine(snapshot).run(period_gameweeks, view)
