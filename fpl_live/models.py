"""Data models for the FPL live table engine."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from .constants import (
    BENCH_SLOTS,
    MAX_COUNTABLE,
    Chip,
    FixtureStatus,
    Position,
)


@dataclass(frozen=True)
class Team:
    """Premier League team reference data."""
    id: int
    name: str
    short_name: str
    code: int = 0


@dataclass(frozen=True)
class Player:
    """Player reference data for the season."""
    id: int
    web_name: str
    team: int
    position: Position


@dataclass(frozen=True)
class Fixture:
    """A fixture as last reported upstream."""
    id: int
    gameweek: Optional[int]
    home_team: int
    away_team: int
    status: FixtureStatus = FixtureStatus.NOT_STARTED
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    kickoff_time: Optional[datetime] = None

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team, self.away_team)


@dataclass(frozen=True)
class LiveStat:
    """Live statistics for one player in the current gameweek.

    ``points`` is the upstream total, which already contains ``bonus``
    once bonus has been confirmed.
    """
    player_id: int
    minutes: int = 0
    points: int = 0
    bonus: int = 0
    bps: int = 0
    goals_scored: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    @property
    def base_points(self) -> int:
        """Points excluding any confirmed bonus."""
        return self.points - self.bonus


@dataclass(frozen=True)
class RosterSlot:
    """One pick in a manager's 15-player squad."""
    player_id: int
    slot: int  # 1-11 starting, 12-15 bench
    multiplier: int = 1
    is_captain: bool = False
    is_vice_captain: bool = False

    @property
    def is_bench(self) -> bool:
        return self.slot in BENCH_SLOTS


@dataclass(frozen=True)
class Substitution:
    """A confirmed automatic substitution."""
    player_out: int
    player_in: int


@dataclass(frozen=True)
class PendingSubstitution:
    """A substitution that waits on an unfinished fixture."""
    player_out: int
    candidates: Tuple[int, ...]


@dataclass(frozen=True)
class Authoritative:
    """Substitutions already processed upstream; used verbatim."""
    substitutions: Tuple[Substitution, ...]


@dataclass(frozen=True)
class NeedsLocalResolution:
    """No upstream substitutions yet; resolve them locally."""


UpstreamSubstitutions = Union[Authoritative, NeedsLocalResolution]


@dataclass(frozen=True)
class RosterSnapshot:
    """A manager's picks for the gameweek."""
    manager_id: int
    slots: Tuple[RosterSlot, ...]
    chip: Chip = Chip.NONE
    upstream_subs: UpstreamSubstitutions = field(default_factory=NeedsLocalResolution)

    @property
    def starting(self) -> List[RosterSlot]:
        return [s for s in self.ordered_slots if not s.is_bench]

    @property
    def bench(self) -> List[RosterSlot]:
        return [s for s in self.ordered_slots if s.is_bench]

    @property
    def ordered_slots(self) -> List[RosterSlot]:
        return sorted(self.slots, key=lambda s: s.slot)


@dataclass(frozen=True)
class SubstitutionOutcome:
    """Result of resolving automatic substitutions for one roster."""
    confirmed: Tuple[Substitution, ...] = ()
    pending: Tuple[PendingSubstitution, ...] = ()
    unresolved: Tuple[int, ...] = ()  # needed a sub, no valid candidate

    @property
    def players_out(self) -> set:
        return {s.player_out for s in self.confirmed}

    @property
    def players_in(self) -> set:
        return {s.player_in for s in self.confirmed}

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BonusAllocation:
    """Bonus points for one fixture, official or provisional."""
    fixture_id: int
    bonus: Dict[int, int] = field(default_factory=dict)
    official: bool = False

    def bonus_for(self, player_id: int) -> int:
        return self.bonus.get(player_id, 0)

    def to_dict(self) -> dict:
        return {
            'fixture_id': self.fixture_id,
            'official': self.official,
            'bonus': {str(pid): pts for pid, pts in self.bonus.items()},
        }


@dataclass(frozen=True)
class ScoredSlot:
    """Scoring state of one roster slot."""
    player_id: int
    slot: int
    name: str
    position: Optional[Position]
    minutes: int
    points: int  # base + awarded bonus, before multiplier
    bonus: int
    multiplier: int
    effective_points: int
    counts: bool
    is_captain: bool = False
    is_vice_captain: bool = False
    subbed_in: bool = False
    subbed_out: bool = False
    fixture_status: Optional[FixtureStatus] = None

    @property
    def has_played(self) -> bool:
        return self.minutes > 0

    @property
    def is_bench(self) -> bool:
        return self.slot in BENCH_SLOTS


@dataclass(frozen=True)
class ScoredRoster:
    """Live score for one manager."""
    manager_id: int
    slots: Tuple[ScoredSlot, ...] = ()
    live_points: int = 0
    played: int = 0
    max_countable: int = MAX_COUNTABLE
    captain_name: Optional[str] = None
    captain_played: bool = False
    chip: Chip = Chip.NONE

    @classmethod
    def empty(cls, manager_id: int) -> 'ScoredRoster':
        """Zeroed roster for a manager with no picks in the snapshot."""
        return cls(manager_id=manager_id)

    def to_dict(self) -> dict:
        d = asdict(self)
        d['chip'] = self.chip.value
        for slot in d['slots']:
            slot['position'] = slot['position'].value if slot['position'] else None
            slot['fixture_status'] = (
                slot['fixture_status'].value if slot['fixture_status'] else None
            )
        return d


@dataclass(frozen=True)
class ManagerEntry:
    """A league entry as listed in the standings."""
    id: int
    entry_name: str
    player_name: str = ''
    total: int = 0  # career points


@dataclass(frozen=True)
class PeriodAggregate:
    """A manager's period standing before and after the live gameweek."""
    manager_id: int
    entry_name: str
    prior_period_points: int
    period_points: int
    gameweek_points: int
    total: int
    current_rank: int = 0
    previous_rank: int = 0
    rank_delta: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
