from .constants import Chip, FixtureStatus, Position, RankingView
from .models import (
    Authoritative,
    BonusAllocation,
    Fixture,
    LiveStat,
    ManagerEntry,
    NeedsLocalResolution,
    PendingSubstitution,
    PeriodAggregate,
    Player,
    RosterSlot,
    RosterSnapshot,
    ScoredRoster,
    ScoredSlot,
    Substitution,
    SubstitutionOutcome,
    Team,
)
from .bonus import allocate_bonus, allocate_fixture_bonus, provisional_bonus
from .substitutions import classify_upstream_subs, resolve_substitutions
from .scoring import score_roster
from .standings import compute_standings
from .gameweek import GameweekData, LeagueSnapshot
from .events import fixture_events
from .periods import (
    available_months,
    current_gameweek,
    default_month,
    gameweeks_for_month,
)
from .snapshot import build_snapshot, load_snapshot
from .engine import EngineResult, LiveTableEngine, run_engine

__all__ = [
    # Vocabulary
    'Chip',
    'FixtureStatus',
    'Position',
    'RankingView',
    # Models
    'Authoritative',
    'BonusAllocation',
    'Fixture',
    'LiveStat',
    'ManagerEntry',
    'NeedsLocalResolution',
    'PendingSubstitution',
    'PeriodAggregate',
    'Player',
    'RosterSlot',
    'RosterSnapshot',
    'ScoredRoster',
    'ScoredSlot',
    'Substitution',
    'SubstitutionOutcome',
    'Team',
    # Engine components
    'allocate_bonus',
    'allocate_fixture_bonus',
    'provisional_bonus',
    'classify_upstream_subs',
    'resolve_substitutions',
    'score_roster',
    'compute_standings',
    'fixture_events',
    # Snapshot data
    'GameweekData',
    'LeagueSnapshot',
    'build_snapshot',
    'load_snapshot',
    # Periods
    'available_months',
    'current_gameweek',
    'default_month',
    'gameweeks_for_month',
    # Orchestration
    'EngineResult',
    'LiveTableEngine',
    'run_engine',
]
