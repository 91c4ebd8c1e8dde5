"""Constants and mappings for the FPL live table engine."""

from enum import Enum


class Position(str, Enum):
    """Formation role of a player."""

    GK = 'GK'
    DEF = 'DEF'
    MID = 'MID'
    FWD = 'FWD'


class Chip(str, Enum):
    """Chip vocabulary recognised by the engine."""

    NONE = 'none'
    BENCH_BOOST = 'bench-boost'
    TRIPLE_CAPTAIN = 'triple-captain'
    FREE_HIT = 'free-hit'
    WILDCARD = 'wildcard'


class FixtureStatus(str, Enum):
    """Progress of a fixture within the gameweek."""

    NOT_STARTED = 'not-started'
    LIVE = 'live'
    FINISHED = 'finished'
    FINISHED_PROVISIONAL = 'finished-provisional'

    @property
    def is_finished(self) -> bool:
        return self in (FixtureStatus.FINISHED, FixtureStatus.FINISHED_PROVISIONAL)

    @property
    def has_started(self) -> bool:
        return self is not FixtureStatus.NOT_STARTED


class RankingView(str, Enum):
    """Primary sort field for the leaderboard."""

    PERIOD = 'period'
    GAMEWEEK = 'gameweek'


# Upstream element_type -> position
ELEMENT_TYPE_POSITIONS = {
    1: Position.GK,
    2: Position.DEF,
    3: Position.MID,
    4: Position.FWD,
}

# Upstream active_chip codes -> chip
UPSTREAM_CHIPS = {
    None: Chip.NONE,
    '': Chip.NONE,
    'bboost': Chip.BENCH_BOOST,
    '3xc': Chip.TRIPLE_CAPTAIN,
    'freehit': Chip.FREE_HIT,
    'wildcard': Chip.WILDCARD,
}

# Roster layout
SQUAD_SIZE = 15
BENCH_SLOTS = range(12, 16)
BENCH_GK_SLOT = 12
MAX_COUNTABLE = 11
MAX_COUNTABLE_BENCH_BOOST = 15

# Squad composition (15 players)
SQUAD_COMPOSITION = {
    Position.GK: 2,
    Position.DEF: 5,
    Position.MID: 5,
    Position.FWD: 3,
}

# Live formation limits for outfield roles
FORMATION_MINIMUM = {
    Position.DEF: 3,
    Position.MID: 2,
    Position.FWD: 1,
}
FORMATION_MAXIMUM = {
    Position.DEF: 5,
    Position.MID: 5,
    Position.FWD: 3,
}

# Bonus points by finishing position in BPS order
BONUS_AWARDS = {1: 3, 2: 2, 3: 1}

# Captaincy multipliers
MULTIPLIER_NORMAL = 1
MULTIPLIER_CAPTAIN = 2
MULTIPLIER_TRIPLE_CAPTAIN = 3
