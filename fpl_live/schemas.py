"""Pydantic schemas for upstream JSON payloads and league configuration.

Upstream payloads carry many more fields than the engine reads; those are
ignored rather than rejected.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import UPSTREAM_CHIPS, FixtureStatus


class UpstreamElement(BaseModel):
    """Player entry from bootstrap-static."""

    id: int
    web_name: str = Field(..., min_length=1)
    team: int
    element_type: int = Field(..., ge=1, le=4)

    class Config:
        extra = 'ignore'


class UpstreamTeam(BaseModel):
    """Team entry from bootstrap-static."""

    id: int
    name: str = ''
    short_name: str = Field(..., min_length=1, max_length=4)
    code: int = 0

    class Config:
        extra = 'ignore'


class UpstreamEvent(BaseModel):
    """Gameweek entry from bootstrap-static."""

    id: int = Field(..., ge=1, le=38)
    name: str = ''
    deadline_time: Optional[datetime] = None
    is_current: bool = False
    is_next: bool = False
    finished: bool = False

    class Config:
        extra = 'ignore'


class Bootstrap(BaseModel):
    """Reference data from bootstrap-static."""

    elements: list[UpstreamElement]
    teams: list[UpstreamTeam]
    events: list[UpstreamEvent] = Field(default_factory=list)

    class Config:
        extra = 'ignore'


class UpstreamFixture(BaseModel):
    """Fixture entry from the fixtures endpoint."""

    id: int
    event: Optional[int] = None
    team_h: int
    team_a: int
    team_h_score: Optional[int] = None
    team_a_score: Optional[int] = None
    kickoff_time: Optional[datetime] = None
    started: Optional[bool] = False
    finished: bool = False
    finished_provisional: bool = False

    class Config:
        extra = 'ignore'

    @property
    def status(self) -> FixtureStatus:
        if self.finished:
            return FixtureStatus.FINISHED
        if self.finished_provisional:
            return FixtureStatus.FINISHED_PROVISIONAL
        if self.started:
            return FixtureStatus.LIVE
        return FixtureStatus.NOT_STARTED


class LiveElementStats(BaseModel):
    """Per-player live stats for the gameweek."""

    minutes: int = Field(default=0, ge=0)
    total_points: int = 0
    bonus: int = Field(default=0, ge=0)  # gameweek total, over 3 in a double gameweek
    bps: int = 0
    goals_scored: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    class Config:
        extra = 'ignore'


class LiveElement(BaseModel):
    """Player entry from the event live endpoint."""

    id: int
    stats: LiveElementStats = Field(default_factory=LiveElementStats)

    class Config:
        extra = 'ignore'


class EventLive(BaseModel):
    """Event live payload."""

    elements: list[LiveElement] = Field(default_factory=list)

    class Config:
        extra = 'ignore'


class Pick(BaseModel):
    """One pick in a manager's gameweek squad."""

    element: int
    position: int = Field(..., ge=1, le=15)
    multiplier: int = Field(default=1, ge=0, le=3)
    is_captain: bool = False
    is_vice_captain: bool = False

    class Config:
        extra = 'ignore'


class AutomaticSub(BaseModel):
    """Substitution already processed upstream."""

    element_in: int
    element_out: int
    entry: Optional[int] = None
    event: Optional[int] = None

    class Config:
        extra = 'ignore'


class EntryPicks(BaseModel):
    """Picks payload for one manager and gameweek."""

    active_chip: Optional[str] = None
    automatic_subs: list[AutomaticSub] = Field(default_factory=list)
    picks: list[Pick]

    @field_validator('active_chip')
    @classmethod
    def validate_chip(cls, v):
        """Ensure the chip code is one the engine knows."""
        if v not in UPSTREAM_CHIPS:
            raise ValueError(f'Unknown chip: {v}')
        return v

    class Config:
        extra = 'ignore'


class HistoryEvent(BaseModel):
    """One past gameweek in a manager's history."""

    event: int = Field(..., ge=1, le=38)
    points: int

    class Config:
        extra = 'ignore'


class EntryHistory(BaseModel):
    """History payload for one manager."""

    current: list[HistoryEvent] = Field(default_factory=list)

    class Config:
        extra = 'ignore'


class StandingResult(BaseModel):
    """One row of classic league standings."""

    entry: int
    entry_name: str
    player_name: str = ''
    total: int = 0
    rank: Optional[int] = None

    class Config:
        extra = 'ignore'


class StandingsPage(BaseModel):
    """Results list of classic league standings."""

    results: list[StandingResult] = Field(default_factory=list)

    class Config:
        extra = 'ignore'


class LeagueInfo(BaseModel):
    """League header of the standings payload."""

    id: int
    name: str = ''

    class Config:
        extra = 'ignore'


class LeagueStandings(BaseModel):
    """Classic league standings payload."""

    league: LeagueInfo
    standings: StandingsPage

    class Config:
        extra = 'ignore'


class EventStatusEntry(BaseModel):
    """One day of the event-status payload."""

    event: Optional[int] = None

    class Config:
        extra = 'ignore'


class EventStatus(BaseModel):
    """Event-status payload naming the gameweek being processed."""

    status: list[EventStatusEntry] = Field(default_factory=list)

    class Config:
        extra = 'ignore'


class ManagerBundle(BaseModel):
    """Per-manager payloads; either may be missing if its fetch failed.

    Payloads are kept raw here and validated one manager at a time when
    the snapshot is built, so one malformed manager can't reject the rest.
    """

    history: Optional[dict[str, Any]] = None
    picks: Optional[dict[str, Any]] = None

    class Config:
        extra = 'forbid'


class SnapshotBundle(BaseModel):
    """One consistent snapshot of everything fetched for a refresh."""

    gameweek: Optional[int] = Field(None, ge=1, le=38)
    bootstrap: Bootstrap
    fixtures: list[UpstreamFixture]
    live: EventLive = Field(default_factory=EventLive)
    event_status: Optional[EventStatus] = None
    standings: Optional[LeagueStandings] = None
    managers: dict[int, ManagerBundle] = Field(default_factory=dict)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    default_view: str = Field(default='period', pattern=r'^(period|gameweek)$')

    class Config:
        extra = 'forbid'
