"""Read-only lookups over one gameweek snapshot."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .constants import FixtureStatus
from .models import (
    Fixture,
    LiveStat,
    ManagerEntry,
    Player,
    RosterSnapshot,
    Team,
)


@dataclass(frozen=True)
class LeagueSnapshot:
    """Everything the engine needs for one refresh.

    ``rosters`` maps manager id to picks, or None when the picks could not
    be fetched. ``history`` maps manager id to confirmed points per gameweek.
    """
    gameweek: int
    players: Mapping[int, Player]
    teams: Mapping[int, Team]
    fixtures: Tuple[Fixture, ...]
    live_stats: Mapping[int, LiveStat]
    managers: Tuple[ManagerEntry, ...] = ()
    rosters: Mapping[int, Optional[RosterSnapshot]] = field(default_factory=dict)
    history: Mapping[int, Mapping[int, int]] = field(default_factory=dict)


class GameweekData:
    """Lookups of players, fixtures and live stats for the active gameweek.

    Anything missing from the snapshot reads as zero minutes and zero points.
    """

    def __init__(
        self,
        gameweek: int,
        players: Mapping[int, Player],
        fixtures: Tuple[Fixture, ...],
        live_stats: Mapping[int, LiveStat],
        teams: Optional[Mapping[int, Team]] = None,
    ):
        self.gameweek = gameweek
        self.players = players
        self.teams = teams or {}
        self.fixtures = tuple(f for f in fixtures if f.gameweek == gameweek)
        self.live_stats = live_stats
        self._team_fixtures: Dict[int, List[Fixture]] = {}
        for fixture in self.fixtures:
            self._team_fixtures.setdefault(fixture.home_team, []).append(fixture)
            self._team_fixtures.setdefault(fixture.away_team, []).append(fixture)

    @classmethod
    def from_snapshot(cls, snapshot: LeagueSnapshot) -> 'GameweekData':
        return cls(
            snapshot.gameweek,
            snapshot.players,
            snapshot.fixtures,
            snapshot.live_stats,
            snapshot.teams,
        )

    def player(self, player_id: int) -> Optional[Player]:
        return self.players.get(player_id)

    def live_stat(self, player_id: int) -> LiveStat:
        stat = self.live_stats.get(player_id)
        if stat is None:
            return LiveStat(player_id=player_id)
        return stat

    def minutes(self, player_id: int) -> int:
        return self.live_stat(player_id).minutes

    def team_fixtures(self, team_id: int) -> List[Fixture]:
        return self._team_fixtures.get(team_id, [])

    def fixture_status(self, player_id: int) -> FixtureStatus:
        """
        Combined status of the player's fixtures this gameweek.

        A player whose team has no fixture (blank gameweek), or who is not in
        the reference data, cannot play and reads as finished. In a double
        gameweek the player is only finished once both fixtures are.

        Args:
            player_id: Player to look up

        Returns:
            FixtureStatus for the player's gameweek as a whole
        """
        player = self.player(player_id)
        if player is None:
            return FixtureStatus.FINISHED

        fixtures = self.team_fixtures(player.team)
        if not fixtures:
            return FixtureStatus.FINISHED

        statuses = [f.status for f in fixtures]
        if all(s.is_finished for s in statuses):
            if all(s is FixtureStatus.FINISHED for s in statuses):
                return FixtureStatus.FINISHED
            return FixtureStatus.FINISHED_PROVISIONAL
        if any(s.has_started for s in statuses):
            return FixtureStatus.LIVE
        return FixtureStatus.NOT_STARTED
