"""Per-fixture event breakdown: goals, assists, cards and bonus."""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .models import BonusAllocation, Fixture, LiveStat, Player, Team


@dataclass(frozen=True)
class FixtureEvent:
    """One player's contribution of a given kind within a fixture."""
    player_id: int
    name: str
    team_short_name: str
    team_code: int
    count: int
    card: Optional[str] = None  # 'yellow' or 'red' for cards


@dataclass
class FixtureEvents:
    """Everything notable that happened in a fixture."""
    fixture_id: int
    goals: List[FixtureEvent] = field(default_factory=list)
    assists: List[FixtureEvent] = field(default_factory=list)
    cards: List[FixtureEvent] = field(default_factory=list)
    bonus: List[FixtureEvent] = field(default_factory=list)
    bonus_confirmed: bool = False


def fixture_events(
    fixture: Fixture,
    players: Mapping[int, Player],
    teams: Mapping[int, Team],
    live_stats: Mapping[int, LiveStat],
    allocation: Optional[BonusAllocation] = None,
) -> FixtureEvents:
    """
    Collect goals, assists, cards and bonus for a fixture.

    Args:
        fixture: Fixture to describe
        players: Player reference data by id
        teams: Team reference data by id
        live_stats: Live stats by player id
        allocation: Bonus allocation for this fixture, if any

    Returns:
        FixtureEvents with goals/assists by count (highest first), yellow
        cards before red, and bonus highest first
    """
    events = FixtureEvents(fixture_id=fixture.id)
    if not fixture.status.has_started:
        return events

    for player_id, stats in live_stats.items():
        player = players.get(player_id)
        if player is None or not fixture.involves(player.team):
            continue
        team = teams.get(player.team)

        def event(count: int, card: Optional[str] = None) -> FixtureEvent:
            return FixtureEvent(
                player_id=player_id,
                name=player.web_name,
                team_short_name=team.short_name if team else '???',
                team_code=team.code if team else 0,
                count=count,
                card=card,
            )

        if stats.goals_scored > 0:
            events.goals.append(event(stats.goals_scored))
        if stats.assists > 0:
            events.assists.append(event(stats.assists))
        if stats.yellow_cards > 0:
            events.cards.append(event(stats.yellow_cards, 'yellow'))
        if stats.red_cards > 0:
            events.cards.append(event(stats.red_cards, 'red'))
        if allocation is not None and allocation.bonus_for(player_id) > 0:
            events.bonus.append(event(allocation.bonus_for(player_id)))

    events.bonus_confirmed = allocation.official if allocation is not None else False

    events.goals.sort(key=lambda e: e.count, reverse=True)
    events.assists.sort(key=lambda e: e.count, reverse=True)
    events.cards.sort(key=lambda e: e.card == 'red')
    events.bonus.sort(key=lambda e: e.count, reverse=True)

    return events
