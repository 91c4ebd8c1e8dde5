"""Gameweek to calendar month mapping and current gameweek detection.

A gameweek belongs to the month of its earliest kickoff, so a gameweek that
starts on the last weekend of a month counts toward that month even if some
of its fixtures are played in the next one.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from .models import Fixture
from .schemas import UpstreamEvent


def gameweek_start_dates(fixtures: Iterable[Fixture]) -> Dict[int, datetime]:
    """Earliest kickoff per gameweek (fixtures without a gameweek or kickoff are ignored)."""
    starts: Dict[int, datetime] = {}
    for fixture in fixtures:
        if fixture.gameweek is None or fixture.kickoff_time is None:
            continue
        earliest = starts.get(fixture.gameweek)
        if earliest is None or fixture.kickoff_time < earliest:
            starts[fixture.gameweek] = fixture.kickoff_time
    return starts


def month_key(moment: date) -> str:
    """Month key in YYYY-MM form."""
    return f'{moment.year:04d}-{moment.month:02d}'


def available_months(fixtures: Iterable[Fixture]) -> List[str]:
    """Months with at least one gameweek starting in them, oldest first."""
    return sorted({month_key(d) for d in gameweek_start_dates(fixtures).values()})


def gameweeks_for_month(fixtures: Iterable[Fixture], month: str) -> List[int]:
    """
    Gameweeks starting in a month.

    Args:
        fixtures: All fixtures of the season
        month: Month key (e.g., '2025-01')

    Returns:
        Sorted list of gameweek numbers
    """
    return sorted(
        gw for gw, start in gameweek_start_dates(fixtures).items() if month_key(start) == month
    )


def default_month(fixtures: Iterable[Fixture], today: date) -> Optional[str]:
    """Today's month if it has gameweeks, else the latest month that does."""
    months = available_months(fixtures)
    if not months:
        return None
    current = month_key(today)
    return current if current in months else months[-1]


def current_gameweek(events: Iterable[UpstreamEvent], now: datetime) -> int:
    """
    Find the gameweek being played.

    Args:
        events: Upstream gameweek events
        now: Reference time (timezone-aware if deadlines are)

    Returns:
        The event flagged current, else the next event whose deadline is
        still ahead, else 1
    """
    events = list(events)
    for event in events:
        if event.is_current:
            return event.id
    for event in events:
        if event.is_next and event.deadline_time is not None and event.deadline_time > now:
            return event.id
    return 1
