"""Period aggregation and live ranking.

Period points are the confirmed points of earlier gameweeks in the period
plus the live points of the current gameweek when it belongs to the period.

Ranking rules:
    - Current rank: period points, then gameweek points, then career total
    - Previous rank: period points before the current gameweek, then career total
    - Remaining ties keep the standings order
    - Rank delta = previous rank - current rank (positive means moved up)
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Sequence

import polars as pl

from .constants import RankingView
from .models import ManagerEntry, PeriodAggregate, ScoredRoster

logger = logging.getLogger('fpl_live.standings')

HISTORY_SCHEMA = {'manager_id': pl.Int64, 'event': pl.Int64, 'points': pl.Int64}


def history_frame(history: Mapping[int, Mapping[int, int]]) -> pl.DataFrame:
    """Flatten per-manager gameweek history into a frame."""
    rows = [
        {'manager_id': manager_id, 'event': event, 'points': points}
        for manager_id, events in history.items()
        for event, points in events.items()
    ]
    return pl.DataFrame(rows, schema=HISTORY_SCHEMA)


def prior_period_points(
    history: Mapping[int, Mapping[int, int]],
    period_gameweeks: Iterable[int],
    current_gameweek: int,
) -> Dict[int, int]:
    """
    Confirmed points per manager for the period's gameweeks before the live one.

    Args:
        history: Manager id -> {gameweek: points}
        period_gameweeks: Gameweeks in the selected period
        current_gameweek: The live gameweek, always excluded

    Returns:
        Dict mapping manager id to points (managers with no history omitted)
    """
    events = sorted(set(period_gameweeks) - {current_gameweek})
    if not events or not history:
        return {}

    totals = (
        history_frame(history)
        .filter(pl.col('event').is_in(events))
        .group_by('manager_id')
        .agg(pl.col('points').sum())
    )
    return dict(zip(totals['manager_id'].to_list(), totals['points'].to_list()))


def build_aggregates(
    managers: Sequence[ManagerEntry],
    scored: Mapping[int, ScoredRoster],
    history: Mapping[int, Mapping[int, int]],
    period_gameweeks: Iterable[int],
    current_gameweek: int,
) -> List[PeriodAggregate]:
    """Unranked period totals in standings order."""
    period = set(period_gameweeks)
    prior = prior_period_points(history, period, current_gameweek)
    current_in_period = current_gameweek in period

    aggregates = []
    for manager in managers:
        roster = scored.get(manager.id)
        gameweek_points = roster.live_points if roster else 0
        before = prior.get(manager.id, 0)
        aggregates.append(
            PeriodAggregate(
                manager_id=manager.id,
                entry_name=manager.entry_name,
                prior_period_points=before,
                period_points=before + gameweek_points if current_in_period else before,
                gameweek_points=gameweek_points,
                total=manager.total,
            )
        )
    return aggregates


def rank_aggregates(aggregates: Sequence[PeriodAggregate]) -> List[PeriodAggregate]:
    """
    Attach current rank, previous rank and rank delta.

    Args:
        aggregates: Unranked aggregates in standings order

    Returns:
        Aggregates in the same order with rank fields filled in
    """
    current_order = sorted(
        aggregates,
        key=lambda a: (a.period_points, a.gameweek_points, a.total),
        reverse=True,
    )
    previous_order = sorted(
        aggregates,
        key=lambda a: (a.prior_period_points, a.total),
        reverse=True,
    )
    current_rank = {a.manager_id: rank for rank, a in enumerate(current_order, 1)}
    previous_rank = {a.manager_id: rank for rank, a in enumerate(previous_order, 1)}

    ranked = []
    for a in aggregates:
        now = current_rank[a.manager_id]
        before = previous_rank[a.manager_id]
        ranked.append(replace(a, current_rank=now, previous_rank=before, rank_delta=before - now))
    return ranked


def sort_standings(
    aggregates: Sequence[PeriodAggregate], view: RankingView = RankingView.PERIOD
) -> List[PeriodAggregate]:
    """Order aggregates for display by period or gameweek points."""
    field = 'gameweek_points' if view is RankingView.GAMEWEEK else 'period_points'
    return sorted(
        aggregates,
        key=lambda a: (getattr(a, field), a.gameweek_points, a.total),
        reverse=True,
    )


def compute_standings(
    managers: Sequence[ManagerEntry],
    scored: Mapping[int, ScoredRoster],
    history: Mapping[int, Mapping[int, int]],
    period_gameweeks: Iterable[int],
    current_gameweek: int,
    view: RankingView = RankingView.PERIOD,
) -> List[PeriodAggregate]:
    """
    Build the live leaderboard.

    Args:
        managers: League entries in standings order
        scored: ScoredRoster per manager id
        history: Manager id -> {gameweek: confirmed points}
        period_gameweeks: Gameweeks in the selected period
        current_gameweek: The live gameweek
        view: Primary sort field for display

    Returns:
        Ranked PeriodAggregate list sorted for display (empty if no managers)
    """
    if not managers:
        return []

    aggregates = build_aggregates(managers, scored, history, period_gameweeks, current_gameweek)
    ranked = rank_aggregates(aggregates)
    logger.debug(f'Ranked {len(ranked)} managers for gameweek {current_gameweek} ({view.value} view)')
    return sort_standings(ranked, view)
