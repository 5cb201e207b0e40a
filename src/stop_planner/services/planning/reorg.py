"""Global re-clustering of all stops across the available days.

The search is a bounded greedy local search. Every pass evaluates moving each
stop to every other non-empty day and applies the single move that lowers a
stop's isolation score (average distance to its same-day cluster-mates) the
most. Moves that keep day loads within the balance tolerance are preferred.
No move may push a day above ``ceil(mean * (1 + tolerance))`` stops. When a day
is already above that cap and no balanced improving move exists, one stop is
shifted from the heaviest day to the lightest, possibly empty, day. An
unbalanced improving move is taken only when neither of those applies.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ...models.domain import GeoPoint, ServiceDay, Stop, Technician
from ..geospatial import distance_m, travel_minutes
from .models import DayStats, PlanningParameters, ReorgAssignment, ReorgPlan
from .scorer import rank_key, score_days
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

_EPSILON = 1e-6


@dataclass(slots=True)
class _Move:
    index: int
    source: ServiceDay
    target: ServiceDay
    reduction_m: float

    def key(self) -> tuple:
        return (-self.reduction_m, self.index, self.target.order)


class _Clusters:
    """Working day assignment of the clusterable stops with cached distance sums."""

    def __init__(self, points: Sequence[GeoPoint], days: Sequence[ServiceDay]) -> None:
        self.days = tuple(days)
        self.matrix = [[distance_m(a, b) for b in points] for a in points]
        self.day_of: list[Optional[ServiceDay]] = [None] * len(points)
        self.sizes = {day: 0 for day in self.days}
        self.sums = [{day: 0.0 for day in self.days} for _ in points]

    def place(self, index: int, day: ServiceDay) -> None:
        previous = self.day_of[index]
        if previous is not None:
            self.sizes[previous] -= 1
            for row, sums in zip(self.matrix, self.sums):
                sums[previous] -= row[index]
        self.day_of[index] = day
        self.sizes[day] += 1
        for row, sums in zip(self.matrix, self.sums):
            sums[day] += row[index]

    def isolation(self, index: int, day: ServiceDay) -> Optional[float]:
        mates = self.sizes[day] - (1 if self.day_of[index] == day else 0)
        if mates <= 0:
            return 0.0 if self.day_of[index] == day else None
        return self.sums[index][day] / mates

    def total_isolation(self) -> float:
        return sum(self.isolation(index, day) or 0.0 for index, day in enumerate(self.day_of) if day is not None)


def _bounds(counts: dict[ServiceDay, int], tolerance: float) -> tuple[float, float, int]:
    """Balance band around the mean load, plus the hard per-day cap ``ceil(upper)``."""
    mean = sum(counts.values()) / len(counts)
    upper = mean * (1 + tolerance)
    lower = mean * (1 - tolerance)
    return lower, upper, math.ceil(upper - _EPSILON)


def _is_balanced(counts: dict[ServiceDay, int], source: ServiceDay, target: ServiceDay, tolerance: float) -> bool:
    lower, upper, _ = _bounds(counts, tolerance)
    return counts[target] + 1 <= upper + _EPSILON and counts[source] - 1 >= lower - _EPSILON


def _rebalance_move(clusters: _Clusters, counts: dict[ServiceDay, int], cap: int) -> Optional[_Move]:
    """Move one stop off the heaviest day above ``cap`` onto the lightest day, which may be empty."""
    overloaded = sorted((day for day in clusters.days if counts[day] > cap), key=lambda day: (-counts[day], day.order))
    if not overloaded:
        return None
    target = _least_loaded(counts)
    for source in overloaded:
        best: Optional[_Move] = None
        for index, day in enumerate(clusters.day_of):
            if day != source:
                continue
            candidate = clusters.isolation(index, target)
            reduction = clusters.isolation(index, source) - (candidate or 0.0)
            move = _Move(index=index, source=source, target=target, reduction_m=reduction)
            if best is None or move.key() < best.key():
                best = move
        if best is not None:
            return best
    return None


def _best_move(clusters: _Clusters, counts: dict[ServiceDay, int], tolerance: float) -> Optional[_Move]:
    _, _, cap = _bounds(counts, tolerance)
    best_balanced: Optional[_Move] = None
    best_any: Optional[_Move] = None
    for index, source in enumerate(clusters.day_of):
        current = clusters.isolation(index, source)
        for target in clusters.days:
            if target == source or clusters.sizes[target] == 0 or counts[target] + 1 > cap:
                continue
            candidate = clusters.isolation(index, target)
            if candidate is None or current - candidate <= _EPSILON:
                continue
            move = _Move(index=index, source=source, target=target, reduction_m=current - candidate)
            if best_any is None or move.key() < best_any.key():
                best_any = move
            if _is_balanced(counts, source, target, tolerance):
                if best_balanced is None or move.key() < best_balanced.key():
                    best_balanced = move
    if best_balanced is not None:
        return best_balanced
    return _rebalance_move(clusters, counts, cap) or best_any


def _least_loaded(counts: dict[ServiceDay, int]) -> ServiceDay:
    return min(counts, key=lambda day: (counts[day], day.order))


def _day_technicians(
    days: Sequence[ServiceDay],
    stops_by_day: dict[ServiceDay, list[Stop]],
    technicians: Sequence[Technician],
) -> dict[ServiceDay, Technician]:
    known = {tech.id: tech for tech in technicians}
    rotation = sorted(technicians, key=lambda tech: tech.id)
    chosen: dict[ServiceDay, Technician] = {}
    for position, day in enumerate(days):
        frequency: dict[str, int] = {}
        for stop in stops_by_day[day]:
            if stop.assigned_tech_id in known:
                frequency[stop.assigned_tech_id] = frequency.get(stop.assigned_tech_id, 0) + 1
        top = max(frequency.values(), default=0)
        leaders = [tech_id for tech_id, count in frequency.items() if count == top]
        if top > 0 and len(leaders) == 1:
            chosen[day] = known[leaders[0]]
        else:
            chosen[day] = rotation[position % len(rotation)]
    return chosen


def plan_reorg(snapshot: Snapshot, params: PlanningParameters | None = None) -> ReorgPlan:
    params = params or PlanningParameters()
    snapshot.require_days_and_technicians()

    days = snapshot.available_days
    counts = {day: 0 for day in days}
    final_day: dict[str, ServiceDay] = {}

    points = [point for _, point in snapshot.clusterable]
    members = [stop for stop, _ in snapshot.clusterable]
    clusters = _Clusters(points, days)
    clusterable_index = {stop.id: index for index, stop in enumerate(members)}

    # Keep every stop that already sits on an available day.
    for stop in snapshot.stops:
        if stop.assigned_day in counts:
            counts[stop.assigned_day] += 1
            final_day[stop.id] = stop.assigned_day
            if stop.id in clusterable_index:
                clusters.place(clusterable_index[stop.id], stop.assigned_day)

    # Seed unassigned or blacked-out stops where they fit best so far.
    for index, stop in enumerate(members):
        if stop.id in final_day:
            continue
        placed = [
            (replace(other, assigned_day=day), points[other_index])
            for other_index, (other, day) in enumerate(zip(members, clusters.day_of))
            if day is not None
        ]
        scores = score_days(points[index], days, placed, params.proximity_radius_m)
        best = min(scores.values(), key=lambda score: rank_key(score, counts[score.day]))
        counts[best.day] += 1
        final_day[stop.id] = best.day
        clusters.place(index, best.day)

    # Stops without usable coordinates only contribute to the day loads.
    for stop in snapshot.stops:
        if stop.id not in final_day:
            day = _least_loaded(counts)
            counts[day] += 1
            final_day[stop.id] = day

    before = clusters.total_isolation()
    moves = 0
    for _ in range(params.max_passes):
        move = _best_move(clusters, counts, params.balance_tolerance)
        if move is None:
            break
        clusters.place(move.index, move.target)
        counts[move.source] -= 1
        counts[move.target] += 1
        final_day[members[move.index].id] = move.target
        moves += 1
        logger.debug(
            "Reorg pass %d: moved %s %s -> %s (%.0f m)",
            moves,
            members[move.index].id,
            move.source.value,
            move.target.value,
            move.reduction_m,
        )
    after = clusters.total_isolation()
    limit_hit = moves == params.max_passes and _best_move(clusters, counts, params.balance_tolerance) is not None

    stops_by_day: dict[ServiceDay, list[Stop]] = {day: [] for day in days}
    for stop in snapshot.stops:
        stops_by_day[final_day[stop.id]].append(stop)
    techs = _day_technicians(days, stops_by_day, snapshot.technicians)

    assignments = tuple(
        ReorgAssignment(
            stop_id=stop.id,
            client_label=stop.client_label,
            new_day=final_day[stop.id],
            new_tech_id=techs[final_day[stop.id]].id,
            new_tech_name=techs[final_day[stop.id]].display_name,
        )
        for stop in snapshot.stops
    )
    day_stats = {
        day: DayStats(stop_count=len(stops_by_day[day]), tech_id=techs[day].id, tech_name=techs[day].display_name)
        for day in days
    }
    savings = round(travel_minutes(max(0.0, before - after), params.travel_speed_mph), 1)
    changed = sum(1 for stop in snapshot.stops if stop.assigned_day != final_day[stop.id])
    active_days = sum(1 for stats in day_stats.values() if stats.stop_count)
    summary = (
        f"Reorganized {len(snapshot.stops)} stops across {active_days} day(s); "
        f"{changed} stop(s) change day after {moves} local-search move(s). "
        f"Estimated {savings:.1f} minutes saved."
    )
    if limit_hit:
        summary += f" Stopped at the {params.max_passes}-pass limit; running again may move more stops."
    logger.info(
        "Reorg finished with %d move(s) (max passes %d%s)",
        moves,
        params.max_passes,
        ", limit reached" if limit_hit else "",
    )

    return ReorgPlan(
        assignments=assignments,
        day_stats=day_stats,
        summary=summary,
        estimated_savings_minutes=savings,
    )
