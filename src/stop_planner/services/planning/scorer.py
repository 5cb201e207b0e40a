"""Proximity scoring of a location against one service day's stops."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ...models.domain import GeoPoint, ServiceDay, Stop, Technician
from ..geospatial import distance_m


@dataclass(slots=True)
class ClusterScore:
    day: ServiceDay
    nearby_count: int = 0
    total_distance_m: float = 0.0
    tech_frequency: dict[str, int] = field(default_factory=dict)
    nearest_distance_m: Optional[float] = None
    ranked: list[tuple[Stop, float]] = field(default_factory=list)

    @property
    def avg_distance_m(self) -> Optional[float]:
        if not self.nearby_count:
            return None
        return self.total_distance_m / self.nearby_count

    @property
    def proximity_cost_m(self) -> Optional[float]:
        """Average nearby distance, else distance to the nearest same-day stop."""
        if self.nearby_count:
            return self.avg_distance_m
        return self.nearest_distance_m


def score_day(
    point: GeoPoint,
    day: ServiceDay,
    stops: Sequence[tuple[Stop, GeoPoint]],
    radius_m: float,
    *,
    exclude_stop_id: str | None = None,
) -> ClusterScore:
    """Score how well ``point`` fits among the clusterable stops assigned to ``day``."""

    score = ClusterScore(day=day)
    for stop, stop_point in stops:
        if stop.assigned_day != day or stop.id == exclude_stop_id:
            continue
        score.ranked.append((stop, distance_m(point, stop_point)))

    # sort is stable, so equal distances keep input order
    score.ranked.sort(key=lambda item: item[1])
    if score.ranked:
        score.nearest_distance_m = score.ranked[0][1]

    for stop, distance in score.ranked:
        if distance > radius_m:
            break
        score.nearby_count += 1
        score.total_distance_m += distance
        if stop.assigned_tech_id:
            score.tech_frequency[stop.assigned_tech_id] = score.tech_frequency.get(stop.assigned_tech_id, 0) + 1
    return score


def score_days(
    point: GeoPoint,
    days: Sequence[ServiceDay],
    stops: Sequence[tuple[Stop, GeoPoint]],
    radius_m: float,
    *,
    exclude_stop_id: str | None = None,
) -> dict[ServiceDay, ClusterScore]:
    return {
        day: score_day(point, day, stops, radius_m, exclude_stop_id=exclude_stop_id)
        for day in days
    }


def rank_key(score: ClusterScore, *extra: float) -> tuple:
    """Sort key: more nearby stops, then shorter average distance, then ``extra``, then day order."""

    avg = score.avg_distance_m
    return (-score.nearby_count, float("inf") if avg is None else avg, *extra, score.day.order)


def majority_technician(
    tech_frequency: dict[str, int],
    technicians: Sequence[Technician],
) -> Optional[Technician]:
    """Technician with the most stops; ties go to the earlier technician in the list."""

    best: Optional[Technician] = None
    best_count = 0
    for tech in technicians:
        count = tech_frequency.get(tech.id, 0)
        if count > best_count:
            best, best_count = tech, count
    return best
