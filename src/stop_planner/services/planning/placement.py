"""Best day and technician for a new stop."""

from __future__ import annotations

from ...errors import ConfigurationError
from ...models.domain import Confidence, GeoPoint, coordinate_problem
from ..geospatial import format_distance
from .models import NearbyStop, PlanningParameters, PlacementSuggestion
from .scorer import ClusterScore, majority_technician, rank_key, score_days
from .snapshot import Snapshot


def confidence_for(nearby_count: int) -> Confidence:
    if nearby_count >= 3:
        return Confidence.HIGH
    if nearby_count >= 1:
        return Confidence.MEDIUM
    return Confidence.LOW


def _reasoning(score: ClusterScore, params: PlanningParameters) -> str:
    noun = "stop" if score.nearby_count == 1 else "stops"
    radius = format_distance(params.proximity_radius_m, params.distance_unit)
    return (
        f"Based on proximity analysis, {score.day.value} has {score.nearby_count} "
        f"{noun} within {radius} of this location."
    )


def plan_placement(
    location: GeoPoint,
    snapshot: Snapshot,
    params: PlanningParameters | None = None,
) -> PlacementSuggestion:
    params = params or PlanningParameters()
    snapshot.require_days_and_technicians()
    problem = coordinate_problem(location.lat, location.lng)
    if problem is not None:
        raise ConfigurationError(f"new location is unusable: {problem}")

    scores = score_days(location, snapshot.available_days, snapshot.clusterable, params.proximity_radius_m)
    best = min(scores.values(), key=rank_key)

    tech = majority_technician(best.tech_frequency, snapshot.technicians) or snapshot.technicians[0]

    nearby = tuple(
        NearbyStop(
            stop_id=stop.id,
            client_label=stop.client_label,
            address=stop.address,
            distance_m=distance,
            distance=format_distance(distance, params.distance_unit),
        )
        for stop, distance in best.ranked[: params.max_nearby_stops]
    )

    return PlacementSuggestion(
        day=best.day,
        tech_id=tech.id,
        tech_name=tech.display_name,
        reasoning=_reasoning(best, params),
        nearby_stops=nearby,
        confidence=confidence_for(best.nearby_count),
    )
