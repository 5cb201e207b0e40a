"""Detection of stops whose current day is no longer the closest fit."""

from __future__ import annotations

import logging

from ..geospatial import format_distance, travel_minutes
from .models import OptimizationSuggestion, PlanningParameters
from .scorer import ClusterScore, majority_technician, rank_key, score_days
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


def _cost(score: ClusterScore, radius_m: float) -> float:
    cost = score.proximity_cost_m
    return radius_m if cost is None else cost


def plan_drift(snapshot: Snapshot, params: PlanningParameters | None = None) -> list[OptimizationSuggestion]:
    """Propose single-stop day moves that shorten travel. Never mutates the snapshot."""

    params = params or PlanningParameters()
    if not snapshot.available_days:
        logger.warning("Drift check skipped: no service days available")
        return []

    suggestions: list[OptimizationSuggestion] = []
    for stop, point in snapshot.clusterable:
        current_day = stop.assigned_day
        if current_day is None:
            continue

        days = (current_day, *(day for day in snapshot.available_days if day != current_day))
        scores = score_days(point, days, snapshot.clusterable, params.proximity_radius_m, exclude_stop_id=stop.id)
        current = scores.pop(current_day)
        current_cost = _cost(current, params.proximity_radius_m)

        candidates: list[tuple[ClusterScore, float]] = []
        for score in scores.values():
            if score.nearby_count - current.nearby_count < 1:
                continue
            reduction = current_cost - _cost(score, params.proximity_radius_m)
            if reduction >= params.drift_savings_threshold_m:
                candidates.append((score, reduction))
        if not candidates:
            continue

        target, reduction = min(candidates, key=lambda item: rank_key(item[0]))
        tech = majority_technician(target.tech_frequency, snapshot.technicians)
        if tech is None and snapshot.technicians:
            tech = snapshot.technicians[0]
        if tech is not None:
            tech_id, tech_name = tech.id, tech.display_name
        else:
            known = snapshot.technician(stop.assigned_tech_id)
            tech_id = stop.assigned_tech_id
            tech_name = known.display_name if known else None

        unit = params.distance_unit
        reasoning = (
            f"{stop.client_label} is {format_distance(current_cost, unit)} from its {current_day.value} stops "
            f"({current.nearby_count} nearby) but {format_distance(current_cost - reduction, unit)} from the "
            f"{target.day.value} cluster ({target.nearby_count} nearby)."
        )
        suggestions.append(
            OptimizationSuggestion(
                stop_id=stop.id,
                client_label=stop.client_label,
                current_day=current_day,
                suggested_day=target.day,
                current_tech_id=stop.assigned_tech_id,
                suggested_tech_id=tech_id,
                suggested_tech_name=tech_name,
                reasoning=reasoning,
                estimated_savings_minutes=round(travel_minutes(reduction, params.travel_speed_mph), 1),
            )
        )

    logger.debug("Drift check produced %d suggestion(s)", len(suggestions))
    return suggestions
