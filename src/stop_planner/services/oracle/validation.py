"""Structural validation of oracle answers against the planning snapshot.

Every identifier in an answer must refer to something in the snapshot and
every day must be an available service day. Names, current days and
distances are re-derived from the snapshot instead of being taken from the
answer.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...errors import OracleValidationError
from ...models.domain import Confidence, GeoPoint, ServiceDay, Technician
from ...schemas.oracle import OracleDrift, OraclePlacement, OracleReorg
from ..geospatial import distance_m, format_distance
from ..planning.models import (
    DayStats,
    NearbyStop,
    OptimizationSuggestion,
    PlacementSuggestion,
    PlanningParameters,
    ReorgAssignment,
    ReorgPlan,
)
from ..planning.snapshot import Snapshot

ModelT = TypeVar("ModelT", bound=BaseModel)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json(text: str) -> dict[str, Any]:
    """Return the outermost JSON object embedded in free text."""

    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise OracleValidationError("no JSON object in oracle response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise OracleValidationError(f"oracle response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise OracleValidationError("oracle response JSON is not an object")
    return data


def _parse(model: Type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise OracleValidationError(f"oracle response does not match {model.__name__}: {exc.error_count()} error(s)") from exc


def _day(value: Optional[str], snapshot: Snapshot, field_name: str) -> ServiceDay:
    try:
        day = ServiceDay.parse(value or "")
    except ValueError as exc:
        raise OracleValidationError(f"{field_name} '{value}' is not a service day") from exc
    if day not in snapshot.available_days:
        raise OracleValidationError(f"{field_name} '{day.value}' is not an available day")
    return day


def _technician(tech_id: str, snapshot: Snapshot, field_name: str) -> Technician:
    tech = snapshot.technician(tech_id)
    if tech is None:
        raise OracleValidationError(f"{field_name} '{tech_id}' is not a known technician")
    return tech


def _known_stop(stop_id: str, snapshot: Snapshot):
    stop = snapshot.stop(stop_id)
    if stop is None:
        raise OracleValidationError(f"stop id '{stop_id}' is not in the snapshot")
    return stop


def validate_placement(
    data: dict[str, Any],
    snapshot: Snapshot,
    location: GeoPoint,
    params: PlanningParameters,
) -> PlacementSuggestion:
    parsed = _parse(OraclePlacement, data)
    day = _day(parsed.day, snapshot, "day")
    tech = _technician(parsed.tech_id, snapshot, "techId")
    try:
        confidence = Confidence(parsed.confidence.strip().upper())
    except ValueError as exc:
        raise OracleValidationError(f"confidence '{parsed.confidence}' is not HIGH, MEDIUM or LOW") from exc
    if len(parsed.nearby_stops) > params.max_nearby_stops:
        raise OracleValidationError(f"{len(parsed.nearby_stops)} nearby stops exceed the limit of {params.max_nearby_stops}")

    nearby: list[NearbyStop] = []
    for item in parsed.nearby_stops:
        stop = _known_stop(item.stop_id, snapshot)
        point = snapshot.point(stop.id)
        if point is None:
            raise OracleValidationError(f"nearby stop '{stop.id}' has no usable coordinates")
        meters = distance_m(location, point)
        nearby.append(
            NearbyStop(
                stop_id=stop.id,
                client_label=stop.client_label,
                address=stop.address,
                distance_m=meters,
                distance=format_distance(meters, params.distance_unit),
            )
        )
    nearby.sort(key=lambda item: item.distance_m)

    return PlacementSuggestion(
        day=day,
        tech_id=tech.id,
        tech_name=tech.display_name,
        reasoning=parsed.reasoning.strip(),
        nearby_stops=tuple(nearby),
        confidence=confidence,
    )


def validate_drift(data: dict[str, Any], snapshot: Snapshot) -> list[OptimizationSuggestion]:
    parsed = _parse(OracleDrift, data)
    suggestions: list[OptimizationSuggestion] = []
    seen: set[str] = set()
    for item in parsed.suggestions:
        stop = _known_stop(item.stop_id, snapshot)
        if stop.id in seen:
            raise OracleValidationError(f"stop '{stop.id}' suggested more than once")
        seen.add(stop.id)
        if stop.assigned_day is None:
            raise OracleValidationError(f"stop '{stop.id}' has no current day to move from")
        if snapshot.point(stop.id) is None:
            raise OracleValidationError(f"stop '{stop.id}' has no usable coordinates")
        if item.current_day is not None and stop.assigned_day.value != item.current_day.strip().upper():
            raise OracleValidationError(f"currentDay '{item.current_day}' does not match stop '{stop.id}'")
        suggested_day = _day(item.suggested_day, snapshot, "suggestedDay")
        if suggested_day == stop.assigned_day:
            raise OracleValidationError(f"stop '{stop.id}' suggested onto its current day")
        tech = _technician(item.suggested_tech_id, snapshot, "suggestedTechId")
        suggestions.append(
            OptimizationSuggestion(
                stop_id=stop.id,
                client_label=stop.client_label,
                current_day=stop.assigned_day,
                suggested_day=suggested_day,
                current_tech_id=stop.assigned_tech_id,
                suggested_tech_id=tech.id,
                suggested_tech_name=tech.display_name,
                reasoning=item.reasoning.strip(),
                estimated_savings_minutes=round(item.estimated_savings_minutes, 1),
            )
        )
    return suggestions


def validate_reorg(data: dict[str, Any], snapshot: Snapshot) -> ReorgPlan:
    parsed = _parse(OracleReorg, data)
    by_stop: dict[str, ReorgAssignment] = {}
    for item in parsed.assignments:
        stop = _known_stop(item.stop_id, snapshot)
        if stop.id in by_stop:
            raise OracleValidationError(f"stop '{stop.id}' assigned more than once")
        day = _day(item.new_day, snapshot, "newDay")
        tech = _technician(item.new_tech_id, snapshot, "newTechId")
        by_stop[stop.id] = ReorgAssignment(
            stop_id=stop.id,
            client_label=stop.client_label,
            new_day=day,
            new_tech_id=tech.id,
            new_tech_name=tech.display_name,
        )
    missing = [stop.id for stop in snapshot.stops if stop.id not in by_stop]
    if missing:
        raise OracleValidationError(f"{len(missing)} stop(s) missing from reorganization, e.g. '{missing[0]}'")

    assignments = tuple(by_stop[stop.id] for stop in snapshot.stops)
    day_stats: dict[ServiceDay, DayStats] = {}
    for day in snapshot.available_days:
        on_day = [assignment for assignment in assignments if assignment.new_day == day]
        if not on_day:
            continue
        tech_counts: dict[str, int] = {}
        for assignment in on_day:
            tech_counts[assignment.new_tech_id] = tech_counts.get(assignment.new_tech_id, 0) + 1
        lead = max(tech_counts, key=tech_counts.__getitem__)
        lead_tech = _technician(lead, snapshot, "newTechId")
        day_stats[day] = DayStats(stop_count=len(on_day), tech_id=lead_tech.id, tech_name=lead_tech.display_name)

    return ReorgPlan(
        assignments=assignments,
        day_stats=day_stats,
        summary=parsed.summary.strip(),
        estimated_savings_minutes=round(parsed.estimated_savings_minutes, 1),
    )
