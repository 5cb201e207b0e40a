"""Utilities to serialize planning results into API models and CSV artifacts."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import Sequence

from ...models.domain import Stop
from ...schemas.planning import (
    DataQualityModel,
    DriftResponse,
    PlacementResponse,
    ReorgResponse,
)
from ..planning.models import OptimizationSuggestion, PlacementSuggestion, PlanningResult, ReorgPlan


def _warnings(result: PlanningResult) -> list[DataQualityModel]:
    return [DataQualityModel(**issue.to_dict()) for issue in result.warnings]


def placement_response(result: PlanningResult[PlacementSuggestion]) -> PlacementResponse:
    return PlacementResponse(
        source=result.source,
        warnings=_warnings(result),
        suggestion=asdict(result.payload),
    )


def drift_response(result: PlanningResult[list[OptimizationSuggestion]]) -> DriftResponse:
    suggestions = result.payload
    minutes = sum(item.estimated_savings_minutes for item in suggestions)
    noun = "opportunity" if len(suggestions) == 1 else "opportunities"
    return DriftResponse(
        source=result.source,
        warnings=_warnings(result),
        suggestions=[asdict(item) for item in suggestions],
        summary=f"Found {len(suggestions)} optimization {noun} saving about {minutes:.1f} minutes.",
    )


def reorg_response(result: PlanningResult[ReorgPlan]) -> ReorgResponse:
    plan = result.payload
    return ReorgResponse(
        source=result.source,
        warnings=_warnings(result),
        plan={
            "assignments": [asdict(item) for item in plan.assignments],
            "day_stats": {day: asdict(stats) for day, stats in plan.day_stats.items()},
            "summary": plan.summary,
            "estimated_savings_minutes": plan.estimated_savings_minutes,
        },
    )


def drift_to_csv(suggestions: Sequence[OptimizationSuggestion]) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "stop_id",
        "client_label",
        "current_day",
        "suggested_day",
        "current_tech_id",
        "suggested_tech_id",
        "estimated_savings_minutes",
        "reasoning",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for item in suggestions:
        writer.writerow(
            {
                "stop_id": item.stop_id,
                "client_label": item.client_label,
                "current_day": item.current_day.value,
                "suggested_day": item.suggested_day.value,
                "current_tech_id": item.current_tech_id or "",
                "suggested_tech_id": item.suggested_tech_id or "",
                "estimated_savings_minutes": item.estimated_savings_minutes,
                "reasoning": item.reasoning,
            }
        )
    return buffer.getvalue()


def reorg_to_csv(plan: ReorgPlan, stops: Sequence[Stop]) -> str:
    buffer = io.StringIO()
    fieldnames = ["stop_id", "client_label", "current_day", "new_day", "current_tech_id", "new_tech_id", "new_tech_name"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    current = {stop.id: stop for stop in stops}
    for assignment in plan.assignments:
        stop = current.get(assignment.stop_id)
        writer.writerow(
            {
                "stop_id": assignment.stop_id,
                "client_label": assignment.client_label,
                "current_day": stop.assigned_day.value if stop and stop.assigned_day else "",
                "new_day": assignment.new_day.value,
                "current_tech_id": (stop.assigned_tech_id if stop else None) or "",
                "new_tech_id": assignment.new_tech_id,
                "new_tech_name": assignment.new_tech_name,
            }
        )
    return buffer.getvalue()
