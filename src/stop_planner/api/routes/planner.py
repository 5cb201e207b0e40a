"""Planning endpoints: placement, drift detection and reorganization."""

from __future__ import annotations

import dataclasses
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ...models.domain import GeoPoint, Stop, Technician
from ...schemas.planning import (
    DriftResponse,
    PlacementRequest,
    PlacementResponse,
    PlanningRequest,
    ReorgResponse,
)
from ...services.outputs.formatter import (
    drift_response,
    drift_to_csv,
    placement_response,
    reorg_response,
    reorg_to_csv,
)
from ...services.planning.service import RoutePlanner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planner", tags=["planner"])


def get_planner() -> RoutePlanner:
    return RoutePlanner.from_settings()


def _with_overrides(planner: RoutePlanner, payload: PlanningRequest) -> RoutePlanner:
    if payload.parameters is None:
        return planner
    overrides = payload.parameters.model_dump(exclude_none=True)
    if not overrides:
        return planner
    return RoutePlanner(
        params=dataclasses.replace(planner.params, **overrides),
        oracle=planner.oracle,
        service_days=planner.service_days,
    )


def _stops(payload: PlanningRequest) -> list[Stop]:
    return [
        Stop(
            id=item.id,
            client_label=item.client_label,
            address=item.address,
            lat=item.lat,
            lng=item.lng,
            assigned_day=item.assigned_day,
            assigned_tech_id=item.assigned_tech_id,
            visit_frequency=item.visit_frequency,
        )
        for item in payload.stops
    ]


def _technicians(payload: PlanningRequest) -> list[Technician]:
    return [Technician(id=item.id, display_name=item.display_name) for item in payload.technicians]


def _internal_error(action: str, exc: Exception) -> HTTPException:
    logger.exception("Error during %s: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {exc}",
    )


@router.post("/placement", response_model=PlacementResponse, status_code=status.HTTP_200_OK)
async def placement(payload: PlacementRequest, planner: RoutePlanner = Depends(get_planner)) -> PlacementResponse:
    try:
        planner = _with_overrides(planner, payload)
        result = await planner.plan_placement(
            GeoPoint(payload.new_location.lat, payload.new_location.lng),
            _stops(payload),
            _technicians(payload),
            payload.blackout_days,
            address=payload.new_location.address,
            use_oracle=payload.use_oracle,
        )
        return placement_response(result)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _internal_error("suggest a placement", exc) from exc


@router.post("/drift", response_model=DriftResponse, status_code=status.HTTP_200_OK)
async def drift(
    payload: PlanningRequest,
    format: Literal["json", "csv"] = Query("json"),
    planner: RoutePlanner = Depends(get_planner),
):
    try:
        planner = _with_overrides(planner, payload)
        result = await planner.plan_drift(
            _stops(payload),
            _technicians(payload),
            payload.blackout_days,
            use_oracle=payload.use_oracle,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _internal_error("detect drift", exc) from exc
    if format == "csv":
        return PlainTextResponse(drift_to_csv(result.payload), media_type="text/csv")
    return drift_response(result)


@router.post("/reorg", response_model=ReorgResponse, status_code=status.HTTP_200_OK)
async def reorg(
    payload: PlanningRequest,
    format: Literal["json", "csv"] = Query("json"),
    planner: RoutePlanner = Depends(get_planner),
):
    stops = _stops(payload)
    try:
        planner = _with_overrides(planner, payload)
        result = await planner.plan_reorg(
            stops,
            _technicians(payload),
            payload.blackout_days,
            use_oracle=payload.use_oracle,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _internal_error("reorganize routes", exc) from exc
    if format == "csv":
        return PlainTextResponse(reorg_to_csv(result.payload, stops), media_type="text/csv")
    return reorg_response(result)
