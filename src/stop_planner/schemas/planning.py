"""Planning request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Confidence, ServiceDay


class StopModel(BaseModel):
    id: str
    client_label: str = ""
    address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    assigned_day: Optional[ServiceDay] = None
    assigned_tech_id: Optional[str] = None
    visit_frequency: Optional[str] = None


class TechnicianModel(BaseModel):
    id: str
    display_name: str


class LocationModel(BaseModel):
    lat: float
    lng: float
    address: str = ""


class PlanningOverrides(BaseModel):
    proximity_radius_m: Optional[float] = Field(None, gt=0)
    drift_savings_threshold_m: Optional[float] = Field(None, ge=0)
    balance_tolerance: Optional[float] = Field(None, ge=0)
    travel_speed_mph: Optional[float] = Field(None, gt=0)
    max_passes: Optional[int] = Field(None, ge=0)
    max_nearby_stops: Optional[int] = Field(None, ge=0, le=5)
    distance_unit: Optional[Literal["miles", "km"]] = None


class PlanningRequest(BaseModel):
    stops: List[StopModel] = Field(default_factory=list)
    technicians: List[TechnicianModel] = Field(default_factory=list)
    blackout_days: List[ServiceDay] = Field(default_factory=list, description="Service days unavailable this cycle.")
    parameters: Optional[PlanningOverrides] = None
    use_oracle: bool = Field(default=True, description="Ask the suggestion oracle first when it is configured.")


class PlacementRequest(PlanningRequest):
    new_location: LocationModel


class DataQualityModel(BaseModel):
    stop_id: str
    reason: str


class NearbyStopModel(BaseModel):
    stop_id: str
    client_label: str
    address: str
    distance_m: float
    distance: str


class PlacementSuggestionModel(BaseModel):
    day: ServiceDay
    tech_id: str
    tech_name: str
    reasoning: str
    nearby_stops: List[NearbyStopModel]
    confidence: Confidence


class OptimizationSuggestionModel(BaseModel):
    stop_id: str
    client_label: str
    current_day: ServiceDay
    suggested_day: ServiceDay
    current_tech_id: Optional[str]
    suggested_tech_id: Optional[str]
    suggested_tech_name: Optional[str]
    reasoning: str
    estimated_savings_minutes: float = Field(ge=0)


class ReorgAssignmentModel(BaseModel):
    stop_id: str
    client_label: str
    new_day: ServiceDay
    new_tech_id: str
    new_tech_name: str


class DayStatsModel(BaseModel):
    stop_count: int
    tech_id: str
    tech_name: str


class ReorgPlanModel(BaseModel):
    assignments: List[ReorgAssignmentModel]
    day_stats: Dict[ServiceDay, DayStatsModel]
    summary: str
    estimated_savings_minutes: float


class PlacementResponse(BaseModel):
    source: Literal["oracle", "deterministic"]
    warnings: List[DataQualityModel]
    suggestion: PlacementSuggestionModel


class DriftResponse(BaseModel):
    source: Literal["oracle", "deterministic"]
    warnings: List[DataQualityModel]
    suggestions: List[OptimizationSuggestionModel]
    summary: str


class ReorgResponse(BaseModel):
    source: Literal["oracle", "deterministic"]
    warnings: List[DataQualityModel]
    plan: ReorgPlanModel
