"""Planning result and parameter models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Literal, Optional, TypeVar

from ...config import settings
from ...errors import DataQualityError
from ...models.domain import Confidence, ServiceDay


@dataclass(frozen=True, slots=True)
class PlanningParameters:
    proximity_radius_m: float = settings.proximity_radius_m
    drift_savings_threshold_m: float = settings.drift_savings_threshold_m
    balance_tolerance: float = settings.balance_tolerance
    travel_speed_mph: float = settings.travel_speed_mph
    max_passes: int = settings.max_passes
    max_nearby_stops: int = settings.max_nearby_stops
    distance_unit: Literal["miles", "km"] = settings.distance_unit

    def __post_init__(self) -> None:
        if self.proximity_radius_m <= 0:
            raise ValueError("proximity_radius_m must be > 0")
        if self.drift_savings_threshold_m < 0:
            raise ValueError("drift_savings_threshold_m must be >= 0")
        if self.balance_tolerance < 0:
            raise ValueError("balance_tolerance must be >= 0")
        if self.travel_speed_mph <= 0:
            raise ValueError("travel_speed_mph must be > 0")
        if self.max_passes < 0:
            raise ValueError("max_passes must be >= 0")


@dataclass(frozen=True, slots=True)
class NearbyStop:
    stop_id: str
    client_label: str
    address: str
    distance_m: float
    distance: str


@dataclass(frozen=True, slots=True)
class PlacementSuggestion:
    day: ServiceDay
    tech_id: str
    tech_name: str
    reasoning: str
    nearby_stops: tuple[NearbyStop, ...]
    confidence: Confidence


@dataclass(frozen=True, slots=True)
class OptimizationSuggestion:
    stop_id: str
    client_label: str
    current_day: ServiceDay
    suggested_day: ServiceDay
    current_tech_id: Optional[str]
    suggested_tech_id: Optional[str]
    suggested_tech_name: Optional[str]
    reasoning: str
    estimated_savings_minutes: float


@dataclass(frozen=True, slots=True)
class ReorgAssignment:
    stop_id: str
    client_label: str
    new_day: ServiceDay
    new_tech_id: str
    new_tech_name: str


@dataclass(frozen=True, slots=True)
class DayStats:
    stop_count: int
    tech_id: str
    tech_name: str


@dataclass(frozen=True, slots=True)
class ReorgPlan:
    assignments: tuple[ReorgAssignment, ...]
    day_stats: dict[ServiceDay, DayStats]
    summary: str
    estimated_savings_minutes: float


PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True, slots=True)
class PlanningResult(Generic[PayloadT]):
    """A planner payload together with where it came from and the snapshot warnings."""

    payload: PayloadT
    source: Literal["oracle", "deterministic"]
    warnings: tuple[DataQualityError, ...] = field(default_factory=tuple)
