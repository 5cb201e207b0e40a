"""Planning orchestration: oracle first when configured, deterministic planners otherwise."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from ...config import Settings, settings
from ...models.domain import GeoPoint, ServiceDay, Stop, Technician
from .drift import plan_drift
from .models import (
    OptimizationSuggestion,
    PlacementSuggestion,
    PlanningParameters,
    PlanningResult,
    ReorgPlan,
)
from .placement import plan_placement
from .reorg import plan_reorg
from .snapshot import Snapshot, build_snapshot

if TYPE_CHECKING:
    from ..oracle import SuggestionOracle

logger = logging.getLogger(__name__)


class RoutePlanner:
    """Stateless planning service.

    Holds only configuration and an optional oracle, so one instance can be
    shared across concurrent requests.
    """

    def __init__(
        self,
        *,
        params: PlanningParameters | None = None,
        oracle: Optional["SuggestionOracle"] = None,
        service_days: Sequence[ServiceDay | str] | None = None,
    ) -> None:
        self.params = params or PlanningParameters()
        self.oracle = oracle
        self.service_days = tuple(service_days if service_days is not None else settings.service_days)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "RoutePlanner":
        config = config or settings
        oracle = None
        if config.oracle_enabled:
            from ..oracle import SuggestionOracle

            oracle = SuggestionOracle(
                api_key=config.oracle_api_key,
                base_url=config.oracle_base_url,
                model=config.oracle_model,
                api_version=config.oracle_api_version,
                timeout=config.oracle_timeout_seconds,
            )
        params = PlanningParameters(
            proximity_radius_m=config.proximity_radius_m,
            drift_savings_threshold_m=config.drift_savings_threshold_m,
            balance_tolerance=config.balance_tolerance,
            travel_speed_mph=config.travel_speed_mph,
            max_passes=config.max_passes,
            max_nearby_stops=config.max_nearby_stops,
            distance_unit=config.distance_unit,
        )
        return cls(params=params, oracle=oracle, service_days=config.service_days)

    def snapshot(
        self,
        stops: Sequence[Stop],
        technicians: Sequence[Technician],
        blackout_days: Iterable[ServiceDay | str] = (),
    ) -> Snapshot:
        return build_snapshot(stops, technicians, blackout_days, service_days=self.service_days)

    async def plan_placement(
        self,
        location: GeoPoint,
        stops: Sequence[Stop],
        technicians: Sequence[Technician],
        blackout_days: Iterable[ServiceDay | str] = (),
        *,
        address: str = "",
        use_oracle: bool = True,
    ) -> PlanningResult[PlacementSuggestion]:
        snapshot = self.snapshot(stops, technicians, blackout_days)
        # Raises ConfigurationError before any oracle traffic.
        fallback = plan_placement(location, snapshot, self.params)
        if use_oracle and self.oracle is not None:
            from ..oracle import Accepted

            result = await self.oracle.propose_placement(snapshot, location, address, self.params)
            if isinstance(result, Accepted):
                return PlanningResult(result.payload, "oracle", snapshot.data_quality)
            logger.info("Placement falling back to proximity heuristic: %s", result.reason)
        return PlanningResult(fallback, "deterministic", snapshot.data_quality)

    async def plan_drift(
        self,
        stops: Sequence[Stop],
        technicians: Sequence[Technician],
        blackout_days: Iterable[ServiceDay | str] = (),
        *,
        use_oracle: bool = True,
    ) -> PlanningResult[list[OptimizationSuggestion]]:
        snapshot = self.snapshot(stops, technicians, blackout_days)
        if use_oracle and self.oracle is not None and snapshot.available_days and snapshot.technicians:
            from ..oracle import Accepted

            result = await self.oracle.propose_drift(snapshot)
            if isinstance(result, Accepted):
                return PlanningResult(result.payload, "oracle", snapshot.data_quality)
            logger.info("Drift check falling back to proximity heuristic: %s", result.reason)
        return PlanningResult(plan_drift(snapshot, self.params), "deterministic", snapshot.data_quality)

    async def plan_reorg(
        self,
        stops: Sequence[Stop],
        technicians: Sequence[Technician],
        blackout_days: Iterable[ServiceDay | str] = (),
        *,
        use_oracle: bool = True,
    ) -> PlanningResult[ReorgPlan]:
        snapshot = self.snapshot(stops, technicians, blackout_days)
        snapshot.require_days_and_technicians()
        if use_oracle and self.oracle is not None:
            from ..oracle import Accepted

            result = await self.oracle.propose_reorg(snapshot)
            if isinstance(result, Accepted):
                return PlanningResult(result.payload, "oracle", snapshot.data_quality)
            logger.info("Reorganization falling back to local search: %s", result.reason)
        return PlanningResult(plan_reorg(snapshot, self.params), "deterministic", snapshot.data_quality)
