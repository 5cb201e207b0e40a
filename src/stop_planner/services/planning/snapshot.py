"""Immutable per-call view of the stops, technicians and available days."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...errors import ConfigurationError, DataQualityError
from ...models.domain import GeoPoint, ServiceDay, Stop, Technician, coordinate_problem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Snapshot:
    stops: tuple[Stop, ...]
    technicians: tuple[Technician, ...]
    blackout_days: frozenset[ServiceDay]
    available_days: tuple[ServiceDay, ...]
    clusterable: tuple[tuple[Stop, GeoPoint], ...]
    data_quality: tuple[DataQualityError, ...]

    @property
    def stop_ids(self) -> frozenset[str]:
        return frozenset(stop.id for stop in self.stops)

    @property
    def technician_ids(self) -> frozenset[str]:
        return frozenset(tech.id for tech in self.technicians)

    def stop(self, stop_id: str) -> Optional[Stop]:
        for stop in self.stops:
            if stop.id == stop_id:
                return stop
        return None

    def technician(self, tech_id: Optional[str]) -> Optional[Technician]:
        if tech_id is None:
            return None
        for tech in self.technicians:
            if tech.id == tech_id:
                return tech
        return None

    def point(self, stop_id: str) -> Optional[GeoPoint]:
        for stop, point in self.clusterable:
            if stop.id == stop_id:
                return point
        return None

    def require_days_and_technicians(self) -> None:
        if not self.available_days:
            raise ConfigurationError("no service days available")
        if not self.technicians:
            raise ConfigurationError("no technicians available")


def _resolve_days(values: Iterable[ServiceDay | str]) -> list[ServiceDay]:
    try:
        return [ServiceDay.parse(value) for value in values]
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def build_snapshot(
    stops: Sequence[Stop],
    technicians: Sequence[Technician],
    blackout_days: Iterable[ServiceDay | str] = (),
    *,
    service_days: Iterable[ServiceDay | str] | None = None,
) -> Snapshot:
    """Validate caller data and split stops into clusterable ones and data-quality issues."""

    seen_stops: set[str] = set()
    for stop in stops:
        if stop.id in seen_stops:
            raise ConfigurationError(f"duplicate stop id '{stop.id}'")
        seen_stops.add(stop.id)

    seen_techs: set[str] = set()
    for tech in technicians:
        if tech.id in seen_techs:
            raise ConfigurationError(f"duplicate technician id '{tech.id}'")
        seen_techs.add(tech.id)

    blackout = frozenset(_resolve_days(blackout_days))
    offered = set(_resolve_days(service_days if service_days is not None else settings.service_days))
    available = tuple(day for day in ServiceDay if day in offered and day not in blackout)

    clusterable: list[tuple[Stop, GeoPoint]] = []
    issues: list[DataQualityError] = []
    for stop in stops:
        problem = coordinate_problem(stop.lat, stop.lng)
        if problem is not None:
            issues.append(DataQualityError(stop.id, problem))
            continue
        clusterable.append((stop, GeoPoint(float(stop.lat), float(stop.lng))))

    if issues:
        logger.info("Excluding %d stop(s) with unusable coordinates from clustering", len(issues))

    return Snapshot(
        stops=tuple(stops),
        technicians=tuple(technicians),
        blackout_days=blackout,
        available_days=available,
        clusterable=tuple(clusterable),
        data_quality=tuple(issues),
    )
