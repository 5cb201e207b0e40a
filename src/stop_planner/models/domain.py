"""Domain models for stops, technicians and service days."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ServiceDay(str, Enum):
    """Days on which field service runs. Sunday is never a service day."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @property
    def order(self) -> int:
        return ALL_SERVICE_DAYS.index(self)

    @classmethod
    def parse(cls, value: "ServiceDay | str") -> "ServiceDay":
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"'{value}' is not a service day.") from None


ALL_SERVICE_DAYS: tuple[ServiceDay, ...] = tuple(ServiceDay)


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class Stop:
    """A recurring service visit location with its current day and technician."""

    id: str
    client_label: str
    address: str
    lat: Optional[float]
    lng: Optional[float]
    assigned_day: Optional[ServiceDay] = None
    assigned_tech_id: Optional[str] = None
    visit_frequency: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Technician:
    id: str
    display_name: str


def coordinate_problem(lat: Optional[float], lng: Optional[float]) -> Optional[str]:
    """Describe why a coordinate pair is unusable, or return None when it is valid WGS84."""

    if lat is None or lng is None:
        return "missing coordinates"
    try:
        lat_value, lng_value = float(lat), float(lng)
    except (TypeError, ValueError):
        return "coordinates are not numeric"
    if not (math.isfinite(lat_value) and math.isfinite(lng_value)):
        return "coordinates are not finite"
    if not -90.0 <= lat_value <= 90.0:
        return f"latitude {lat_value} outside [-90, 90]"
    if not -180.0 <= lng_value <= 180.0:
        return f"longitude {lng_value} outside [-180, 180]"
    # (0, 0) is the usual placeholder of a failed geocode
    if lat_value == 0.0 and lng_value == 0.0:
        return "coordinates are (0, 0)"
    return None
