"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Literal

from ..models.domain import GeoPoint

EARTH_RADIUS_M = 6371000.0
METERS_PER_MILE = 1609.344
FEET_PER_METER = 3.28084
SHORT_DISTANCE_THRESHOLD_M = 0.1 * METERS_PER_MILE

DistanceUnit = Literal["miles", "km"]


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters between two points."""

    if a == b:
        return 0.0
    return haversine_m(a.lat, a.lng, b.lat, b.lng)


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def meters_to_kilometers(meters: float) -> float:
    return meters / 1000.0


def format_distance(meters: float, unit: DistanceUnit = "miles") -> str:
    """Render a distance for display, e.g. ``"420 ft"``, ``"2.3 mi"`` or ``"3.7 km"``.

    Distances under a tenth of a mile are shown in feet (miles unit) or
    meters (km unit).
    """

    if unit == "miles":
        if meters < SHORT_DISTANCE_THRESHOLD_M:
            return f"{round(meters * FEET_PER_METER)} ft"
        return f"{meters_to_miles(meters):.1f} mi"
    if unit == "km":
        if meters < 100.0:
            return f"{round(meters)} m"
        return f"{meters_to_kilometers(meters):.1f} km"
    raise ValueError(f"Unknown distance unit '{unit}'.")


def travel_minutes(meters: float, speed_mph: float) -> float:
    """Minutes needed to cover ``meters`` at a constant ``speed_mph``."""

    if speed_mph <= 0:
        raise ValueError("speed_mph must be > 0")
    return meters_to_miles(meters) / speed_mph * 60.0
