import math

import pytest

from stop_planner.models.domain import GeoPoint, coordinate_problem
from stop_planner.services.geospatial import (
    EARTH_RADIUS_M,
    distance_m,
    format_distance,
    haversine_m,
    travel_minutes,
)


def test_distance_is_symmetric_and_zero_on_self():
    a = GeoPoint(40.0, -75.0)
    b = GeoPoint(40.05, -75.1)

    assert distance_m(a, a) == 0.0
    assert distance_m(a, b) == distance_m(b, a)
    assert distance_m(a, b) > 0


def test_one_degree_of_latitude():
    expected = EARTH_RADIUS_M * math.pi / 180
    assert haversine_m(0.0, 10.0, 1.0, 10.0) == pytest.approx(expected, rel=1e-9)


def test_format_distance_in_miles():
    assert format_distance(3218.0) == "2.0 mi"
    assert format_distance(100.0) == "328 ft"


def test_format_distance_in_kilometers():
    assert format_distance(1500.0, "km") == "1.5 km"
    assert format_distance(42.4, "km") == "42 m"


def test_format_distance_rejects_unknown_unit():
    with pytest.raises(ValueError):
        format_distance(10.0, "furlongs")  # type: ignore[arg-type]


def test_travel_minutes():
    assert travel_minutes(1609.344 * 25, 25.0) == pytest.approx(60.0)
    with pytest.raises(ValueError):
        travel_minutes(100.0, 0.0)


@pytest.mark.parametrize(
    "lat,lng",
    [(None, -75.0), (0.0, 0.0), (91.0, 10.0), (10.0, -181.0), (float("nan"), 1.0), (float("inf"), 1.0)],
)
def test_coordinate_problem_flags_unusable_points(lat, lng):
    assert coordinate_problem(lat, lng) is not None


def test_coordinate_problem_accepts_valid_point():
    assert coordinate_problem(40.0, -75.0) is None
    assert coordinate_problem(0.0, 12.5) is None
