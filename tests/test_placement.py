import pytest

from stop_planner.errors import ConfigurationError
from stop_planner.models.domain import ALL_SERVICE_DAYS, Confidence, GeoPoint, ServiceDay, Stop, Technician
from stop_planner.services.planning import PlanningParameters, build_snapshot, plan_placement

NEW_STOP = GeoPoint(40.0, -75.0)
TECHS = [Technician("t1", "Alex"), Technician("t2", "Blair")]


def _stop(sid: str, lat: float | None, lng: float | None, day: str | None = None, tech: str | None = None) -> Stop:
    return Stop(
        id=sid,
        client_label=f"Client {sid}",
        address=f"{sid} Pool Ln",
        lat=lat,
        lng=lng,
        assigned_day=ServiceDay(day) if day else None,
        assigned_tech_id=tech,
    )


def _monday_cluster() -> list[Stop]:
    # all within 0.3 miles of NEW_STOP
    return [_stop(f"m{i}", 40.0 + 0.0008 * i, -75.0, "MONDAY", "t2") for i in range(1, 6)]


def test_clustered_monday_stops_give_high_confidence_monday():
    snapshot = build_snapshot(_monday_cluster(), TECHS)

    suggestion = plan_placement(NEW_STOP, snapshot)

    assert suggestion.day == ServiceDay.MONDAY
    assert suggestion.confidence == Confidence.HIGH
    assert suggestion.tech_id == "t2"
    assert suggestion.tech_name == "Blair"
    assert [item.stop_id for item in suggestion.nearby_stops] == ["m1", "m2", "m3", "m4", "m5"]
    assert suggestion.nearby_stops[0].distance.endswith("ft")
    assert "MONDAY has 5 stops within 2.0 mi" in suggestion.reasoning


def test_all_days_blacked_out_is_a_configuration_error():
    snapshot = build_snapshot(_monday_cluster(), TECHS, blackout_days=ALL_SERVICE_DAYS)

    with pytest.raises(ConfigurationError):
        plan_placement(NEW_STOP, snapshot)


def test_no_technicians_is_a_configuration_error():
    snapshot = build_snapshot(_monday_cluster(), [])

    with pytest.raises(ConfigurationError):
        plan_placement(NEW_STOP, snapshot)


def test_unusable_new_location_is_a_configuration_error():
    snapshot = build_snapshot(_monday_cluster(), TECHS)

    with pytest.raises(ConfigurationError):
        plan_placement(GeoPoint(0.0, 0.0), snapshot)


def test_placement_never_returns_a_blackout_day():
    snapshot = build_snapshot(_monday_cluster(), TECHS, blackout_days=["monday"])

    suggestion = plan_placement(NEW_STOP, snapshot)

    assert suggestion.day == ServiceDay.TUESDAY
    assert suggestion.confidence == Confidence.LOW
    assert suggestion.tech_id == "t1"
    assert suggestion.nearby_stops == ()


def test_equal_counts_prefer_the_shorter_average_distance():
    stops = [
        _stop("m1", 40.02, -75.0, "MONDAY", "t1"),
        _stop("m2", 40.021, -75.0, "MONDAY", "t1"),
        _stop("w1", 40.004, -75.0, "WEDNESDAY", "t2"),
        _stop("w2", 40.005, -75.0, "WEDNESDAY", "t2"),
    ]

    suggestion = plan_placement(NEW_STOP, build_snapshot(stops, TECHS))

    assert suggestion.day == ServiceDay.WEDNESDAY
    assert suggestion.confidence == Confidence.MEDIUM
    assert suggestion.tech_id == "t2"


def test_placement_is_deterministic():
    stops = _monday_cluster() + [_stop("f1", 40.001, -75.001, "FRIDAY", "t1")]
    snapshot = build_snapshot(stops, TECHS)

    results = {plan_placement(NEW_STOP, snapshot) for _ in range(5)}

    assert len(results) == 1


def test_nearby_list_is_capped():
    snapshot = build_snapshot(_monday_cluster(), TECHS)

    suggestion = plan_placement(NEW_STOP, snapshot, PlanningParameters(max_nearby_stops=2))

    assert len(suggestion.nearby_stops) == 2


def test_stops_without_coordinates_are_ignored():
    stops = _monday_cluster() + [
        _stop("bad-1", None, None, "TUESDAY", "t1"),
        _stop("bad-2", 0.0, 0.0, "TUESDAY", "t1"),
    ]
    snapshot = build_snapshot(stops, TECHS)

    suggestion = plan_placement(NEW_STOP, snapshot)

    assert suggestion.day == ServiceDay.MONDAY
    assert {issue.stop_id for issue in snapshot.data_quality} == {"bad-1", "bad-2"}
