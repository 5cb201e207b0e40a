from stop_planner.models.domain import GeoPoint, ServiceDay, Stop, Technician
from stop_planner.services.geospatial import distance_m
from stop_planner.services.planning.scorer import majority_technician, rank_key, score_day, score_days

MON = ServiceDay.MONDAY
TUE = ServiceDay.TUESDAY

ORIGIN = GeoPoint(40.0, -75.0)


def _entry(sid: str, lat: float, lng: float, day, tech: str | None = None):
    stop = Stop(
        id=sid,
        client_label=f"Client {sid}",
        address=f"{sid} Main St",
        lat=lat,
        lng=lng,
        assigned_day=day,
        assigned_tech_id=tech,
    )
    return stop, GeoPoint(lat, lng)


def test_score_day_counts_only_stops_within_radius_on_that_day():
    stops = [
        _entry("near-1", 40.001, -75.0, MON, "t1"),
        _entry("near-2", 40.002, -75.0, MON, "t1"),
        _entry("far", 40.1, -75.0, MON, "t2"),
        _entry("other-day", 40.0005, -75.0, TUE, "t2"),
    ]

    score = score_day(ORIGIN, MON, stops, radius_m=3218.0)

    assert score.nearby_count == 2
    assert [stop.id for stop, _ in score.ranked] == ["near-1", "near-2", "far"]
    assert score.tech_frequency == {"t1": 2}
    assert score.avg_distance_m == score.total_distance_m / 2
    assert score.nearest_distance_m == score.ranked[0][1]


def test_score_day_radius_is_inclusive():
    stops = [_entry("edge", 40.001, -75.0, MON)]
    _, point = stops[0]

    score = score_day(ORIGIN, MON, stops, radius_m=distance_m(ORIGIN, point))

    assert score.nearby_count == 1


def test_score_day_without_nearby_stops_uses_nearest_distance():
    stops = [_entry("far", 40.1, -75.0, MON)]

    score = score_day(ORIGIN, MON, stops, radius_m=3218.0)

    assert score.nearby_count == 0
    assert score.avg_distance_m is None
    assert score.proximity_cost_m == score.nearest_distance_m


def test_score_days_can_exclude_the_scored_stop():
    stops = [_entry("self", 40.0, -75.0, MON), _entry("mate", 40.001, -75.0, MON)]

    scores = score_days(ORIGIN, [MON, TUE], stops, radius_m=3218.0, exclude_stop_id="self")

    assert [stop.id for stop, _ in scores[MON].ranked] == ["mate"]
    assert scores[TUE].ranked == []


def test_rank_key_prefers_count_then_distance_then_day_order():
    stops = [
        _entry("m1", 40.004, -75.0, MON),
        _entry("t1", 40.002, -75.0, TUE),
    ]
    scores = score_days(ORIGIN, [MON, TUE], stops, radius_m=3218.0)

    assert min(scores.values(), key=rank_key).day == TUE

    empty = score_days(ORIGIN, [TUE, MON], [], radius_m=3218.0)
    assert min(empty.values(), key=rank_key).day == MON


def test_majority_technician_breaks_ties_by_list_order():
    technicians = [Technician("t2", "Bo"), Technician("t1", "Al")]

    assert majority_technician({"t1": 2, "t2": 2}, technicians).id == "t2"
    assert majority_technician({"t1": 3, "t2": 2}, technicians).id == "t1"
    assert majority_technician({}, technicians) is None
