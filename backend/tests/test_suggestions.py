import pytest

from calmwalk.analysis.suggestions import generate_route_suggestion
from calmwalk.schemas.walk import CalmZone, Location, StressZone

M_PER_DEG_LAT = 111_194.93
START = Location(latitude=-33.86, longitude=151.21)


def north_of(meters):
    return Location(latitude=START.latitude + meters / M_PER_DEG_LAT, longitude=START.longitude)


END = north_of(100)
MIDDLE = north_of(50)


def calm(zid, center, score):
    return CalmZone(id=zid, center=center, radius=30, calm_score=score, visit_count=2, last_visited=0)


def stress(zid, center):
    return StressZone(id=zid, center=center, radius=30, stress_score=0.8, stress_count=2, last_stressed=0)


def test_no_zones():
    s = generate_route_suggestion(START, END, [], [], now_ms=7)
    assert s.id == "route_7"
    assert s.waypoints == []
    assert s.calm_score == pytest.approx(0.5)
    assert s.avoids_stress_zones == [] and s.includes_calm_zones == []


def test_best_calm_zone_becomes_waypoint():
    zones = [calm("c-low", north_of(40), 0.6), calm("c-high", MIDDLE, 0.9)]
    s = generate_route_suggestion(START, END, zones, [])

    assert s.waypoints == [MIDDLE]
    assert s.calm_score == pytest.approx(0.5 + 0.9 * 0.3)
    assert s.includes_calm_zones == ["c-low", "c-high"]


def test_stress_penalty_is_flat_per_zone():
    s = generate_route_suggestion(START, END, [], [stress("s1", MIDDLE), stress("s2", START)])
    assert s.calm_score == pytest.approx(0.1)
    assert s.avoids_stress_zones == ["s1", "s2"]

    s = generate_route_suggestion(START, END, [], [stress(f"s{i}", MIDDLE) for i in range(3)])
    assert s.calm_score == 0.0


def test_zones_must_be_near_both_endpoints():
    # 150 m behind the start is 250 m from the end
    behind = Location(latitude=START.latitude - 150 / M_PER_DEG_LAT, longitude=START.longitude)
    s = generate_route_suggestion(START, END, [calm("c1", behind, 1.0)], [stress("s1", behind)])
    assert s.waypoints == []
    assert s.calm_score == pytest.approx(0.5)
    assert s.includes_calm_zones == [] and s.avoids_stress_zones == []


@pytest.mark.parametrize("meters, minutes", [(100, 1), (1000, 12), (1250, 15), (2500, 30)])
def test_estimated_duration(meters, minutes):
    s = generate_route_suggestion(START, north_of(meters), [], [])
    assert s.estimated_duration == minutes
