import logging
import random

import httpx
import pytest

from calmwalk.services import directions
from calmwalk.schemas.route import RouteSource
from calmwalk.schemas.walk import Location, StressZone

START = Location(latitude=45.0, longitude=7.0)
END = Location(latitude=45.005, longitude=7.0)

ORS_PAYLOAD = {
    "features": [
        {
            "geometry": {"coordinates": [[7.0, 45.0], [7.0, 45.0025], [7.0, 45.005]]},
            "properties": {
                "summary": {"distance": 560.0, "duration": 400.0},
                "segments": [
                    {
                        "steps": [
                            {"instruction": "Head north on Via Roma", "distance": 280.2},
                            {"instruction": "Arrive at destination", "distance": 0.0},
                        ]
                    }
                ],
            },
        }
    ]
}

GH_PAYLOAD = {
    "paths": [
        {
            "distance": 556.0,
            "time": 398000,
            "points": {"coordinates": [[7.0, 45.0], [7.0, 45.005]]},
            "instructions": [{"text": "Continue onto Via Po", "distance": 556.0}],
        }
    ]
}


@pytest.fixture
def keys(monkeypatch):
    monkeypatch.setattr(directions.settings, "routing_enabled", True)
    monkeypatch.setattr(directions.settings, "openroute_api_key", "ors-key")
    monkeypatch.setattr(directions.settings, "graphhopper_api_key", "gh-key")


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_openroute_route_is_used(keys):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=ORS_PAYLOAD)

    zone = StressZone(id="s1", center=START, radius=30, stress_score=1, stress_count=5, last_stressed=0)
    route = directions.get_walking_route(START, END, [], [zone], client=mock_client(handler))

    assert route.source == RouteSource.openrouteservice
    assert len(route.waypoints) == 3
    assert route.total_distance == 560.0
    assert route.instructions == ["1. Head north on Via Roma (280m)", "2. Arrive at destination (0m)"]
    assert route.avoids_stress_zones == ["s1"]
    assert seen[0].url.params["api_key"] == "ors-key"
    assert seen[0].url.params["start"] == "7.0,45.0"


def test_graphhopper_used_when_openroute_fails(keys):
    def handler(request):
        if request.url.host == "api.openrouteservice.org":
            return httpx.Response(503, text="unavailable")
        assert request.url.params.get_list("point") == ["45.0,7.0", "45.005,7.0"]
        return httpx.Response(200, json=GH_PAYLOAD)

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))

    assert route.source == RouteSource.graphhopper
    assert route.total_duration == pytest.approx(398.0)
    assert route.instructions == ["1. Continue onto Via Po (556m)"]


def test_fallback_when_every_provider_fails(keys, caplog):
    def handler(request):
        raise httpx.ConnectError("no network", request=request)

    with caplog.at_level(logging.WARNING, logger="calmwalk.services.directions"):
        route = directions.get_walking_route(
            START, END, [], [], client=mock_client(handler), rng=random.Random(1)
        )

    assert route.source == RouteSource.fallback
    assert 4 <= len(route.waypoints) <= 9
    assert "all routing providers failed" in caplog.text


def test_malformed_payloads_fall_back(keys):
    def handler(request):
        if request.url.host == "api.openrouteservice.org":
            return httpx.Response(200, json={"features": []})
        return httpx.Response(200, text="<html>not json</html>")

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))
    assert route.source == RouteSource.fallback


def test_degenerate_geometry_falls_through(keys):
    one_point = {"features": [{"geometry": {"coordinates": [[7.0, 45.0]]}, "properties": {}}]}

    def handler(request):
        if request.url.host == "api.openrouteservice.org":
            return httpx.Response(200, json=one_point)
        return httpx.Response(200, json=GH_PAYLOAD)

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))
    assert route.source == RouteSource.graphhopper


def test_disabled_routing_skips_network(monkeypatch):
    monkeypatch.setattr(directions.settings, "routing_enabled", False)

    def handler(request):
        raise AssertionError("network must not be used")

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))
    assert route.source == RouteSource.fallback


def test_missing_keys_skip_providers(monkeypatch):
    monkeypatch.setattr(directions.settings, "routing_enabled", True)
    monkeypatch.setattr(directions.settings, "openroute_api_key", None)
    monkeypatch.setattr(directions.settings, "graphhopper_api_key", None)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=ORS_PAYLOAD)

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))
    assert route.source == RouteSource.fallback
    assert calls == []


def _ors(coordinates=None, summary=None, steps=None):
    props = {"summary": {"distance": 560.0} if summary is None else summary}
    props["segments"] = [{"steps": [{"instruction": "Head north", "distance": 1.0}] if steps is None else steps}]
    coords = [[7.0, 45.0], [7.0, 45.005]] if coordinates is None else coordinates
    return {"features": [{"geometry": {"coordinates": coords}, "properties": props}]}


@pytest.mark.parametrize(
    "payload",
    [
        _ors(coordinates=[[7.0], [7.0, 45.005]]),
        _ors(coordinates=[["7.0", "45.0"], [7.0, 45.005]]),
        _ors(steps=["Head north"]),
        _ors(summary="n/a"),
        {"features": [{"geometry": {"coordinates": 12}, "properties": {}}]},
    ],
    ids=["short-pair", "string-coords", "string-step", "string-summary", "scalar-geometry"],
)
def test_bad_upstream_shapes_fall_back(keys, payload):
    def handler(request):
        if request.url.host == "api.openrouteservice.org":
            return httpx.Response(200, json=payload)
        return httpx.Response(200, json={"paths": [{"points": {"coordinates": [[7.0]]}}]})

    route = directions.get_walking_route(START, END, [], [], client=mock_client(handler))
    assert route.source == RouteSource.fallback


def test_parsers_reject_bad_shapes():
    with pytest.raises(directions.DirectionsError):
        directions._parse_openroute(_ors(steps=["Head north"]))
    with pytest.raises(directions.DirectionsError):
        directions._parse_graphhopper({"paths": [{"points": {"coordinates": [[7.0, 45.0]]}, "instructions": [3]}]})
