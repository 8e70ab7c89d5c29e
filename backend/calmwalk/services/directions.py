"""Optional upstream walking directions with a guaranteed local fallback.

Providers are tried in order (OpenRouteService, then GraphHopper). Any
failure is logged and the next option is tried; the last option is the
locally synthesized route, so `get_walking_route` always returns a route.
"""

import logging
import random
from typing import Sequence

import httpx

from calmwalk.analysis.routing import create_fallback_route, route_from_geometry
from calmwalk.core.config import settings
from calmwalk.schemas.route import OptimizedRoute, RouteSource
from calmwalk.schemas.walk import CalmZone, Location, StressZone

logger = logging.getLogger(__name__)


class DirectionsError(Exception):
    """An upstream provider could not supply a usable route."""


def _check_shape(coords, summary, steps) -> None:
    if not isinstance(summary, dict):
        raise DirectionsError("route summary is not an object")
    for c in coords:
        if not isinstance(c, (list, tuple)) or len(c) < 2:
            raise DirectionsError(f"bad coordinate {c!r}")
        if not all(isinstance(v, (int, float)) for v in c[:2]):
            raise DirectionsError(f"bad coordinate {c!r}")
    if not all(isinstance(s, dict) for s in steps):
        raise DirectionsError("route instructions are not objects")


def _parse_openroute(data: dict) -> dict:
    """Normalize an OpenRouteService GeoJSON response.

    Returns {"coordinates": [[lon, lat], ...], "summary": {...}, "instructions": [...]}.
    """
    try:
        feature = data["features"][0]
        coords = feature["geometry"]["coordinates"]
        props = feature.get("properties") or {}
        summary = props.get("summary") or {}
        raw_steps = [step for seg in props.get("segments") or [] for step in seg.get("steps") or []]
        _check_shape(coords, summary, raw_steps)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise DirectionsError(f"OpenRouteService payload malformed: {e!r}") from e
    steps = [
        {"instruction": step.get("instruction", ""), "distance": step.get("distance", 0.0)}
        for step in raw_steps
    ]
    return {"coordinates": coords, "summary": summary, "instructions": steps}


def _parse_graphhopper(data: dict) -> dict:
    """Convert a GraphHopper response into the OpenRouteService shape."""
    try:
        path = data["paths"][0]
        coords = path["points"]["coordinates"]
        raw_steps = path.get("instructions") or []
        _check_shape(coords, {}, raw_steps)
        summary = {
            "distance": path.get("distance"),
            "duration": (path.get("time") or 0) / 1000,  # ms -> s
        }
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise DirectionsError(f"GraphHopper payload malformed: {e!r}") from e
    steps = [
        {"instruction": inst.get("text", ""), "distance": inst.get("distance", 0.0)}
        for inst in raw_steps
    ]
    return {"coordinates": coords, "summary": summary, "instructions": steps}


def fetch_openroute(start: Location, end: Location, client: httpx.Client) -> dict:
    if not settings.openroute_api_key:
        raise DirectionsError("OpenRouteService key not configured")
    params = {
        "api_key": settings.openroute_api_key,
        "start": f"{start.longitude},{start.latitude}",
        "end": f"{end.longitude},{end.latitude}",
    }
    r = client.get(settings.openroute_api_url, params=params)
    if r.status_code != 200:
        raise DirectionsError(f"OpenRouteService failed: HTTP {r.status_code}")
    return _parse_openroute(r.json())


def fetch_graphhopper(start: Location, end: Location, client: httpx.Client) -> dict:
    if not settings.graphhopper_api_key:
        raise DirectionsError("GraphHopper key not configured")
    # GraphHopper expects repeated 'point' parameters
    params = [
        ("key", settings.graphhopper_api_key),
        ("point", f"{start.latitude},{start.longitude}"),
        ("point", f"{end.latitude},{end.longitude}"),
        ("vehicle", "foot"),
        ("instructions", "true"),
        ("points_encoded", "false"),
    ]
    r = client.get(settings.graphhopper_api_url, params=params)
    if r.status_code != 200:
        raise DirectionsError(f"GraphHopper failed: HTTP {r.status_code}")
    return _parse_graphhopper(r.json())


_PROVIDERS = [
    (RouteSource.openrouteservice, fetch_openroute),
    (RouteSource.graphhopper, fetch_graphhopper),
]


def _try_providers(
    start: Location,
    end: Location,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
    client: httpx.Client,
) -> OptimizedRoute | None:
    for source, fetch in _PROVIDERS:
        try:
            raw = fetch(start, end, client)
            return route_from_geometry(
                raw["coordinates"],
                raw["summary"],
                raw["instructions"],
                calm_zones,
                stress_zones,
                source=source,
            )
        except (
            DirectionsError,
            httpx.HTTPError,
            ValueError,
            KeyError,
            IndexError,
            TypeError,
            AttributeError,
        ) as e:
            # ValueError covers undecodable JSON and degenerate geometry;
            # the rest cover payload shapes the parsers did not anticipate
            logger.warning("%s unavailable, trying next option: %s", source.value, e)
    return None


def get_walking_route(
    start: Location,
    end: Location,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
    *,
    client: httpx.Client | None = None,
    rng: random.Random | None = None,
) -> OptimizedRoute:
    """Best available walking route between two points, scored against the zones.

    Args:
        client: Optional pre-built httpx client (tests inject a mock transport).
        rng: Jitter source for the fallback route.
    """

    if settings.routing_enabled:
        if client is not None:
            route = _try_providers(start, end, calm_zones, stress_zones, client)
        else:
            with httpx.Client(timeout=settings.routing_timeout_seconds) as c:
                route = _try_providers(start, end, calm_zones, stress_zones, c)
        if route is not None:
            return route
        logger.warning("all routing providers failed, using fallback route")

    return create_fallback_route(start, end, calm_zones, stress_zones, rng=rng)
