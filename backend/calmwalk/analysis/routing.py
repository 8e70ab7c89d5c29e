"""Route calmness scoring and local route synthesis.

`create_fallback_route` never touches the network, so it is always available
when upstream directions fail or are disabled.
"""

import math
import random
from typing import Any, Iterable, Sequence

from calmwalk.core.constants import (
    BASE_CALM_SCORE,
    CALM_HIT_REWARD,
    CONTINUE_STRAIGHT_M,
    EASY_ROUTE_M,
    EASY_ROUTE_SCORE,
    FALLBACK_JITTER_DEG,
    FALLBACK_MAX_STEPS,
    FALLBACK_MIN_STEPS,
    FALLBACK_STEP_M,
    MAX_WALKABLE_ROUTE_M,
    MAX_WALKABLE_SEGMENT_M,
    MODERATE_ROUTE_M,
    MODERATE_ROUTE_SCORE,
    STRESS_HIT_PENALTY,
    WALK_DIRECTION_M,
    WALKING_SPEED_MPS,
)
from calmwalk.core.geo import bearing_direction, distance_m, within_radius
from calmwalk.core.time_utils import now_ms as _now_ms, round_half_up
from calmwalk.schemas.route import (
    OptimizedRoute,
    RoutePoint,
    RouteScore,
    RouteSegment,
    RouteSource,
)
from calmwalk.schemas.walk import CalmZone, Location, StressZone


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def score_route(
    waypoints: Iterable[Any],
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
) -> RouteScore:
    """Score a path against the zone stores.

    Every (waypoint, zone) hit counts: a route that lingers in one stress
    zone over several waypoints is penalized once per waypoint, while the
    zone id is listed once. Stress hits weigh twice as much as calm hits.
    """

    score = BASE_CALM_SCORE
    avoids: list[str] = []
    includes: list[str] = []

    for point in waypoints:
        for zone in stress_zones:
            if within_radius(zone.center, point, zone.radius):
                score -= STRESS_HIT_PENALTY
                if zone.id not in avoids:
                    avoids.append(zone.id)
        for zone in calm_zones:
            if within_radius(zone.center, point, zone.radius):
                score += CALM_HIT_REWARD
                if zone.id not in includes:
                    includes.append(zone.id)

    return RouteScore(
        score=_clamp01(score),
        avoids_stress_zones=avoids,
        includes_calm_zones=includes,
    )


def fallback_step_count(distance: float) -> int:
    return max(FALLBACK_MIN_STEPS, min(FALLBACK_MAX_STEPS, int(math.floor(distance / FALLBACK_STEP_M))))


def interpolate_waypoints(
    start: Location,
    end: Location,
    rng: random.Random | None = None,
) -> list[RoutePoint]:
    """Straight-line waypoints with a little jitter on the intermediate ones.

    Args:
        start: Route start.
        end: Route end.
        rng: Source of jitter; pass a seeded Random for reproducible paths.

    Returns:
        steps + 1 points; the first and last are exactly start and end.
    """

    rng = rng or random.Random()
    steps = fallback_step_count(distance_m(start, end))
    points: list[RoutePoint] = []

    for i in range(steps + 1):
        ratio = i / steps
        lat = start.latitude + (end.latitude - start.latitude) * ratio
        lon = start.longitude + (end.longitude - start.longitude) * ratio
        if 0 < i < steps:
            lat += (rng.random() - 0.5) * FALLBACK_JITTER_DEG
            lon += (rng.random() - 0.5) * FALLBACK_JITTER_DEG
        elif i == steps:
            lat, lon = end.latitude, end.longitude
        points.append(RoutePoint(latitude=lat, longitude=lon))

    return points


def build_segments(waypoints: Sequence[RoutePoint]) -> list[RouteSegment]:
    segments: list[RouteSegment] = []
    for a, b in zip(waypoints, waypoints[1:]):
        d = distance_m(a, b)
        segments.append(RouteSegment(start=a, end=b, distance=d, duration=d / WALKING_SPEED_MPS))
    return segments


def segment_instruction(segment: RouteSegment, index: int) -> str:
    """Turn-by-turn text for the index-th (0-based) segment."""

    direction = bearing_direction(segment.start, segment.end)
    meters = round_half_up(segment.distance)
    n = index + 1
    if index == 0:
        return f"{n}. Start walking {direction} for {meters}m"
    if segment.distance < CONTINUE_STRAIGHT_M:
        return f"{n}. Continue straight for {meters}m"
    if segment.distance < WALK_DIRECTION_M:
        return f"{n}. Walk {direction} for {meters}m"
    return f"{n}. Head {direction} for {meters}m"


def _route_id(now_ms: int | None) -> str:
    return f"route_{_now_ms() if now_ms is None else now_ms}"


def create_fallback_route(
    start: Location,
    end: Location,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
    *,
    rng: random.Random | None = None,
    now_ms: int | None = None,
) -> OptimizedRoute:
    """Synthesize a scored walking route without any external service."""

    distance = distance_m(start, end)
    waypoints = interpolate_waypoints(start, end, rng)
    segments = [
        seg.model_copy(update={"instructions": segment_instruction(seg, i)})
        for i, seg in enumerate(build_segments(waypoints))
    ]
    scored = score_route(waypoints, calm_zones, stress_zones)

    return OptimizedRoute(
        id=_route_id(now_ms),
        start=start,
        end=end,
        waypoints=waypoints,
        segments=segments,
        total_distance=distance,
        total_duration=distance / WALKING_SPEED_MPS,
        calm_score=scored.score,
        avoids_stress_zones=scored.avoids_stress_zones,
        includes_calm_zones=scored.includes_calm_zones,
        instructions=[s.instructions for s in segments if s.instructions],
        source=RouteSource.fallback,
    )


def route_from_geometry(
    coordinates: Sequence[Sequence[float]],
    summary: dict,
    api_instructions: Sequence[dict],
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
    *,
    source: RouteSource,
    now_ms: int | None = None,
) -> OptimizedRoute:
    """Score upstream path geometry ([lon, lat] pairs) into an OptimizedRoute.

    Raises:
        ValueError: If the geometry has fewer than two points.
    """

    if len(coordinates) < 2:
        raise ValueError("route geometry needs at least two coordinates")

    waypoints = [RoutePoint(longitude=float(c[0]), latitude=float(c[1])) for c in coordinates]
    segments = build_segments(waypoints)
    scored = score_route(waypoints, calm_zones, stress_zones)

    if api_instructions:
        instructions = []
        for i, inst in enumerate(api_instructions):
            meters = round_half_up(float(inst.get("distance") or 0.0))
            instructions.append(f"{i + 1}. {inst.get('instruction', '')} ({meters}m)")
    else:
        instructions = [
            f"{i + 1}. Walk {bearing_direction(s.start, s.end)} for {round_half_up(s.distance)}m"
            for i, s in enumerate(segments)
        ]

    first, last = waypoints[0], waypoints[-1]
    return OptimizedRoute(
        id=_route_id(now_ms),
        start=Location(latitude=first.latitude, longitude=first.longitude),
        end=Location(latitude=last.latitude, longitude=last.longitude),
        waypoints=waypoints,
        segments=segments,
        total_distance=float(summary.get("distance") or sum(s.distance for s in segments)),
        total_duration=float(summary.get("duration") or sum(s.duration for s in segments)),
        calm_score=scored.score,
        avoids_stress_zones=scored.avoids_stress_zones,
        includes_calm_zones=scored.includes_calm_zones,
        instructions=instructions,
        source=source,
    )


def is_walkable_route(route: OptimizedRoute) -> bool:
    return route.total_distance < MAX_WALKABLE_ROUTE_M and all(
        s.distance < MAX_WALKABLE_SEGMENT_M for s in route.segments
    )


def route_difficulty(route: OptimizedRoute) -> str:
    if route.total_distance < EASY_ROUTE_M and route.calm_score > EASY_ROUTE_SCORE:
        return "easy"
    if route.total_distance < MODERATE_ROUTE_M and route.calm_score > MODERATE_ROUTE_SCORE:
        return "moderate"
    return "challenging"
