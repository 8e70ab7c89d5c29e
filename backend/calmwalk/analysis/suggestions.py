"""Quick route previews biased toward known calm zones."""

from typing import Sequence

from calmwalk.core.constants import (
    BASE_CALM_SCORE,
    MINUTES_PER_KM,
    SUGGESTION_CALM_WEIGHT,
    SUGGESTION_NEARBY_M,
    SUGGESTION_STRESS_PENALTY,
)
from calmwalk.core.geo import distance_m
from calmwalk.core.time_utils import now_ms as _now_ms, round_half_up
from calmwalk.schemas.route import RouteSuggestion
from calmwalk.schemas.walk import CalmZone, Location, StressZone


def _near_both(zone, start: Location, end: Location) -> bool:
    return (
        distance_m(start, zone.center) < SUGGESTION_NEARBY_M
        and distance_m(end, zone.center) < SUGGESTION_NEARBY_M
    )


def generate_route_suggestion(
    start: Location,
    end: Location,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
    *,
    now_ms: int | None = None,
) -> RouteSuggestion:
    """Build a one-waypoint preview between two points.

    Unlike score_route, stress zones cost a flat amount per zone near both
    endpoints, not per waypoint hit. All zones considered are reported even
    when only the best calm zone shapes the path.
    """

    waypoints: list[Location] = []
    score = BASE_CALM_SCORE

    nearby_calm = [z for z in calm_zones if _near_both(z, start, end)]
    if nearby_calm:
        best = max(nearby_calm, key=lambda z: z.calm_score)
        waypoints.append(best.center)
        score += best.calm_score * SUGGESTION_CALM_WEIGHT

    nearby_stress = [z for z in stress_zones if _near_both(z, start, end)]
    score -= len(nearby_stress) * SUGGESTION_STRESS_PENALTY

    distance_km = distance_m(start, end) / 1000.0

    return RouteSuggestion(
        id=f"route_{_now_ms() if now_ms is None else now_ms}",
        start=start,
        end=end,
        waypoints=waypoints,
        calm_score=max(0.0, min(1.0, score)),
        estimated_duration=round_half_up(distance_km * MINUTES_PER_KM),
        avoids_stress_zones=[z.id for z in nearby_stress],
        includes_calm_zones=[z.id for z in nearby_calm],
    )
