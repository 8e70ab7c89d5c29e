from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from calmwalk.schemas.walk import Location


class RouteSource(str, Enum):
    fallback = "fallback"
    openrouteservice = "openrouteservice"
    graphhopper = "graphhopper"


class RoutePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class RouteSegment(BaseModel):
    start: RoutePoint
    end: RoutePoint
    distance: float  # meters
    duration: float  # seconds
    instructions: Optional[str] = None


class RouteScore(BaseModel):
    score: float
    avoids_stress_zones: list[str]
    includes_calm_zones: list[str]


class OptimizedRoute(BaseModel):
    id: str
    start: Location
    end: Location
    waypoints: list[RoutePoint]
    segments: list[RouteSegment]
    total_distance: float  # meters
    total_duration: float  # seconds
    calm_score: float
    avoids_stress_zones: list[str]
    includes_calm_zones: list[str]
    instructions: list[str]
    source: RouteSource = RouteSource.fallback


class RouteSuggestion(BaseModel):
    id: str
    start: Location
    end: Location
    waypoints: list[Location]
    calm_score: float
    estimated_duration: int  # minutes
    avoids_stress_zones: list[str]
    includes_calm_zones: list[str]


# --------- API payloads --------- #

class RouteRequest(BaseModel):
    start: Location
    end: Location
    seed: Optional[int] = None  # jitter seed for reproducible fallback paths


class RouteScoreRequest(BaseModel):
    waypoints: list[RoutePoint]


class RouteRead(BaseModel):
    route: OptimizedRoute
    walkable: bool
    difficulty: str
