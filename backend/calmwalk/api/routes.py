import random

import gpxpy
import gpxpy.gpx
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from calmwalk.analysis.routing import (
    create_fallback_route,
    is_walkable_route,
    route_difficulty,
    score_route,
)
from calmwalk.analysis.suggestions import generate_route_suggestion
from calmwalk.db import get_db
from calmwalk.schemas.route import (
    OptimizedRoute,
    RoutePoint,
    RouteRead,
    RouteRequest,
    RouteScore,
    RouteScoreRequest,
    RouteSuggestion,
)
from calmwalk.services.directions import get_walking_route
from calmwalk import store

router = APIRouter(prefix="/routes", tags=["routes"])


def _rng(seed: int | None) -> random.Random | None:
    return random.Random(seed) if seed is not None else None


def _route_read(route: OptimizedRoute) -> RouteRead:
    return RouteRead(
        route=route,
        walkable=is_walkable_route(route),
        difficulty=route_difficulty(route),
    )


@router.post("/walking", response_model=RouteRead)
def walking_route(payload: RouteRequest, db: Session = Depends(get_db)):
    """Upstream directions when available, otherwise a synthesized route."""
    route = get_walking_route(
        payload.start,
        payload.end,
        store.load_calm_zones(db),
        store.load_stress_zones(db),
        rng=_rng(payload.seed),
    )
    return _route_read(route)


@router.post("/fallback", response_model=RouteRead)
def fallback_route(payload: RouteRequest, db: Session = Depends(get_db)):
    route = create_fallback_route(
        payload.start,
        payload.end,
        store.load_calm_zones(db),
        store.load_stress_zones(db),
        rng=_rng(payload.seed),
    )
    return _route_read(route)


@router.post("/suggestion", response_model=RouteSuggestion)
def route_suggestion(payload: RouteRequest, db: Session = Depends(get_db)):
    return generate_route_suggestion(
        payload.start,
        payload.end,
        store.load_calm_zones(db),
        store.load_stress_zones(db),
    )


@router.post("/score", response_model=RouteScore)
def score_waypoints(payload: RouteScoreRequest, db: Session = Depends(get_db)):
    return score_route(payload.waypoints, store.load_calm_zones(db), store.load_stress_zones(db))


# --------- GPX Upload --------- #

def _gpx_points(gpx: gpxpy.gpx.GPX) -> list[RoutePoint]:
    """Track points if present, else route points, else plain waypoints."""
    points = [
        RoutePoint(latitude=p.latitude, longitude=p.longitude)
        for track in gpx.tracks
        for segment in track.segments
        for p in segment.points
    ]
    if not points:
        points = [
            RoutePoint(latitude=p.latitude, longitude=p.longitude)
            for route in gpx.routes
            for p in route.points
        ]
    if not points:
        points = [RoutePoint(latitude=p.latitude, longitude=p.longitude) for p in gpx.waypoints]
    return points


@router.post("/score-gpx", response_model=RouteScore)
def score_gpx(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """Score a planned path uploaded as a GPX file."""
    raw = file.file.read()
    try:
        gpx = gpxpy.parse(raw.decode("utf-8"))
    except (UnicodeDecodeError, gpxpy.gpx.GPXException) as e:
        raise HTTPException(status_code=400, detail=f"Unreadable GPX: {e}")

    points = _gpx_points(gpx)
    if not points:
        raise HTTPException(status_code=400, detail="GPX contains no points")
    return score_route(points, store.load_calm_zones(db), store.load_stress_zones(db))
