from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from calmwalk.analysis.sessions import end_session, record_mood, start_session
from calmwalk.core.config import settings
from calmwalk.core.noise import describe_noise, is_stressful_noise
from calmwalk.core.time_utils import now_ms
from calmwalk.db import get_db
from calmwalk.schemas.walk import (
    MoodCreate,
    MoodRead,
    SessionEnd,
    SessionEndRead,
    SessionStart,
    WalkSession,
)
from calmwalk import store

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_or_404(db: Session, session_id: str) -> WalkSession:
    session = store.get_session(db, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/", response_model=WalkSession)
def create_session(payload: SessionStart | None = None, db: Session = Depends(get_db)):
    session = start_session(now_ms=payload.start_time if payload else None)
    return store.save_session(db, session)


@router.get("/", response_model=list[WalkSession])
def list_sessions(db: Session = Depends(get_db)):
    return store.load_sessions(db)


@router.get("/{session_id}", response_model=WalkSession)
def get_session(session_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, session_id)


@router.post("/{session_id}/moods", response_model=MoodRead)
def add_mood(session_id: str, payload: MoodCreate, db: Session = Depends(get_db)):
    session = _get_or_404(db, session_id)
    if session.end_time is not None:
        raise HTTPException(status_code=409, detail="Session already ended")

    # Fall back to the GPS fix time, then server time
    timestamp = payload.timestamp
    if timestamp is None and payload.location.timestamp:
        timestamp = payload.location.timestamp

    updated = record_mood(
        session,
        payload.location,
        payload.mood,
        payload.noise_level,
        timestamp=timestamp,
        notes=payload.notes,
    )
    store.save_session(db, updated)

    entry = updated.mood_entries[-1]
    return MoodRead(
        entry=entry,
        noise_description=describe_noise(entry.noise_level),
        stressful_noise=is_stressful_noise(entry.noise_level),
        session=updated,
    )


@router.post("/{session_id}/end", response_model=SessionEndRead)
def finish_session(session_id: str, payload: SessionEnd | None = None, db: Session = Depends(get_db)):
    """
    End a walk: summarize it, fold its clusters into the zone stores and
    persist session + zones together.
    """
    session = _get_or_404(db, session_id)
    end_time = payload.end_time if payload and payload.end_time is not None else now_ms()
    # Claim first so a concurrent /end cannot merge the same clusters twice
    if session.end_time is not None or not store.claim_session_end(db, session_id, end_time):
        db.rollback()
        raise HTTPException(status_code=409, detail="Session already ended")

    try:
        outcome = end_session(
            session,
            store.load_calm_zones(db),
            store.load_stress_zones(db),
            now_ms=end_time,
            tz_name=settings.timezone,
        )
    except Exception:
        db.rollback()
        raise
    store.complete_session(db, outcome.session, outcome.calm_zones, outcome.stress_zones)

    return SessionEndRead(
        session=outcome.session,
        calm_zones=outcome.calm_zones,
        stress_zones=outcome.stress_zones,
    )
