"""Load/save walk sessions and zone stores.

Zone stores are replaced as a whole (copy-on-write). `complete_session` writes
a finished session and both stores in a single commit so a crash can never
leave zones updated for a session that was not saved.
"""

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.orm import Session

from calmwalk.core.constants import EXPORT_VERSION
from calmwalk.models.walk_session import WalkSessionRecord
from calmwalk.models.zone import CalmZoneRecord, StressZoneRecord
from calmwalk.schemas.walk import CalmZone, StressZone, WalkSession


# --------- Sessions --------- #

def _session_from_record(row: WalkSessionRecord) -> WalkSession:
    return WalkSession(
        id=row.id,
        start_time=row.start_time,
        end_time=row.end_time,
        mood_entries=row.mood_entries or [],
        calm_count=row.calm_count,
        neutral_count=row.neutral_count,
        stress_count=row.stress_count,
        total_distance=row.total_distance,
        average_noise=row.average_noise,
        summary=row.summary,
    )


def _stage_session(db: Session, session: WalkSession) -> None:
    data = session.model_dump(mode="json")
    row = db.get(WalkSessionRecord, session.id)
    if row is None:
        row = WalkSessionRecord(id=session.id)
        db.add(row)
    for key, value in data.items():
        if key != "id":
            setattr(row, key, value)


def load_sessions(db: Session) -> list[WalkSession]:
    rows = db.query(WalkSessionRecord).order_by(WalkSessionRecord.start_time).all()
    return [_session_from_record(r) for r in rows]


def get_session(db: Session, session_id: str) -> WalkSession | None:
    row = db.get(WalkSessionRecord, session_id)
    return _session_from_record(row) if row else None


def save_session(db: Session, session: WalkSession) -> WalkSession:
    """Insert or replace one session."""
    _stage_session(db, session)
    db.commit()
    return session


def claim_session_end(db: Session, session_id: str, end_time: int) -> bool:
    """Mark a session ended unless another request already did.

    Conditional UPDATE so concurrent end requests cannot both proceed; the
    row stays locked until the caller commits or rolls back.
    """
    updated = (
        db.query(WalkSessionRecord)
        .filter(WalkSessionRecord.id == session_id, WalkSessionRecord.end_time.is_(None))
        .update({WalkSessionRecord.end_time: end_time}, synchronize_session=False)
    )
    return updated == 1


# --------- Zones --------- #

def load_calm_zones(db: Session) -> list[CalmZone]:
    rows = db.query(CalmZoneRecord).order_by(CalmZoneRecord.position).all()
    return [
        CalmZone(
            id=r.id,
            center=r.center,
            radius=r.radius,
            calm_score=r.calm_score,
            visit_count=r.visit_count,
            last_visited=r.last_visited,
        )
        for r in rows
    ]


def load_stress_zones(db: Session) -> list[StressZone]:
    rows = db.query(StressZoneRecord).order_by(StressZoneRecord.position).all()
    return [
        StressZone(
            id=r.id,
            center=r.center,
            radius=r.radius,
            stress_score=r.stress_score,
            stress_count=r.stress_count,
            last_stressed=r.last_stressed,
        )
        for r in rows
    ]


def _stage_zones(
    db: Session,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
) -> None:
    for model, zones in ((CalmZoneRecord, calm_zones), (StressZoneRecord, stress_zones)):
        keep = [z.id for z in zones]
        db.query(model).filter(model.id.not_in(keep)).delete(synchronize_session=False)
        # merge() upserts and reuses rows already loaded in this session
        for i, z in enumerate(zones):
            db.merge(model(position=i, **z.model_dump(mode="json")))


def replace_zones(
    db: Session,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
) -> None:
    _stage_zones(db, calm_zones, stress_zones)
    db.commit()


def complete_session(
    db: Session,
    session: WalkSession,
    calm_zones: Sequence[CalmZone],
    stress_zones: Sequence[StressZone],
) -> None:
    """Persist a finished session together with the zone stores it produced."""
    try:
        _stage_session(db, session)
        _stage_zones(db, calm_zones, stress_zones)
        db.commit()
    except Exception:
        db.rollback()
        raise


# --------- Export / reset --------- #

def export_data(db: Session) -> dict:
    return {
        "sessions": [s.model_dump(mode="json") for s in load_sessions(db)],
        "calm_zones": [z.model_dump(mode="json") for z in load_calm_zones(db)],
        "stress_zones": [z.model_dump(mode="json") for z in load_stress_zones(db)],
        "export_date": datetime.now(timezone.utc).isoformat(),
        "version": EXPORT_VERSION,
    }


def clear_zones(db: Session) -> None:
    replace_zones(db, [], [])


def clear_all_data(db: Session) -> None:
    db.query(WalkSessionRecord).delete()
    _stage_zones(db, [], [])
    db.commit()
