"""Walk session lifecycle: start, record moods, finish.

Sessions are treated as values; every operation returns a new WalkSession.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Sequence

from calmwalk.analysis.insights import generate_session_insights
from calmwalk.analysis.zones import update_zones_from_session
from calmwalk.core.geo import distance_m
from calmwalk.core.time_utils import now_ms as _now_ms
from calmwalk.schemas.walk import (
    CalmZone,
    Location,
    Mood,
    MoodEntry,
    StressZone,
    WalkSession,
)

logger = logging.getLogger(__name__)

_COUNT_FIELD = {
    Mood.calm: "calm_count",
    Mood.neutral: "neutral_count",
    Mood.stressed: "stress_count",
}


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    """Everything that must be persisted together when a walk ends."""

    session: WalkSession
    calm_zones: list[CalmZone]
    stress_zones: list[StressZone]


def start_session(now_ms: int | None = None, session_id: str | None = None) -> WalkSession:
    return WalkSession(
        id=session_id or str(uuid.uuid4()),
        start_time=_now_ms() if now_ms is None else now_ms,
    )


def record_mood(
    session: WalkSession,
    location: Location,
    mood: Mood,
    noise_level: float,
    *,
    timestamp: int | None = None,
    notes: str | None = None,
    entry_id: str | None = None,
) -> WalkSession:
    """Append a mood entry and bump the matching counter.

    Raises:
        ValueError: If the session has already ended.
    """

    if session.end_time is not None:
        raise ValueError(f"session {session.id} has already ended")

    entry = MoodEntry(
        id=entry_id or str(uuid.uuid4()),
        location=location,
        mood=mood,
        noise_level=noise_level,
        timestamp=_now_ms() if timestamp is None else timestamp,
        notes=notes,
    )
    field = _COUNT_FIELD[mood]
    return session.model_copy(
        update={
            "mood_entries": [*session.mood_entries, entry],
            field: getattr(session, field) + 1,
        }
    )


def session_stats(entries: Sequence[MoodEntry]) -> tuple[float, float | None]:
    """Return (path length in meters over consecutive entries, mean noise dB)."""

    total = 0.0
    for a, b in zip(entries, entries[1:]):
        total += distance_m(a.location, b.location)
    if not entries:
        return total, None
    return total, sum(e.noise_level for e in entries) / len(entries)


def end_session(
    session: WalkSession,
    calm_zones: Iterable[CalmZone | dict],
    stress_zones: Iterable[StressZone | dict],
    *,
    now_ms: int | None = None,
    tz_name: str | None = None,
) -> SessionOutcome:
    """Close a session, summarize it and fold it into the zone stores.

    The returned session and zone lists must be saved in one transaction.
    """

    stamp = _now_ms() if now_ms is None else now_ms
    total_distance, average_noise = session_stats(session.mood_entries)
    completed = session.model_copy(
        update={
            "end_time": stamp,
            "total_distance": total_distance,
            "average_noise": average_noise,
        }
    )
    completed = completed.model_copy(
        update={"summary": generate_session_insights(completed, tz_name)}
    )
    zones = update_zones_from_session(completed, calm_zones, stress_zones, now_ms=stamp)

    logger.info(
        "session %s ended: %d entries, %d calm zones, %d stress zones",
        completed.id,
        len(completed.mood_entries),
        len(zones.calm_zones),
        len(zones.stress_zones),
    )
    return SessionOutcome(
        session=completed,
        calm_zones=zones.calm_zones,
        stress_zones=zones.stress_zones,
    )
