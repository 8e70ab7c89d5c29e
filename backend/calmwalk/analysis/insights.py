"""Natural-language summary of one walk session.

Each heuristic looks at the full entry list independently and contributes at
most one sentence; sentences are joined in a fixed order.
"""

from typing import Sequence

from calmwalk.analysis.clustering import cluster_entries
from calmwalk.core.constants import (
    AFTERNOON_START_HOUR,
    EVENING_START_HOUR,
    INSIGHT_CLUSTER_RADIUS_M,
    MIN_LOCATION_PATTERN_ENTRIES,
    MORNING_START_HOUR,
    TIME_PATTERN_HIGH_RATE,
    TIME_PATTERN_LOW_RATE,
    ZONE_RATE_THRESHOLD,
)
from calmwalk.core.noise import is_stressful_noise
from calmwalk.core.time_utils import local_hour, round_half_up
from calmwalk.schemas.walk import Mood, MoodEntry, WalkSession

NO_DATA_MESSAGE = "No mood data recorded for this walk."

PERIODS = ("morning", "afternoon", "evening")


def _percent(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total else 0


def _stress_rate(entries: Sequence[MoodEntry]) -> float:
    if not entries:
        return 0.0
    return sum(1 for e in entries if e.mood == Mood.stressed) / len(entries)


def period_of_hour(hour: int) -> str:
    if MORNING_START_HOUR <= hour < AFTERNOON_START_HOUR:
        return "morning"
    if AFTERNOON_START_HOUR <= hour < EVENING_START_HOUR:
        return "afternoon"
    return "evening"


def overall_tone(session: WalkSession) -> str:
    total = len(session.mood_entries)
    if session.stress_count > session.calm_count:
        return (
            f"The walk had more stressful moments ({_percent(session.stress_count, total)}%) "
            "than calm ones."
        )
    if session.calm_count > session.stress_count:
        return f"The walk was mostly peaceful ({_percent(session.calm_count, total)}% calm moments)."
    return "The walk had a balanced mix of emotions."


def noise_correlation(entries: Sequence[MoodEntry]) -> str | None:
    loud = [e for e in entries if is_stressful_noise(e.noise_level)]
    loud_stressed = sum(1 for e in loud if e.mood == Mood.stressed)
    if loud_stressed == 0:
        return None
    return (
        f"High noise levels ({loud_stressed} instances) often correlated with stress "
        f"({_percent(loud_stressed, len(loud))}% of the time)."
    )


def time_of_day_pattern(entries: Sequence[MoodEntry], tz_name: str | None = None) -> str | None:
    """Recommend the calmest period when the spread between periods is wide.

    Ties resolve to the earliest period (morning, afternoon, evening).
    """

    buckets: dict[str, list[MoodEntry]] = {name: [] for name in PERIODS}
    for e in entries:
        buckets[period_of_hour(local_hour(e.timestamp, tz_name))].append(e)

    rates = [(name, _stress_rate(buckets[name])) for name in PERIODS]
    best = min(rates, key=lambda r: r[1])
    worst = max(rates, key=lambda r: r[1])

    if best[1] < TIME_PATTERN_LOW_RATE and worst[1] > TIME_PATTERN_HIGH_RATE:
        return f"Consider walking more in the {best[0]} when stress levels are lower."
    return None


def location_pattern(entries: Sequence[MoodEntry]) -> str | None:
    if len(entries) < MIN_LOCATION_PATTERN_ENTRIES:
        return None

    clusters = cluster_entries(entries, INSIGHT_CLUSTER_RADIUS_M)
    if any(c.rate(Mood.stressed) > ZONE_RATE_THRESHOLD for c in clusters):
        return "Some areas consistently triggered stress. Consider avoiding these locations."
    if any(c.rate(Mood.calm) > ZONE_RATE_THRESHOLD for c in clusters):
        return "Some areas consistently provided calm moments. These might be good rest spots."
    return None


def generate_session_insights(session: WalkSession, tz_name: str | None = None) -> str:
    """Summarize a walk session in a few sentences.

    Args:
        session: Completed (or in-progress) session.
        tz_name: IANA timezone for time-of-day bucketing; None or "local"
            uses the system timezone.

    Returns:
        Space-joined insight sentences, or NO_DATA_MESSAGE for an empty session.
    """

    entries = session.mood_entries
    if not entries:
        return NO_DATA_MESSAGE

    insights = [overall_tone(session)]
    for sentence in (
        noise_correlation(entries),
        time_of_day_pattern(entries, tz_name),
        location_pattern(entries),
    ):
        if sentence:
            insights.append(sentence)
    return " ".join(insights)
