from calmwalk.analysis.insights import (
    NO_DATA_MESSAGE,
    generate_session_insights,
    location_pattern,
    noise_correlation,
    period_of_hour,
    time_of_day_pattern,
)
from calmwalk.analysis.sessions import record_mood, start_session
from calmwalk.schemas.walk import Location, Mood, WalkSession

# 2024-05-01T00:00:00Z
MIDNIGHT_MS = 1_714_521_600_000
HOUR_MS = 3_600_000
M_PER_DEG_LAT = 111_194.93


def at(north_m):
    return Location(latitude=52.0 + north_m / M_PER_DEG_LAT, longitude=4.0)


def session_with(samples):
    """samples: (mood, noise_db, hour_utc, north_m)"""
    session = start_session(now_ms=MIDNIGHT_MS, session_id="walk")
    for i, (mood, noise, hour, north_m) in enumerate(samples):
        session = record_mood(
            session, at(north_m), mood, noise, timestamp=MIDNIGHT_MS + hour * HOUR_MS + i
        )
    return session


def test_empty_session_message():
    session = WalkSession(id="empty", start_time=0, mood_entries=[])
    assert generate_session_insights(session) == "No mood data recorded for this walk."
    assert generate_session_insights(session) == NO_DATA_MESSAGE


def test_full_summary():
    session = session_with(
        [
            (Mood.calm, 40.0, 8, 0),
            (Mood.calm, 42.0, 9, 5),
            (Mood.stressed, 72.0, 20, 1000),
            (Mood.stressed, 75.0, 21, 1005),
        ]
    )
    assert generate_session_insights(session, "UTC") == (
        "The walk had a balanced mix of emotions. "
        "High noise levels (2 instances) often correlated with stress (100% of the time). "
        "Consider walking more in the morning when stress levels are lower. "
        "Some areas consistently triggered stress. Consider avoiding these locations."
    )


def test_stressful_tone_rounds_percentage():
    session = session_with(
        [
            (Mood.stressed, 50.0, 13, 0),
            (Mood.stressed, 50.0, 13, 200),
            (Mood.calm, 50.0, 13, 400),
        ]
    )
    summary = generate_session_insights(session, "UTC")
    assert summary.startswith("The walk had more stressful moments (67%) than calm ones.")


def test_peaceful_tone():
    session = session_with([(Mood.calm, 30.0, 10, 0), (Mood.neutral, 30.0, 10, 300)])
    assert generate_session_insights(session, "UTC") == "The walk was mostly peaceful (50% calm moments)."


def test_noise_correlation_counts_only_loud_entries():
    session = session_with(
        [
            (Mood.stressed, 65.0, 10, 0),
            (Mood.calm, 80.0, 10, 0),
            (Mood.calm, 62.0, 10, 0),
            (Mood.stressed, 60.0, 10, 0),  # not above the threshold
        ]
    )
    assert noise_correlation(session.mood_entries) == (
        "High noise levels (1 instances) often correlated with stress (33% of the time)."
    )


def test_no_noise_sentence_without_loud_stress():
    session = session_with([(Mood.calm, 90.0, 10, 0), (Mood.stressed, 50.0, 10, 0)])
    assert noise_correlation(session.mood_entries) is None


def test_period_buckets():
    assert period_of_hour(5) == "evening"
    assert period_of_hour(6) == "morning"
    assert period_of_hour(11) == "morning"
    assert period_of_hour(12) == "afternoon"
    assert period_of_hour(17) == "afternoon"
    assert period_of_hour(18) == "evening"
    assert period_of_hour(0) == "evening"


def test_time_pattern_needs_wide_spread():
    # afternoon 1/3 stressed: worst rate 0.33 is not above 0.4
    session = session_with(
        [
            (Mood.calm, 40.0, 8, 0),
            (Mood.stressed, 40.0, 14, 0),
            (Mood.calm, 40.0, 14, 0),
            (Mood.calm, 40.0, 15, 0),
        ]
    )
    assert time_of_day_pattern(session.mood_entries, "UTC") is None


def test_time_pattern_recommends_calmest_period():
    session = session_with(
        [
            (Mood.stressed, 40.0, 7, 0),
            (Mood.stressed, 40.0, 8, 0),
            (Mood.calm, 40.0, 13, 0),
            (Mood.calm, 40.0, 19, 0),
        ]
    )
    # afternoon and evening both 0; ties go to the earlier period
    assert time_of_day_pattern(session.mood_entries, "UTC") == (
        "Consider walking more in the afternoon when stress levels are lower."
    )


def test_time_pattern_uses_timezone():
    # 05:00 UTC is 07:00 and 10:00 UTC is 12:00 in Amsterdam (CEST)
    session = session_with([(Mood.stressed, 40.0, 5, 0), (Mood.calm, 40.0, 10, 0)])
    assert time_of_day_pattern(session.mood_entries, "UTC") == (
        "Consider walking more in the morning when stress levels are lower."
    )
    assert time_of_day_pattern(session.mood_entries, "Europe/Amsterdam") == (
        "Consider walking more in the afternoon when stress levels are lower."
    )


def test_location_pattern_calm_areas():
    session = session_with(
        [(Mood.calm, 40.0, 10, 0), (Mood.calm, 40.0, 10, 10), (Mood.neutral, 40.0, 10, 500)]
    )
    assert location_pattern(session.mood_entries) == (
        "Some areas consistently provided calm moments. These might be good rest spots."
    )


def test_location_pattern_prefers_stress():
    session = session_with(
        [(Mood.calm, 40.0, 10, 0), (Mood.calm, 40.0, 10, 10), (Mood.stressed, 40.0, 10, 500)]
    )
    assert location_pattern(session.mood_entries).startswith("Some areas consistently triggered stress.")


def test_location_pattern_needs_three_entries():
    session = session_with([(Mood.stressed, 40.0, 10, 0), (Mood.stressed, 40.0, 10, 5)])
    assert location_pattern(session.mood_entries) is None
