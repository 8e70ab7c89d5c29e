from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Mood(str, Enum):
    calm = "calm"
    neutral = "neutral"
    stressed = "stressed"


class Location(BaseModel):
    """A single geolocated sample (epoch-ms timestamp)."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    timestamp: int = 0


class MoodEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    location: Location
    mood: Mood
    noise_level: float  # dB
    timestamp: int
    notes: Optional[str] = None


class WalkSession(BaseModel):
    """One walk. Counters always agree with `mood_entries`."""

    id: str
    start_time: int
    end_time: Optional[int] = None
    mood_entries: list[MoodEntry] = Field(default_factory=list)
    calm_count: int = 0
    neutral_count: int = 0
    stress_count: int = 0
    total_distance: Optional[float] = None  # meters
    average_noise: Optional[float] = None  # dB
    summary: Optional[str] = None

    @model_validator(mode="after")
    def _counts_match_entries(self):
        expected = {
            Mood.calm: self.calm_count,
            Mood.neutral: self.neutral_count,
            Mood.stressed: self.stress_count,
        }
        for mood, count in expected.items():
            actual = sum(1 for e in self.mood_entries if e.mood == mood)
            if actual != count:
                raise ValueError(
                    f"{mood.value} count {count} does not match {actual} {mood.value} entries"
                )
        return self


class CalmZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    center: Location
    radius: float = Field(gt=0)  # meters
    calm_score: float = Field(ge=0, le=1)
    visit_count: int = Field(ge=0)
    last_visited: int


class StressZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    center: Location
    radius: float = Field(gt=0)  # meters
    stress_score: float = Field(ge=0, le=1)
    stress_count: int = Field(ge=0)
    last_stressed: int


# --------- API payloads --------- #

class SessionStart(BaseModel):
    """Optional client-supplied start time; defaults to server time."""

    start_time: Optional[int] = None


class MoodCreate(BaseModel):
    location: Location
    mood: Mood
    noise_level: float = Field(ge=0)
    timestamp: Optional[int] = None
    notes: Optional[str] = None


class MoodRead(BaseModel):
    entry: MoodEntry
    noise_description: str
    stressful_noise: bool
    session: WalkSession


class SessionEnd(BaseModel):
    end_time: Optional[int] = None


class SessionEndRead(BaseModel):
    session: WalkSession
    calm_zones: list[CalmZone]
    stress_zones: list[StressZone]
