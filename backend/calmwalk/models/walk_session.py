from sqlalchemy import Column, BigInteger, Float, Integer, String, JSON
from calmwalk.db import Base


class WalkSessionRecord(Base):
    __tablename__ = "walk_sessions"

    id = Column(String, primary_key=True, index=True)

    # Epoch milliseconds, as delivered by the client
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=True)  # NULL while the walk is active

    # Ordered list of serialized MoodEntry dicts
    mood_entries = Column(JSON, nullable=False, default=list)

    calm_count = Column(Integer, nullable=False, default=0)
    neutral_count = Column(Integer, nullable=False, default=0)
    stress_count = Column(Integer, nullable=False, default=0)

    total_distance = Column(Float, nullable=True)  # meters
    average_noise = Column(Float, nullable=True)   # dB
    summary = Column(String, nullable=True)
