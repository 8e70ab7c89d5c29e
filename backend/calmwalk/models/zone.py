from sqlalchemy import Column, BigInteger, Float, Integer, String, JSON
from calmwalk.db import Base


class CalmZoneRecord(Base):
    __tablename__ = "calm_zones"

    id = Column(String, primary_key=True, index=True)
    # Store order; the first nearby zone wins when merging
    position = Column(Integer, nullable=False, default=0)
    center = Column(JSON, nullable=False)  # serialized Location
    radius = Column(Float, nullable=False)  # meters
    calm_score = Column(Float, nullable=False)
    visit_count = Column(Integer, nullable=False)
    last_visited = Column(BigInteger, nullable=False)


class StressZoneRecord(Base):
    __tablename__ = "stress_zones"

    id = Column(String, primary_key=True, index=True)
    # Store order; the first nearby zone wins when merging
    position = Column(Integer, nullable=False, default=0)
    center = Column(JSON, nullable=False)  # serialized Location
    radius = Column(Float, nullable=False)  # meters
    stress_score = Column(Float, nullable=False)
    stress_count = Column(Integer, nullable=False)
    last_stressed = Column(BigInteger, nullable=False)
