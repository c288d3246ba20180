"""
Synthesis models.

A job records one generate request and its lifecycle; results are written
by the background worker in a single batch when the job completes.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Integer, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
import uuid

from volt.db.base import Base


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class SynthesisJob(Base):
    """
    Route synthesis request.

    `reference_race_id` is not a foreign key: deleting the reference track
    must not take its finished results with it.
    """

    __tablename__ = "synthesis_jobs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reference_race_id = Column(String(36), nullable=False)

    # Request
    bounding_box = Column(JSON, nullable=False)  # {"north", "south", "east", "west"}
    rolling_window = Column(Integer, nullable=False)
    max_results = Column(Integer, nullable=False)

    # Lifecycle
    status = Column(String(20), nullable=False, default=JobStatus.QUEUED.value, index=True)
    error = Column(Text, nullable=True)
    candidates_considered = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    results = relationship(
        "SynthesisResultRecord",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="SynthesisResultRecord.rank",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<SynthesisJob {self.id} ({self.status})>"


class SynthesisResultRecord(Base):
    """One ranked candidate route of a job."""

    __tablename__ = "synthesis_results"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id = Column(String(36), ForeignKey("synthesis_jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    rank = Column(Integer, nullable=False)

    distance_km = Column(Float, nullable=False)
    elevation_gain_m = Column(Float, nullable=False)
    elevation_loss_m = Column(Float, nullable=False)
    itra_effort_distance = Column(Float, nullable=False)
    similarity_score = Column(Float, nullable=False)

    points = Column(JSON, nullable=False)  # [{"lat", "lon", "ele"}, ...]

    job = relationship("SynthesisJob", back_populates="results")

    def __repr__(self):
        return f"<SynthesisResult {self.id} job={self.job_id} score={self.similarity_score}>"
