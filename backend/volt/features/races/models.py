"""
Race (track) model.

A race is a track in the user's library, either uploaded as GPX or
promoted from a synthesis result. Its point list and raw metrics are
written once and never updated.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Integer, ForeignKey, JSON
import uuid

from volt.db.base import Base


class Race(Base):
    """
    Stored track with metrics computed at creation time.

    `points` holds the cleaned point list as JSON
    (`[{"lat", "lon", "ele", "time"?}, ...]`).
    """

    __tablename__ = "races"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    points = Column(JSON, nullable=False)

    # Provenance
    source = Column(String(20), nullable=False, default="upload")  # "upload" | "synthesis"
    filename = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    source_job_id = Column(String(36), nullable=True)
    source_result_id = Column(String(36), nullable=True)

    # Raw metrics
    distance_km = Column(Float, nullable=False)
    elevation_gain_m = Column(Float, nullable=False)
    elevation_loss_m = Column(Float, nullable=False)
    itra_effort_distance = Column(Float, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Race {self.id} ({self.name})>"
