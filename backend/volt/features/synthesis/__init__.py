"""
Route synthesis module.

Usage:
    from volt.features.synthesis import SynthesisService, synthesis_runner

Components:
- SynthesisJob, SynthesisResultRecord: SQLAlchemy models
- TrailNetwork: trail graph built from stored tracks inside a box
- RouteSearch / synthesize: candidate enumeration and ranking
- SynthesisService: job creation, execution, result promotion
- synthesis_runner: background queue worker
"""

from .models import JobStatus, SynthesisJob, SynthesisResultRecord
from .network import Bounds, TrailNetwork, Way, clip_to_bounds
from .search import Candidate, RouteSearch, SearchOutcome, SearchParams, synthesize
from .repository import SynthesisJobRepository, SynthesisResultRepository
from .schemas import (
    BoundingBox,
    SynthesisRequest,
    SynthesisJobResponse,
    SynthesisResultResponse,
    SaveResultRequest,
)
from .service import SynthesisService, SynthesisError
from .worker import BackgroundSynthesisRunner, JobQueueManager, synthesis_runner

__all__ = [
    # Models
    "JobStatus",
    "SynthesisJob",
    "SynthesisResultRecord",
    # Engine
    "Bounds",
    "TrailNetwork",
    "Way",
    "clip_to_bounds",
    "Candidate",
    "RouteSearch",
    "SearchOutcome",
    "SearchParams",
    "synthesize",
    # Repositories
    "SynthesisJobRepository",
    "SynthesisResultRepository",
    # Schemas
    "BoundingBox",
    "SynthesisRequest",
    "SynthesisJobResponse",
    "SynthesisResultResponse",
    "SaveResultRequest",
    # Service
    "SynthesisService",
    "SynthesisError",
    # Worker
    "BackgroundSynthesisRunner",
    "JobQueueManager",
    "synthesis_runner",
]
