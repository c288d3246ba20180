"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import List, Literal
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    api_prefix: str = Field(default="/api/v1", description="Mount point for API routes")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./volt.db",
        description="Database connection URL"
    )

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # === Auth ===
    session_ttl_hours: int = Field(default=24, ge=1, description="Bearer token lifetime")
    password_hash_iterations: int = Field(default=390_000, ge=1)

    # === Uploads ===
    max_upload_mb: int = Field(default=50, ge=1, description="GPX upload size cap")

    # === GPX parsing ===
    gpx_max_points: int = Field(default=50_000, ge=2)
    gpx_min_point_distance_m: float = Field(default=5.0, ge=0.0)

    # === Analytics ===
    default_window_size: int = Field(default=100, description="Rolling window (m)")
    min_window_size: int = Field(default=10)
    max_window_size: int = Field(default=1000)

    # === Synthesis ===
    synthesis_max_results: int = Field(default=50, ge=1)
    synthesis_min_bbox_area_km2: float = Field(default=1.0, ge=0.0)
    synthesis_max_bbox_area_km2: float = Field(default=10_000.0, gt=0.0)
    synthesis_min_similarity: float = Field(default=0.5, ge=0.0, le=1.0)
    synthesis_effort_tolerance: float = Field(
        default=0.2, gt=0.0, lt=1.0,
        description="Accepted relative deviation from the reference effort"
    )
    synthesis_snap_m: float = Field(
        default=25.0, gt=0.0,
        description="Grid size used to merge vertices of overlapping tracks"
    )
    synthesis_max_start_nodes: int = Field(default=40, ge=1)
    synthesis_max_expansions: int = Field(
        default=20_000, ge=1,
        description="Search budget (edge expansions) per start node"
    )
    synthesis_max_candidates: int = Field(
        default=500, ge=1,
        description="Distinct walks collected before scoring"
    )
    synthesis_corpus_scope: Literal["user", "all"] = Field(
        default="user",
        description="Which stored tracks form the trail network"
    )
    synthesis_poll_interval_seconds: float = Field(default=1.0, gt=0.0)

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
