"""
Prediction Report Models

The heuristic reliability report attached 1:1 to a terminal health run.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Heuristic reliability posture."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GeneratedConfigs(BaseModel):
    """Infrastructure configuration snippets suggested by a report."""

    nginx_rate_limit_config: str | None = None
    docker_resource_config: str | None = None
    k8s_resources_config: str | None = None


class ReportContent(BaseModel):
    """Output of a report generator, before it is linked to a run."""

    title: str = Field(..., max_length=200)
    summary: str = Field(..., max_length=1000)
    risk_level: RiskLevel
    timeline: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    generated_configs: GeneratedConfigs = Field(default_factory=GeneratedConfigs)


class PredictionReport(ReportContent):
    """A report as stored. Never mutated after creation."""

    id: UUID = Field(default_factory=uuid4)
    service_id: UUID
    health_run_id: UUID
    created_at: datetime | None = None
