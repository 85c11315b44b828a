"""
Service Model

An externally managed HTTP service whose health endpoint is probed.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


class ServiceEnvironment(str, Enum):
    """Deployment environment tag."""
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class ServiceBase(BaseModel):
    """Service fields shared across create/read operations."""

    name: str = Field(..., min_length=1, max_length=100)
    base_url: str = Field(..., description="Scheme and host, e.g. https://api.example.com")
    health_path: str = Field(default="/health", description="Path appended to base_url")
    expected_latency_min_ms: int = Field(..., ge=0, le=60000)
    expected_latency_max_ms: int = Field(..., ge=0, le=60000)
    env: ServiceEnvironment = Field(default=ServiceEnvironment.DEV)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Base URL must be HTTP or HTTPS."""
        v = v.strip()
        if not v.startswith(("http://", "https://")) or len(v.split("://", 1)[1]) == 0:
            raise ValueError("base_url must be a valid HTTP/HTTPS URL")
        return v

    @model_validator(mode="after")
    def validate_latency_bounds(self) -> "ServiceBase":
        if self.expected_latency_max_ms <= self.expected_latency_min_ms:
            raise ValueError("expected_latency_max_ms must be greater than expected_latency_min_ms")
        return self

    @property
    def health_url(self) -> str:
        return f"{self.base_url}{self.health_path}"


class ServiceCreate(ServiceBase):
    """Schema for registering a service."""


class Service(ServiceBase):
    """A registered service as stored."""

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None
