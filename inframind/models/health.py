from enum import Enum
from typing import Optional
from pydantic import BaseModel


class DependencyStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class DependencyHealth(BaseModel):
    """Reachability of one of our own backing services (Postgres, Redis)."""
    dependency: str
    status: DependencyStatus
    latency_ms: float
    message: Optional[str] = None
