"""Pydantic models for health endpoints."""

from typing import Optional
from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Response model for service health checks."""

    status: str = "healthy"
    storage_backend: str = "memory"
    storage_reachable: bool = True
    error: Optional[str] = None
