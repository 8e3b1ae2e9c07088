"""
Storefront Backend — Shared Response Schemas
==============================================

What:  Error, message and health payloads used across routers.

Error format (every non-2xx response):
    {
        "error": "Category not found",          # always present
        "message": "connection refused",        # diagnostic detail, optional
        "request_id": "a1b2c3d4"
    }
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(description="Human-readable error description")
    message: Optional[str] = Field(default=None, description="Stringified diagnostic detail")
    details: Optional[Any] = Field(default=None, description="Field-level validation errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class BrandingSaveResponse(BaseModel):
    success: bool = True
    settings: Dict[str, Any]


class HealthResponse(BaseModel):
    """
    Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected, not_configured")
    storage: str = Field(description="Data directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
