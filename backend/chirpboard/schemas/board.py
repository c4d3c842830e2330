"""
Chirpboard Backend: Pydantic Response Schemas
=============================================

What:  Response models for the board API and the shared error format.
How:   FastAPI serializes handler return values through these models and
       documents them in the OpenAPI schema.

Request bodies are not modelled here: they go through the Field-Shape
Validator (middleware/strong_params.py), which needs the raw JSON to apply
its exact-kind rules.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RegisteredUserResponse(BaseModel):
    """Returned by POST /user."""
    email: str = Field(description="Account email")
    username: str = Field(description="Public handle")
    name: str = Field(description="Display name: first and last name")


class LoginResponse(BaseModel):
    """Returned by POST /user/isValid alongside the session cookie."""
    name: str = Field(description="Display name")
    username: str = Field(description="Public handle")


class EntryCreatedResponse(BaseModel):
    """Returned by POST /entry with HTTP 201."""
    id: str = Field(description="24-character id of the new entry")


class EntrySummary(BaseModel):
    """
    Public projection of an entry used by GET /entry.

    Like counts and row ids are not exposed.
    """
    message: str
    username: str

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {
            "error": "validation_error",
            "message": "Entry validation failed: message: message needs to be less than 500 characters",
            "details": {"entity": "Entry", "violations": [...]},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    live_listeners: int = Field(description="Open connections on the live channel")
    uptime_seconds: float = Field(description="Seconds since the service started")
