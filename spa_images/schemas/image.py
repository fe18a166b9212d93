"""
SPA Images Backend: Pydantic Response Schemas
==============================================

What:  Pydantic models describing what the API sends back.
How:   Built from ORM rows with model_validate (from_attributes) and dumped
       to plain dicts for JSONResponse.

Request bodies are deliberately NOT modelled here: image payloads are read
as raw JSON and checked by services.validation so that every rule
violation is reported at once and malformed JSON degrades to {}.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ImageResponse(BaseModel):
    """
    What:  Full representation of a stored image.
    Who:   Items of GET /images and the body of GET /images/{id}.
    """
    id: int = Field(description="Identifier assigned by the store")
    image_url: Optional[str] = Field(default=None, description="http(s) URL or data:image/... payload")
    description: Optional[str] = Field(default=None, description="Free text, max 200 characters")
    rating: Optional[int] = Field(default=None, description="Integer rating 1-5")
    position: int = Field(default=0, description="Display position (ascending)")

    model_config = {"from_attributes": True}


class CreatedResponse(BaseModel):
    """Body of a successful POST /images (HTTP 201)."""
    ok: bool = True


class ValidationErrorResponse(BaseModel):
    """Body of every 400 response: the list of human-readable messages."""
    errori: List[str] = Field(description="All rule violations found in the payload")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and container probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
