"""
API Response Schemas

Pydantic models for the JSON bodies returned by the endpoints. Link creation
accepts form fields, so there is no request model; errors use the
problem-details bodies built in app.core.exception_handlers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LinkProperties(BaseModel):
    """Properties of a created short URL."""
    safe: bool = Field(..., description="True if Safe Browsing reported no threats")


class ShortenResponse(BaseModel):
    """Response model for the link creation endpoint."""
    url: str = Field(..., description="The complete short URL")
    properties: LinkProperties


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    key: str
    original_url: str
    created_at: str
    click_count: int
    safe: bool
    sponsor: Optional[str] = None
