"""Pydantic schemas for backend availability reports."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Advisory backend status; never used to gate analysis requests."""

    status: Literal["ready", "loading", "busy", "error"]
    message: str
    processing: Optional[bool] = Field(
        None, description="Whether the gateway is waiting on this backend"
    )
    count: Optional[int] = Field(None, description="Requests currently in flight", ge=0)
    details: Optional[Dict[str, Any]] = None
