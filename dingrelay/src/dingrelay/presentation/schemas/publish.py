"""
Schemas for event publishing endpoints.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PublishRequest(BaseModel):
    """
    Request schema for publishing events (documentation only).

    POST /publish reads the raw body so a missing eventKind is reported
    as MALFORMED_SUBMISSION instead of a generic 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    sender_id: Optional[str] = Field(
        None, alias="senderId", description="Client excluded from delivery"
    )
    event_kind: str = Field(..., alias="eventKind", description="Event kind")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Event payload")


class PublishResponse(BaseModel):
    """
    Response schema for event publishing.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="published or dropped")
    event_kind: str = Field(..., alias="eventKind")
    attempted: int = Field(..., description="Recipients attempted")
    delivered: int = Field(..., description="Recipients that accepted the event")
    server_timestamp: Optional[int] = Field(None, alias="serverTimestamp")


class ErrorResponse(BaseModel):
    """Client error body."""

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")
