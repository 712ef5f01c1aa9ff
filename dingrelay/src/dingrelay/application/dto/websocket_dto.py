"""
DTOs for frames the relay writes to WebSocket clients.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class _Frame(BaseModel):
    """Base for outbound frames, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class WelcomeFrame(_Frame):
    """
    Handshake sent right after admission.

    Attributes:
        client_id: Identifier assigned to the connection
        supported_events: Current allowed event vocabulary
    """

    kind: str = Field(default="welcome")
    client_id: str = Field(..., alias="clientId")
    supported_events: List[str] = Field(..., alias="supportedEvents")


class ErrorFrame(_Frame):
    """Client error reported on the submitting connection only."""

    kind: str = Field(default="error")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")


class HeartbeatFrame(_Frame):
    """No-op frame that keeps idle connections alive."""

    kind: str = Field(default="heartbeat")
    server_timestamp: int = Field(..., alias="serverTimestamp")


class ShutdownFrame(_Frame):
    """Closure notice sent to every client while draining."""

    kind: str = Field(default="shutdown")
    message: str = Field(default="Server is shutting down")
    code: int = Field(default=1001)
