"""
Schemas for diagnostics endpoints.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class InfoResponse(BaseModel):
    """Read-only diagnostics snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    connected_clients: int = Field(..., alias="connectedClients")
    supported_events: List[str] = Field(..., alias="supportedEvents")
    port: int = Field(..., description="WebSocket listening port")


class PortResponse(BaseModel):
    """Listening port, for UI extensions that build the WebSocket URL."""

    port: int
