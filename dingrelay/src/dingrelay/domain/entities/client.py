"""
Client entity - represents one admitted connection.
"""

from datetime import datetime, timezone
from typing import Optional

from dingrelay.domain.endpoint import Endpoint
from dingrelay.domain.value_objects import ClientId


class Client:
    """
    Client entity pairing a ClientId with its Endpoint.

    Exactly one Client exists per ClientId while the connection lives.

    Attributes:
        id: Unique client identifier
        endpoint: Writable handle for the connection
        connected_at: Admission timestamp
    """

    def __init__(
        self,
        endpoint: Endpoint,
        client_id: Optional[ClientId] = None,
        connected_at: Optional[datetime] = None,
    ):
        """
        Initialize Client entity.

        Args:
            endpoint: Endpoint used to push frames to the client
            client_id: Optional client ID (generated if not provided)
            connected_at: Optional admission timestamp
        """
        self.id: ClientId = client_id or ClientId.generate()
        self.endpoint: Endpoint = endpoint
        self.connected_at: datetime = connected_at or datetime.now(timezone.utc)

    def connection_age_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds since admission."""
        return ((now or datetime.now(timezone.utc)) - self.connected_at).total_seconds()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Client):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Client(id={self.id}, connected_at={self.connected_at.isoformat()})"
