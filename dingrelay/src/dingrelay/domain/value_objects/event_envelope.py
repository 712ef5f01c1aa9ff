"""
EventEnvelope value object - a validated, server-stamped event.
"""

import copy
import time
from typing import Any, Dict, Optional


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class EventEnvelope:
    """
    Value object representing one broadcastable event.

    Envelopes are immutable once created and never stored: they are
    built, fanned out and discarded.

    Attributes:
        event_kind: Member of the allowed event vocabulary
        server_timestamp: Epoch milliseconds assigned by the relay
        payload: Opaque structured value from the sender
    """

    WIRE_KIND = "notification"

    def __init__(
        self,
        event_kind: str,
        payload: Optional[Dict[str, Any]] = None,
        server_timestamp: Optional[int] = None,
    ):
        """
        Initialize EventEnvelope.

        Args:
            event_kind: Event kind (already checked against the vocabulary)
            payload: Event payload (defaults to empty object)
            server_timestamp: Optional timestamp (defaults to now)

        Raises:
            ValueError: If event_kind is empty or payload is not a dict
        """
        if not isinstance(event_kind, str) or not event_kind:
            raise ValueError("Event kind must be a non-empty string")

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValueError("Event payload must be a dictionary")

        self._event_kind = event_kind
        self._payload = copy.deepcopy(payload)
        self._server_timestamp = (
            server_timestamp if server_timestamp is not None else now_millis()
        )

    @property
    def event_kind(self) -> str:
        return self._event_kind

    @property
    def server_timestamp(self) -> int:
        return self._server_timestamp

    @property
    def payload(self) -> Dict[str, Any]:
        """Get payload (immutable copy)."""
        return copy.deepcopy(self._payload)

    def to_wire(self) -> Dict[str, Any]:
        """Render the fan-out frame sent to each recipient."""
        return {
            "kind": self.WIRE_KIND,
            "eventKind": self._event_kind,
            "serverTimestamp": self._server_timestamp,
            "payload": self.payload,
        }

    def __repr__(self) -> str:
        return (
            f"EventEnvelope(event_kind={self._event_kind}, "
            f"server_timestamp={self._server_timestamp})"
        )
