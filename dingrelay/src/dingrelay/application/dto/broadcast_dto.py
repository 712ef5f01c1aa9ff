"""
DTOs for event fan-out.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dingrelay.domain.value_objects import ClientId


class BroadcastStatus(Enum):
    """Outcome of one submission."""

    PUBLISHED = "published"
    DROPPED = "dropped"


@dataclass
class BroadcastOutcome:
    """
    Aggregated per-recipient result of one submission.

    Used for diagnostics only; senders never wait on individual deliveries.
    """

    status: BroadcastStatus
    event_kind: str
    attempted: int = 0
    delivered: int = 0
    failed: List[ClientId] = field(default_factory=list)
    server_timestamp: Optional[int] = None

    @property
    def published(self) -> bool:
        return self.status is BroadcastStatus.PUBLISHED

    @classmethod
    def dropped(cls, event_kind: str) -> "BroadcastOutcome":
        return cls(status=BroadcastStatus.DROPPED, event_kind=event_kind)


@dataclass
class Submission:
    """A decoded, structurally valid event submission."""

    event_kind: str
    payload: dict
    sender_id: Optional[str] = None
    size_bytes: int = 0
