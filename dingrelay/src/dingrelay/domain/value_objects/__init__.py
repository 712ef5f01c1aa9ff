"""
Value objects for Ding Relay.
"""

from dingrelay.domain.value_objects.client_id import ClientId
from dingrelay.domain.value_objects.event_envelope import EventEnvelope, now_millis

__all__ = ["ClientId", "EventEnvelope", "now_millis"]
