"""
Application use cases for Ding Relay.
"""

from dingrelay.application.use_cases.admit_client import AdmitClientUseCase
from dingrelay.application.use_cases.broadcast_event import BroadcastEventUseCase
from dingrelay.application.use_cases.drain_connections import DrainConnectionsUseCase
from dingrelay.application.use_cases.validate_submission import (
    ValidateSubmissionUseCase,
)

__all__ = [
    "AdmitClientUseCase",
    "BroadcastEventUseCase",
    "DrainConnectionsUseCase",
    "ValidateSubmissionUseCase",
]
