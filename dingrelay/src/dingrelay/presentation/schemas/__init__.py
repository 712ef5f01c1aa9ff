"""
Request/Response schemas for the Ding Relay API.
"""

from dingrelay.presentation.schemas.info import InfoResponse, PortResponse
from dingrelay.presentation.schemas.publish import (
    ErrorResponse,
    PublishRequest,
    PublishResponse,
)

__all__ = [
    "ErrorResponse",
    "InfoResponse",
    "PortResponse",
    "PublishRequest",
    "PublishResponse",
]
