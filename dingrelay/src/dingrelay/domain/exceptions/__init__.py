"""
Domain exceptions for Ding Relay.
"""

from dingrelay.domain.exceptions.relay_exceptions import (
    ConnectionLimitExceeded,
    MalformedSubmissionError,
    RelayError,
    SubmissionError,
)

__all__ = [
    "RelayError",
    "SubmissionError",
    "MalformedSubmissionError",
    "ConnectionLimitExceeded",
]
