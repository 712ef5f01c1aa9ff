"""
Relay exceptions.

Per-recipient faults never surface as exceptions; they are converted into
registry cleanup by the broadcaster. Only client-facing and admission
faults are modeled here.
"""


class RelayError(Exception):
    """Base exception for relay errors."""

    pass


class SubmissionError(RelayError):
    """Base exception for rejected event submissions."""

    pass


class MalformedSubmissionError(SubmissionError):
    """Raised when a submission cannot be decoded or lacks an event kind."""

    code = "MALFORMED_SUBMISSION"

    def __init__(self, reason: str):
        """
        Initialize MalformedSubmissionError.

        Args:
            reason: Human-readable explanation sent back to the client
        """
        super().__init__(f"Malformed submission: {reason}")
        self.reason = reason


class ConnectionLimitExceeded(RelayError):
    """Raised when admitting a client would exceed the connection limit."""

    code = "CONNECTION_LIMIT_EXCEEDED"

    def __init__(self, message: str, limit_type: str = "global"):
        super().__init__(message)
        self.limit_type = limit_type
