"""
Submission validation use case.

Decodes an inbound submission and validates it for:
- JSON structure
- Size limits
- Required event kind
- Payload shape (supported kinds only)

An unknown kind is dropped by the broadcaster rather than reported to the
sender, so nothing past the event kind is checked for it.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Union

from dingrelay.application.dto import Submission
from dingrelay.domain.exceptions import MalformedSubmissionError

RawSubmission = Union[str, bytes, Dict[str, Any]]

# Current field name first, then the legacy plugin protocol name
EVENT_KIND_FIELDS = ("eventKind", "event")
PAYLOAD_FIELDS = ("payload", "data")
SENDER_FIELDS = ("senderId",)
CONTROL_FIELDS = ("kind", "type")
CONTROL_TYPES = frozenset({"ping"})


class ValidateSubmissionUseCase:
    """
    Use case for decoding and validating event submissions.

    Produces either a well-formed Submission or a MalformedSubmissionError.
    """

    def __init__(
        self,
        supported_events: Iterable[str],
        max_message_size: int = 65_536,
    ):
        """
        Initialize submission validator.

        Args:
            supported_events: Allowed event vocabulary
            max_message_size: Maximum encoded submission size in bytes
        """
        self._supported_events: List[str] = list(supported_events)
        self.max_message_size = max_message_size

    @property
    def supported_events(self) -> List[str]:
        """Allowed event vocabulary (copy)."""
        return list(self._supported_events)

    def is_supported(self, event_kind: str) -> bool:
        """Check whether an event kind may be broadcast."""
        return event_kind in self._supported_events

    def control_type(self, message: Dict[str, Any]) -> Optional[str]:
        """
        Identify control frames (ping) that are not event submissions.

        Args:
            message: Decoded frame

        Returns:
            Control type, or None for an event submission
        """
        for name in CONTROL_FIELDS:
            value = message.get(name)
            if isinstance(value, str) and value in CONTROL_TYPES:
                return value
        return None

    def decode(self, raw: RawSubmission) -> Dict[str, Any]:
        """
        Decode a raw submission into a dictionary.

        Args:
            raw: JSON text, JSON bytes, or an already-decoded dict

        Returns:
            Decoded submission

        Raises:
            MalformedSubmissionError: If raw is too large, not JSON, or not an object
        """
        if isinstance(raw, dict):
            message = raw
            self._check_size(self._calculate_size(raw))
        else:
            if isinstance(raw, bytes):
                try:
                    raw = raw.decode("utf-8")
                except UnicodeDecodeError:
                    raise MalformedSubmissionError("Body is not valid UTF-8")

            if not isinstance(raw, str):
                raise MalformedSubmissionError("Body must be a JSON object")

            size_bytes = len(raw.encode("utf-8"))
            self._check_size(size_bytes)

            try:
                message = json.loads(raw)
            except json.JSONDecodeError as e:
                raise MalformedSubmissionError(f"Invalid JSON: {e.msg}")

        if not isinstance(message, dict):
            raise MalformedSubmissionError("Body must be a JSON object")

        return message

    def validate(self, raw: RawSubmission) -> Submission:
        """
        Decode and validate an inbound submission.

        Validation steps:
        1. Decode body into a JSON object
        2. Require a non-empty string event kind
        3. Stop for kinds outside the vocabulary; those are dropped, not
           rejected, so their payload and senderId are not inspected
        4. Default a missing payload to an empty object

        Args:
            raw: Raw submission

        Returns:
            Submission with event kind and payload

        Raises:
            MalformedSubmissionError: If the submission is unusable
        """
        message = self.decode(raw)

        event_kind = self._first_present(message, EVENT_KIND_FIELDS)
        if event_kind is None:
            raise MalformedSubmissionError("Missing eventKind")
        if not isinstance(event_kind, str) or not event_kind.strip():
            raise MalformedSubmissionError("eventKind must be a non-empty string")

        size_bytes = self._calculate_size(message)
        if not self.is_supported(event_kind):
            return Submission(event_kind=event_kind, payload={}, size_bytes=size_bytes)

        payload = self._first_present(message, PAYLOAD_FIELDS)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise MalformedSubmissionError("payload must be a JSON object")

        sender_id = self._first_present(message, SENDER_FIELDS)
        if sender_id is not None and not isinstance(sender_id, str):
            raise MalformedSubmissionError("senderId must be a string")

        return Submission(
            event_kind=event_kind,
            payload=payload,
            sender_id=sender_id,
            size_bytes=size_bytes,
        )

    def _check_size(self, size_bytes: int) -> None:
        if size_bytes > self.max_message_size:
            raise MalformedSubmissionError(
                f"Submission too large: {size_bytes} bytes "
                f"(max: {self.max_message_size})"
            )

    @staticmethod
    def _first_present(message: Dict[str, Any], fields) -> Optional[Any]:
        for name in fields:
            if message.get(name) is not None:
                return message[name]
        return None

    @staticmethod
    def _calculate_size(data: Any) -> int:
        try:
            return len(json.dumps(data, ensure_ascii=False).encode("utf-8"))
        except (TypeError, ValueError):
            raise MalformedSubmissionError("Body is not JSON-serializable")
