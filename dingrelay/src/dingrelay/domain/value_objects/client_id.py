"""
ClientId value object - opaque, unguessable connection identifier.
"""

import re
import secrets
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class ClientId:
    """
    Value object identifying one connected client for the lifetime of
    its connection.

    Identifiers are 128 random bits from the OS CSPRNG, rendered as
    lowercase hex, so other clients cannot guess them.

    Examples:
        - 9f86d081884c7d659a2feaa0c55ad015
    """

    value: str

    TOKEN_BYTES: ClassVar[int] = 16
    PATTERN: ClassVar[re.Pattern] = re.compile(r"^[0-9a-f]{32}$")

    def __post_init__(self):
        """Validate identifier on creation."""
        if not isinstance(self.value, str) or not self.PATTERN.match(self.value):
            raise ValueError(
                f"Client ID must be {self.TOKEN_BYTES * 2} lowercase hex characters"
            )

    @classmethod
    def generate(cls) -> "ClientId":
        """Create a fresh random identifier."""
        return cls(secrets.token_hex(cls.TOKEN_BYTES))

    @classmethod
    def parse(cls, raw: str) -> "ClientId":
        """
        Parse an identifier received from a client.

        Raises:
            ValueError: If raw is not a well-formed identifier
        """
        return cls(raw.strip().lower() if isinstance(raw, str) else raw)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ClientId({self.value!r})"
