"""
Endpoint protocol - the writable handle for one connected client.
"""

from typing import Any, Dict, Protocol


class Endpoint(Protocol):
    """
    Anything the relay can push frames to.

    The FastAPI WebSocket wrapper in infrastructure satisfies this; tests
    use in-memory fakes.
    """

    async def send_json(self, data: Dict[str, Any]) -> None:
        ...

    async def close(self, code: int = 1000, reason: str = "") -> None:
        ...
