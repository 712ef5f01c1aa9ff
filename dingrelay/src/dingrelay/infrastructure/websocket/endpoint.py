"""
WebSocket endpoint adapter.
"""

import asyncio
from typing import Any, Dict

from fastapi import WebSocket


class WebSocketEndpoint:
    """
    Wraps a FastAPI WebSocket as a relay Endpoint.

    Serializes writes so heartbeat and broadcast frames for the same
    connection never interleave.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._send_lock = asyncio.Lock()

    async def send_json(self, data: Dict[str, Any]) -> None:
        async with self._send_lock:
            await self.websocket.send_json(data)

    async def send_text(self, data: str) -> None:
        async with self._send_lock:
            await self.websocket.send_text(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        async with self._send_lock:
            await self.websocket.close(code=code, reason=reason)

    def __repr__(self) -> str:
        return f"WebSocketEndpoint({self.websocket.client})"
