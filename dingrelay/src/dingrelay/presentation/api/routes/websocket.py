"""
WebSocket endpoint with Clean Architecture and production logging.
"""

import time
from typing import Union

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from dingrelay.application.dto import ErrorFrame
from dingrelay.di import Container
from dingrelay.domain.exceptions import ConnectionLimitExceeded, MalformedSubmissionError
from dingrelay.infrastructure.websocket import WebSocketEndpoint
from dingrelay.presentation.api.dependencies import get_container

router = APIRouter(tags=["websocket"])

LEGACY_PING = "ping"
LEGACY_PONG = "pong"


async def _receive_frame(websocket: WebSocket) -> Union[str, bytes]:
    """Receive one text or binary frame, raising WebSocketDisconnect on close."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", status.WS_1000_NORMAL_CLOSURE))
    if message.get("text") is not None:
        return message["text"]
    return message.get("bytes") or b""


async def _close_unreachable(endpoint, client_id, reporter) -> None:
    """Tell a peer whose registration was dropped to reconnect."""
    try:
        await endpoint.close(
            code=status.WS_1011_INTERNAL_ERROR,
            reason="Connection dropped by relay",
        )
    except Exception as e:
        if reporter:
            reporter.info(
                f"Close after removal failed [client={client_id}]: "
                f"{type(e).__name__}: {e}",
                context="WebSocket",
                verbose_level=2,
            )


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    container: Container = Depends(get_container),
):
    """
    WebSocket endpoint for real-time event relay.

    On connect the client receives a welcome frame with its clientId and
    the supported events. Each subsequent frame is either a ping or an
    event submission that is fanned out to every other client.
    Rejects new connections during graceful shutdown.

    Connection example:
        - ws://localhost:5050/ws
    """
    reporter = container.reporter
    peer = websocket.client

    shutdown_manager = container.shutdown_manager
    if shutdown_manager.is_shutting_down():
        if reporter:
            reporter.warning(
                f"Connection rejected: server shutting down [peer={peer}]",
                context="WebSocket",
            )
        await websocket.close(
            code=status.WS_1001_GOING_AWAY,
            reason="Server is shutting down",
        )
        return

    await websocket.accept()
    endpoint = WebSocketEndpoint(websocket)

    registry = container.connection_registry
    validator = container.get_validate_submission_use_case()
    broadcaster = container.get_broadcast_use_case()
    heartbeat = container.heartbeat_monitor

    try:
        client_id = await container.get_admit_client_use_case().execute(endpoint)

    except ConnectionLimitExceeded as e:
        if reporter:
            reporter.warning(
                f"Connection rejected: {e.limit_type} limit exceeded [peer={peer}]",
                context="WebSocket",
            )
        await endpoint.send_json(ErrorFrame(code=e.code, message=str(e)).to_wire())
        await endpoint.close(
            code=status.WS_1008_POLICY_VIOLATION,
            reason="Connection limit exceeded",
        )
        container.increment_stat("connection_rejections")
        return

    except WebSocketDisconnect:
        if reporter:
            reporter.info(
                f"Client left before welcome [peer={peer}]",
                context="WebSocket",
                verbose_level=2,
            )
        return

    container.increment_stat("total_connections")
    heartbeat.start(client_id, endpoint)

    if reporter:
        reporter.info(
            f"Client connected [client={client_id}] [peer={peer}] "
            f"[total_connections={registry.get_total_connections()}]",
            context="WebSocket",
            verbose_level=2,
        )

    connection_start_time = time.time()
    messages_processed = 0
    malformed = 0

    try:
        while True:
            data = await _receive_frame(websocket)

            # Removed by a failed write elsewhere: the client is no longer reachable
            if not registry.contains(client_id):
                if not shutdown_manager.is_shutting_down():
                    await _close_unreachable(endpoint, client_id, reporter)
                break

            messages_processed += 1
            container.increment_stat("total_messages_received")

            if data == LEGACY_PING:
                await endpoint.send_text(LEGACY_PONG)
                continue

            try:
                frame = validator.decode(data)

                if validator.control_type(frame) == "ping":
                    await endpoint.send_json({"kind": "pong"})
                    continue

                # senderId is bound to the connection; a claimed one is ignored
                outcome = await broadcaster.submit(client_id, frame)

            except MalformedSubmissionError as e:
                malformed += 1
                container.increment_stat("malformed_submissions")
                if reporter:
                    reporter.warning(
                        f"Malformed submission [client={client_id}] [reason={e.reason}]",
                        context="WebSocket",
                        verbose_level=2,
                    )
                await endpoint.send_json(
                    ErrorFrame(code=e.code, message=e.reason).to_wire()
                )
                continue

            if outcome.published:
                container.increment_stat("total_messages_sent", outcome.delivered)
            else:
                container.increment_stat("dropped_events")

    except WebSocketDisconnect:
        if reporter:
            reporter.info(
                f"Client disconnected [client={client_id}]",
                context="WebSocket",
                verbose_level=2,
            )

    except Exception as e:
        if reporter:
            reporter.error(
                f"WebSocket connection error [client={client_id}]: "
                f"{type(e).__name__}: {str(e)}",
                context="WebSocket",
            )

    finally:
        heartbeat.stop(client_id)
        await registry.remove(client_id)

        if reporter:
            reporter.info(
                f"Connection closed [client={client_id}] "
                f"[duration={time.time() - connection_start_time:.2f}s] "
                f"[messages={messages_processed}] [malformed={malformed}]",
                context="WebSocket",
                verbose_level=2,
            )
