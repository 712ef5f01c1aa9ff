"""
Integration tests for the relay over HTTP and WebSocket.

Runs the full FastAPI app (lifespan included) through TestClient.

Usage:
    pytest dingrelay/tests/integration
"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from dingrelay.domain.value_objects import ClientId

NOTIFICATION = {"eventKind": "character_message", "payload": {"text": "hello"}}


def _ping(ws) -> None:
    """Round-trip a ping; everything sent earlier has been received first."""
    ws.send_json({"kind": "ping"})
    assert ws.receive_json() == {"kind": "pong"}


class TestWebSocketRelay:
    """End-to-end WebSocket fan-out."""

    # ================================================================
    # Handshake tests
    # ================================================================

    def test_welcome_frame(self, client):
        """Test a new connection is greeted with its ID and vocabulary."""
        with client.websocket_connect("/ws") as ws:
            welcome = ws.receive_json()

        assert welcome["kind"] == "welcome"
        assert len(welcome["clientId"]) == 32
        assert welcome["supportedEvents"] == ["character_message", "user_message"]

    def test_distinct_client_ids(self, client):
        """Test two connections get different IDs."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            assert a.receive_json()["clientId"] != b.receive_json()["clientId"]

    # ================================================================
    # Fan-out tests
    # ================================================================

    def test_event_reaches_others_not_sender(self, client):
        """Test A's event is delivered to B and not echoed to A."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_json(NOTIFICATION)
            received = b.receive_json()

            assert received["kind"] == "notification"
            assert received["eventKind"] == "character_message"
            assert received["payload"] == {"text": "hello"}
            assert isinstance(received["serverTimestamp"], int)

            # A's next frame is its own pong, not the notification
            _ping(a)

    def test_claimed_sender_is_ignored(self, client):
        """Test a WebSocket sender cannot exclude someone else."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            id_b = b.receive_json()["clientId"]

            a.send_json({**NOTIFICATION, "senderId": id_b})

            assert b.receive_json()["kind"] == "notification"
            _ping(a)

    def test_legacy_field_names(self, client):
        """Test event/data aliases are relayed as eventKind/payload."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_json({"event": "user_message", "data": {"text": "hey"}})
            received = b.receive_json()

            assert received["eventKind"] == "user_message"
            assert received["payload"] == {"text": "hey"}

    def test_unknown_event_is_dropped_silently(self, client):
        """Test unsupported kinds reach nobody and produce no error."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_json({"eventKind": "typing_indicator", "payload": {}})
            _ping(a)
            _ping(b)

    # ================================================================
    # Error and control frame tests
    # ================================================================

    def test_malformed_json_gets_error_frame(self, client):
        """Test unparseable text is reported to the sender only."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_text("{not json")
            error = a.receive_json()

            assert error["kind"] == "error"
            assert error["code"] == "MALFORMED_SUBMISSION"
            assert "Invalid JSON" in error["message"]
            _ping(b)

    def test_missing_event_kind_gets_error_frame(self, client):
        """Test a submission without eventKind is malformed."""
        with client.websocket_connect("/ws") as a:
            a.receive_json()

            a.send_json({"payload": {"text": "orphan"}})

            assert a.receive_json() == {
                "kind": "error",
                "code": "MALFORMED_SUBMISSION",
                "message": "Missing eventKind",
            }

    def test_connection_survives_errors(self, client):
        """Test the connection stays usable after a malformed frame."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_text("[]")
            assert a.receive_json()["kind"] == "error"

            a.send_json(NOTIFICATION)
            assert b.receive_json()["kind"] == "notification"

    def test_removed_client_is_closed_on_next_frame(self, client, relay_app):
        """Test a client dropped from the registry is closed with 1011."""
        registry = relay_app.container.connection_registry

        with client.websocket_connect("/ws") as a:
            client_id = ClientId.parse(a.receive_json()["clientId"])
            client.portal.call(registry.remove, client_id)

            a.send_json(NOTIFICATION)

            with pytest.raises(WebSocketDisconnect) as exc_info:
                a.receive_json()

        assert exc_info.value.code == 1011

    def test_json_and_text_ping(self, client):
        """Test both ping forms are answered."""
        with client.websocket_connect("/ws") as a:
            a.receive_json()

            a.send_text("ping")
            assert a.receive_text() == "pong"

            a.send_json({"type": "ping"})
            assert a.receive_json() == {"kind": "pong"}

    # ================================================================
    # Limits and heartbeat tests
    # ================================================================

    def test_connection_limit_rejects_with_policy_violation(self, make_app):
        """Test a connection past the limit gets an error frame and 1008."""
        app = make_app(max_total_connections=1)

        with TestClient(app.app) as client:
            with client.websocket_connect("/ws") as first:
                first.receive_json()

                with client.websocket_connect("/ws") as second:
                    error = second.receive_json()
                    with pytest.raises(WebSocketDisconnect) as exc_info:
                        second.receive_json()

                assert error["kind"] == "error"
                assert error["code"] == "CONNECTION_LIMIT_EXCEEDED"
                assert exc_info.value.code == 1008
                assert app.container.stats["connection_rejections"] == 1

    def test_heartbeat_frames(self, make_app):
        """Test idle connections receive heartbeat frames."""
        app = make_app(heartbeat_enabled=True, heartbeat_interval=0.05)

        with TestClient(app.app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()

                heartbeat = ws.receive_json()

        assert heartbeat["kind"] == "heartbeat"
        assert isinstance(heartbeat["serverTimestamp"], int)


class TestHttpApi:
    """HTTP publish and diagnostics endpoints."""

    # ================================================================
    # Publish tests
    # ================================================================

    def test_publish_excludes_sender(self, client):
        """Test POST /publish with senderId skips that client."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            id_a = a.receive_json()["clientId"]
            b.receive_json()

            response = client.post("/publish", json={"senderId": id_a, **NOTIFICATION})

            assert response.status_code == 200
            body = response.json()
            assert body["status"] == "published"
            assert body["eventKind"] == "character_message"
            assert body["attempted"] == 1
            assert body["delivered"] == 1
            assert isinstance(body["serverTimestamp"], int)

            assert b.receive_json()["payload"] == {"text": "hello"}
            _ping(a)

    def test_publish_without_sender_reaches_all(self, client):
        """Test POST /publish without senderId goes to everyone."""
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            response = client.post("/publish", json=NOTIFICATION)

            assert response.json()["delivered"] == 2
            assert a.receive_json()["kind"] == "notification"
            assert b.receive_json()["kind"] == "notification"

    def test_publish_unknown_kind_is_dropped(self, client):
        """Test unsupported kinds are accepted and reach nobody."""
        response = client.post("/publish", json={"eventKind": "typing_indicator"})

        assert response.status_code == 200
        assert response.json()["status"] == "dropped"
        assert response.json()["delivered"] == 0

    def test_publish_unknown_kind_ignores_payload_and_sender(self, client):
        """Test fields of an unknown kind cannot turn a drop into a 400."""
        response = client.post(
            "/publish",
            json={"eventKind": "future_event", "payload": [1, 2], "senderId": "nobody"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "dropped"

    @pytest.mark.parametrize(
        "body",
        [
            "{not json",
            "[1, 2]",
            '{"payload": {}}',
            '{"eventKind": "user_message", "payload": "text"}',
            '{"eventKind": "user_message", "senderId": "nobody"}',
        ],
    )
    def test_publish_malformed_is_400(self, client, body):
        """Test malformed bodies are rejected with MALFORMED_SUBMISSION."""
        response = client.post(
            "/publish",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "MALFORMED_SUBMISSION"

    # ================================================================
    # Diagnostics tests
    # ================================================================

    def test_info(self, client):
        """Test /info reports clients, vocabulary and port."""
        assert client.get("/info").json() == {
            "connectedClients": 0,
            "supportedEvents": ["character_message", "user_message"],
            "port": 5050,
        }

        with client.websocket_connect("/ws") as a:
            a.receive_json()
            assert client.get("/info").json()["connectedClients"] == 1

        assert client.get("/info").json()["connectedClients"] == 0

    def test_port(self, client):
        assert client.get("/port").json() == {"port": 5050}

    def test_stats(self, client):
        """Test /stats counts connections and messages."""
        with client.websocket_connect("/ws") as a:
            a.receive_json()
            a.send_text("{bad")
            a.receive_json()

        stats = client.get("/stats").json()

        assert stats["total_connections"] == 1
        assert stats["malformed_submissions"] == 1
        assert stats["active_clients"] == 0
        assert stats["uptime_seconds"] >= 0

    def test_health_endpoints(self, client):
        """Test probes report healthy while running."""
        assert client.get("/health/live").status_code == 200

        ready = client.get("/health/ready")
        assert ready.status_code == 200
        assert ready.json()["status"] == "healthy"

        assert client.get("/health").status_code == 200


class TestShutdown:
    """Graceful drain through the running app."""

    def test_drain_notifies_and_closes(self, client, relay_app):
        """Test drain sends the shutdown notice and closes with 1001."""
        drain = relay_app.container.get_drain_use_case()

        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            drained = client.portal.call(drain.execute)

            for ws in (a, b):
                assert ws.receive_json() == {
                    "kind": "shutdown",
                    "message": "Server is shutting down",
                    "code": 1001,
                }
                with pytest.raises(WebSocketDisconnect) as exc_info:
                    ws.receive_json()
                assert exc_info.value.code == 1001

            assert drained == 2
            assert client.portal.call(drain.execute) == 0
            assert client.get("/info").json()["connectedClients"] == 0

    def test_shutdown_refuses_new_work(self, client, relay_app):
        """Test new connections and publishes are refused once shutdown starts."""
        shutdown_manager = relay_app.container.shutdown_manager

        client.portal.call(shutdown_manager.initiate_shutdown, "test")

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws"):
                pass
        assert exc_info.value.code == 1001

        assert client.post("/publish", json=NOTIFICATION).status_code == 503
        assert client.get("/health/ready").status_code == 503
        assert client.get("/health/live").status_code == 200

    def test_lifespan_exit_drains_open_connections(self, relay_app):
        """Test leaving the app lifespan empties the registry."""
        registry = relay_app.container.connection_registry

        with TestClient(relay_app.app) as client:
            client.get("/info")

        assert registry.size == 0
        assert relay_app.container.shutdown_manager.is_shutting_down()
