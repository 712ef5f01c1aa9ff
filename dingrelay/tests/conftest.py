"""
Test fixtures and configuration.
"""

import asyncio
import logging
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from dingrelay.application.use_cases import (
    BroadcastEventUseCase,
    ValidateSubmissionUseCase,
)
from dingrelay.config.settings import Settings
from dingrelay.infrastructure.reporting import SystemReporter
from dingrelay.infrastructure.websocket import ConnectionRegistry
from dingrelay.main import RelayApp
from dingrelay.presentation.api.dependencies import set_container

SUPPORTED_EVENTS = ["character_message", "user_message"]


class FakeEndpoint:
    """
    In-memory Endpoint recording every frame written to it.

    Args:
        fail: Raise on every write (peer gone)
        hang: Never complete a write (stalled peer)
    """

    def __init__(self, fail: bool = False, hang: bool = False):
        self.fail = fail
        self.hang = hang
        self.sent: List[Dict[str, Any]] = []
        self.texts: List[str] = []
        self.closed: Optional[tuple] = None

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("peer gone")
        if self.hang:
            await asyncio.sleep(3600)
        self.sent.append(data)

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("peer gone")
        self.texts.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = (code, reason)

    def frames(self, kind: str) -> List[Dict[str, Any]]:
        return [frame for frame in self.sent if frame.get("kind") == kind]


def make_settings(**overrides) -> Settings:
    """Build test settings: no heartbeats, no grace period, quiet logs."""
    values = {
        "host": "127.0.0.1",
        "port": 5050,
        "supported_events": list(SUPPORTED_EVENTS),
        "heartbeat_enabled": False,
        "shutdown_grace_period": 0,
        "send_timeout": 0.5,
        "log_level": "warning",
        "log_verbose": 0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def reporter() -> SystemReporter:
    return SystemReporter(name="dingrelay.tests", level=logging.WARNING, verbose=0)


@pytest.fixture
def endpoint_factory():
    """FakeEndpoint constructor (fail=..., hang=...)."""
    return FakeEndpoint


@pytest.fixture
def registry(reporter) -> ConnectionRegistry:
    return ConnectionRegistry(reporter=reporter)


@pytest.fixture
def validator() -> ValidateSubmissionUseCase:
    return ValidateSubmissionUseCase(supported_events=SUPPORTED_EVENTS)


@pytest.fixture
def broadcaster(registry, validator, reporter) -> BroadcastEventUseCase:
    return BroadcastEventUseCase(
        registry=registry,
        validator=validator,
        send_timeout=0.2,
        reporter=reporter,
    )


@pytest.fixture
def make_app(reporter):
    """Factory building a RelayApp from settings overrides."""

    def _make(**overrides) -> RelayApp:
        return RelayApp(make_settings(**overrides), reporter=reporter)

    yield _make

    set_container(None)


@pytest.fixture
def relay_app(make_app) -> RelayApp:
    return make_app()


@pytest.fixture
def client(relay_app) -> Generator[TestClient, None, None]:
    """HTTP/WebSocket client running the app lifespan."""
    with TestClient(relay_app.app) as test_client:
        yield test_client
