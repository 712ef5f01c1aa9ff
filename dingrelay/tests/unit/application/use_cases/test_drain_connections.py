"""
Unit tests for DrainConnectionsUseCase.

Tests shutdown notice, close codes and repeat drains.

Usage:
    pytest dingrelay/tests/unit/application
"""

from dingrelay.application.use_cases import DrainConnectionsUseCase


class TestDrainConnectionsUseCase:
    """Unit tests for DrainConnectionsUseCase."""

    async def test_notifies_and_closes_every_client(self, registry, endpoint_factory):
        """Test each client gets the shutdown notice then a 1001 close."""
        endpoints = [endpoint_factory() for _ in range(3)]
        for endpoint in endpoints:
            await registry.admit(endpoint)

        drained = await DrainConnectionsUseCase(registry=registry).execute()

        assert drained == 3
        assert registry.size == 0
        for endpoint in endpoints:
            assert endpoint.sent == [
                {"kind": "shutdown", "message": "Server is shutting down", "code": 1001}
            ]
            assert endpoint.closed[0] == 1001

    async def test_second_drain_is_noop(self, registry, endpoint_factory):
        """Test draining twice closes nothing the second time."""
        endpoint = endpoint_factory()
        await registry.admit(endpoint)
        use_case = DrainConnectionsUseCase(registry=registry)

        first = await use_case.execute()
        endpoint.closed = None
        second = await use_case.execute()

        assert first == 1
        assert second == 0
        assert endpoint.closed is None
        assert len(endpoint.sent) == 1

    async def test_empty_registry(self, registry):
        """Test draining an empty registry returns 0."""
        assert await DrainConnectionsUseCase(registry=registry).execute() == 0

    async def test_failing_endpoint_does_not_block_others(
        self, registry, endpoint_factory
    ):
        """Test a dead peer is skipped and the rest still close."""
        dead, alive = endpoint_factory(fail=True), endpoint_factory()
        await registry.admit(dead)
        await registry.admit(alive)

        drained = await DrainConnectionsUseCase(registry=registry).execute()

        assert drained == 2
        assert alive.sent[0]["kind"] == "shutdown"
        assert alive.closed[0] == 1001
        assert registry.size == 0

    async def test_custom_close_code(self, registry, endpoint_factory):
        """Test close code is passed through to notice and close."""
        endpoint = endpoint_factory()
        await registry.admit(endpoint)

        await DrainConnectionsUseCase(registry=registry).execute(
            code=1012, reason="Restarting"
        )

        assert endpoint.sent[0]["code"] == 1012
        assert endpoint.closed == (1012, "Restarting")

    async def test_grace_period_waits(self, registry, endpoint_factory):
        """Test grace period delays the close after the notice."""
        endpoint = endpoint_factory()
        await registry.admit(endpoint)
        use_case = DrainConnectionsUseCase(registry=registry, grace_period=0.05)

        drained = await use_case.execute()

        assert drained == 1
        assert endpoint.closed is not None
