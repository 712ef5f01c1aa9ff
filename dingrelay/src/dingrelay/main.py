"""
Message Ding Relay - WebSocket notification relay

Orchestrates Clean Architecture components to fan events submitted by
one client out to every other connected client.
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI

from dingrelay.config.settings import Settings, load_config
from dingrelay.di import Container
from dingrelay.infrastructure.reporting import Emoji, SystemReporter
from dingrelay.presentation.api.dependencies import set_container
from dingrelay.presentation.api.routes import (
    health_router,
    info_router,
    publish_router,
    websocket_router,
)

PLUGIN_INFO = {
    "id": "message-ding-relay",
    "name": "Message Ding Relay",
    "description": "WebSocket relay for cross-client message notifications",
}


class RelayApp:
    """
    Relay application orchestrator.

    Thin coordination layer that initializes and connects
    all Clean Architecture components.

    Responsibilities:
        - Initialize DI container
        - Setup FastAPI application
        - Register API routes
        - Manage application lifecycle with graceful shutdown
        - Run uvicorn server
    """

    def __init__(self, settings: Settings, reporter: Optional[SystemReporter] = None):
        """
        Initialize relay application.

        Args:
            settings: Application settings
            reporter: Optional reporter; built from settings when omitted
        """
        self.settings = settings

        # Initialize reporter FIRST
        self.reporter = reporter or self._create_reporter()

        self.container = Container(settings, reporter=self.reporter)

        self.app = self._create_app()

        # Set global container for FastAPI dependencies
        set_container(self.container)

        # Server instance (set during serve)
        self.server: Optional[uvicorn.Server] = None

        self.reporter.info(
            f"{PLUGIN_INFO['name']} initialized",
            context="Relay",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        return SystemReporter.from_level_name(
            name="dingrelay",
            level_name=self.settings.log_level,
            log_file=self.settings.log_file,
            verbose=self.settings.log_verbose,
        )

    def _create_app(self) -> FastAPI:
        """
        Create FastAPI application with lifespan management.

        Returns:
            Configured FastAPI application
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Application lifespan context manager with graceful shutdown."""
            await self._on_startup()

            yield

            await self._on_shutdown()

        app = FastAPI(
            title=PLUGIN_INFO["name"],
            description=PLUGIN_INFO["description"],
            version=self.settings.APP_VERSION,
            lifespan=lifespan,
        )

        app.include_router(websocket_router)
        app.include_router(publish_router)
        app.include_router(info_router)
        app.include_router(health_router)

        return app

    async def _on_startup(self):
        """
        Application startup event handler.

        Registers signal handlers and the ordered shutdown sequence.
        """
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} {PLUGIN_INFO['name']} starting...",
            context="Relay",
            verbose_level=1,
        )

        shutdown_manager = self.container.shutdown_manager
        shutdown_manager.setup_signal_handlers()
        shutdown_manager.register_shutdown_callback(self._drain_connections)
        shutdown_manager.register_shutdown_callback(self._stop_heartbeats)
        shutdown_manager.register_shutdown_callback(self._stop_server)

        self.reporter.info(
            f"Graceful shutdown enabled (timeout: {self.settings.shutdown_timeout}s, "
            f"grace: {self.settings.shutdown_grace_period}s)",
            context="Relay",
            verbose_level=1,
        )

        self.reporter.info(
            f"{Emoji.SYSTEM.CONFIG} Host: {self.settings.host}:{self.settings.port}",
            context="Relay",
            verbose_level=1,
        )

        self.reporter.info(
            f"Supported events: {', '.join(self.settings.supported_events)}",
            context="Relay",
            verbose_level=1,
        )

        if self.settings.heartbeat_enabled:
            self.reporter.info(
                f"Heartbeat: ENABLED (interval: {self.settings.heartbeat_interval}s)",
                context="Relay",
                verbose_level=1,
            )
        else:
            self.reporter.info(
                "Heartbeat: DISABLED",
                context="Relay",
                verbose_level=1,
            )

        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Relay ready",
            context="Relay",
            verbose_level=1,
        )

    async def _on_shutdown(self):
        """
        Application shutdown event handler.

        Runs the shutdown sequence unless a signal already did, then makes
        sure the registry is empty and no heartbeat is left running.
        """
        self.reporter.info(
            f"{PLUGIN_INFO['name']} shutting down...",
            context="Relay",
            verbose_level=1,
        )

        shutdown_manager = self.container.shutdown_manager
        await shutdown_manager.initiate_shutdown("lifespan")

        # No-ops when the shutdown callbacks already ran
        await self._drain_connections()
        await self._stop_heartbeats()

        shutdown_manager.restore_signal_handlers()

        self.reporter.info(
            f"{PLUGIN_INFO['name']} stopped",
            context="Relay",
            verbose_level=1,
        )

    async def _drain_connections(self) -> int:
        return await self.container.get_drain_use_case().execute()

    async def _stop_heartbeats(self) -> None:
        await self.container.heartbeat_monitor.stop_all()

    def _stop_server(self) -> None:
        if self.server:
            self.server.should_exit = True

    async def serve(self):
        """
        Run server with proper signal handling.

        Uses uvicorn.Server API for proper shutdown control.
        """
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def start(self):
        """
        Start relay server.

        Blocks until the server is stopped.
        """
        asyncio.run(self.serve())


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the relay.

    Loads configuration and starts the server. An optional first argument
    overrides the configured port.
    """
    args = sys.argv[1:] if argv is None else argv

    config = load_config()

    if args:
        try:
            port = int(args[0])
        except ValueError:
            print(f"Invalid port: {args[0]}")
            sys.exit(1)
        if not 1 <= port <= 65535:
            print(f"Invalid port: {args[0]}")
            sys.exit(1)
        config.port = port

    app = RelayApp(config)

    try:
        app.start()
    except KeyboardInterrupt:
        print(f"\n{PLUGIN_INFO['name']} stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
