"""
Card Service — Server Lifecycle
=================================

What:  Process entry point: connect the store, build the app, serve until a
       signal arrives, drain, stop.
Why:   The store must be reachable before the listener opens, and the two
       ways startup can fail must be distinguishable from the exit status.
How:   uvicorn.Server drives the listener and the signal handling.
       CardServer, a thin subclass, reports when it is listening and when it
       starts draining so the lifecycle state is observable.

States:
    IDLE → CONNECTING → LISTENING → DRAINING → STOPPED

    CONNECTING  store ping bounded by connect_timeout; failure → exit 5
    LISTENING   uvicorn bound to listen_host:listen_port; bind or listener
                failure → exit 6
    DRAINING    entered on SIGINT/SIGTERM: stop accepting, give in-flight
                requests write_timeout seconds, then close what is left;
                the app's lifespan closes the store client
    STOPPED     terminal

Exit statuses:
    0  clean shutdown after a signal
    5  StoreConnectionError
    6  ListenerFatalError
"""

import asyncio
import enum
import logging
import socket
import sys
from typing import List, Optional

import uvicorn

from cardservice.config import Settings
from cardservice.database import CardStore, connect_store
from cardservice.exceptions import ListenerFatalError, StoreConnectionError
from cardservice.main import create_app, setup_logging

logger = logging.getLogger(__name__)

# Largest request head accepted by the h11 parser
MAX_HEADER_BYTES = 1 << 20


class ServerState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    LISTENING = "listening"
    DRAINING = "draining"
    STOPPED = "stopped"


class CardServer(uvicorn.Server):
    """uvicorn.Server that reports LISTENING and DRAINING to its lifecycle."""

    def __init__(self, config: uvicorn.Config, lifecycle: "ServiceLifecycle"):
        super().__init__(config)
        self.lifecycle = lifecycle

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            self.lifecycle.transition(ServerState.LISTENING)

    async def shutdown(self, sockets: Optional[List[socket.socket]] = None) -> None:
        self.lifecycle.transition(ServerState.DRAINING)
        await super().shutdown(sockets=sockets)


class ServiceLifecycle:
    """
    Owns the store handle and the HTTP server for one run of the service.

    Usage:
        lifecycle = ServiceLifecycle(settings)
        asyncio.run(lifecycle.run())
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.state = ServerState.IDLE
        self.store: Optional[CardStore] = None
        self.server: Optional[CardServer] = None

    def transition(self, state: ServerState) -> None:
        logger.debug("Lifecycle: %s -> %s", self.state.value, state.value)
        self.state = state

    def build_config(self, app) -> uvicorn.Config:
        """uvicorn settings derived from the service settings."""
        return uvicorn.Config(
            app,
            host=self.settings.listen_host,
            port=self.settings.listen_port,
            timeout_keep_alive=self.settings.read_timeout,
            timeout_graceful_shutdown=self.settings.write_timeout,
            h11_max_incomplete_event_size=MAX_HEADER_BYTES,
            log_level=self.settings.log_level.lower(),
            log_config=None,   # keep the format set by setup_logging()
            access_log=False,  # RequestLoggingMiddleware writes access lines
        )

    async def run(self) -> None:
        """
        Connect, serve until signalled, drain, stop.

        Raises:
            StoreConnectionError: the store did not answer within connect_timeout
            ListenerFatalError: the listener could not bind or failed later
        """
        self.transition(ServerState.CONNECTING)
        try:
            self.store = await connect_store(self.settings)
        except StoreConnectionError:
            self.transition(ServerState.STOPPED)
            raise

        try:
            app = create_app(self.settings, self.store)
            self.server = CardServer(self.build_config(app), self)
            try:
                await self.server.serve()
            except (Exception, SystemExit) as e:
                # uvicorn logs bind errors and calls sys.exit(1)
                raise ListenerFatalError(
                    message=f"httpServer Status: {e!r}",
                    context={"address": self.settings.listen_address},
                ) from e
            if not self.server.started:
                raise ListenerFatalError(
                    message="HTTP listener did not start",
                    context={"address": self.settings.listen_address},
                )
        finally:
            try:
                await self.store.close()
            finally:
                self.transition(ServerState.STOPPED)


def main() -> None:
    """Console entry point (`cardservice` / `python -m cardservice`)."""
    settings = Settings()
    setup_logging(settings)

    lifecycle = ServiceLifecycle(settings)
    try:
        asyncio.run(lifecycle.run())
    except KeyboardInterrupt:
        # uvicorn re-raises the captured SIGINT once draining has finished
        pass
    except (StoreConnectionError, ListenerFatalError) as e:
        logger.error("ERROR: %s | Context: %s", e.message, e.context)
        sys.exit(e.exit_code)

    logger.info("httpServer | Stopped")
