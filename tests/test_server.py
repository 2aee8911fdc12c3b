"""
Card Service — Server Lifecycle Tests
=======================================

What:  State transitions and exit statuses of the service entry point.
How:   connect_store and uvicorn's serve loop are patched; no socket is bound.

What we test:
    ✅ Store connection failure → STOPPED, exit status 5
    ✅ Bind/listener failure → ListenerFatalError, exit status 6
    ✅ Clean run passes through LISTENING and ends STOPPED with the store closed
    ✅ Shutdown marks the lifecycle DRAINING
    ✅ Timeouts and address reach uvicorn's config
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import uvicorn

from cardservice.exceptions import ListenerFatalError, StoreConnectionError
from cardservice.server import CardServer, ServerState, ServiceLifecycle, main


def _fake_store():
    store = MagicMock()
    store.close = AsyncMock()
    return store


class TestServiceLifecycle:
    """Tests for ServiceLifecycle.run()."""

    @pytest.mark.asyncio
    async def test_connection_failure_stops(self, settings):
        lifecycle = ServiceLifecycle(settings)
        assert lifecycle.state is ServerState.IDLE

        with patch("cardservice.server.connect_store", AsyncMock(side_effect=StoreConnectionError())):
            with pytest.raises(StoreConnectionError):
                await lifecycle.run()

        assert lifecycle.state is ServerState.STOPPED
        assert lifecycle.server is None

    @pytest.mark.asyncio
    async def test_clean_run(self, settings):
        store = _fake_store()
        seen = []

        async def fake_serve(self, sockets=None):
            seen.append(self.lifecycle.state)
            self.started = True
            self.lifecycle.transition(ServerState.LISTENING)
            seen.append(self.lifecycle.state)

        lifecycle = ServiceLifecycle(settings)
        with patch("cardservice.server.connect_store", AsyncMock(return_value=store)), \
             patch.object(CardServer, "serve", fake_serve):
            await lifecycle.run()

        assert seen == [ServerState.CONNECTING, ServerState.LISTENING]
        assert lifecycle.state is ServerState.STOPPED
        store.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bind_failure_is_listener_fatal(self, settings):
        store = _fake_store()
        lifecycle = ServiceLifecycle(settings)

        with patch("cardservice.server.connect_store", AsyncMock(return_value=store)), \
             patch.object(CardServer, "serve", AsyncMock(side_effect=SystemExit(1))):
            with pytest.raises(ListenerFatalError):
                await lifecycle.run()

        assert lifecycle.state is ServerState.STOPPED
        store.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_that_never_started_is_listener_fatal(self, settings):
        lifecycle = ServiceLifecycle(settings)

        with patch("cardservice.server.connect_store", AsyncMock(return_value=_fake_store())), \
             patch.object(CardServer, "serve", AsyncMock(return_value=None)):
            with pytest.raises(ListenerFatalError, match="did not start"):
                await lifecycle.run()

    @pytest.mark.asyncio
    async def test_shutdown_enters_draining(self, settings):
        lifecycle = ServiceLifecycle(settings)
        server = CardServer(lifecycle.build_config(MagicMock()), lifecycle)

        with patch.object(uvicorn.Server, "shutdown", AsyncMock()) as base_shutdown:
            await server.shutdown()

        assert lifecycle.state is ServerState.DRAINING
        base_shutdown.assert_awaited_once()

    def test_build_config(self, settings):
        config = ServiceLifecycle(settings).build_config(MagicMock())

        assert config.host == "localhost"
        assert config.port == 8080
        assert config.timeout_keep_alive == settings.read_timeout
        assert config.timeout_graceful_shutdown == settings.write_timeout
        assert config.h11_max_incomplete_event_size == 1 << 20


class TestMainExitCodes:
    """main() maps fatal errors to distinct exit statuses."""

    def test_store_connection_failure_exits_5(self):
        with patch("cardservice.server.setup_logging"), \
             patch("cardservice.server.connect_store", AsyncMock(side_effect=StoreConnectionError())):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 5

    def test_listener_failure_exits_6(self):
        with patch("cardservice.server.setup_logging"), \
             patch("cardservice.server.connect_store", AsyncMock(return_value=_fake_store())), \
             patch.object(CardServer, "serve", AsyncMock(side_effect=OSError("address in use"))):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 6
