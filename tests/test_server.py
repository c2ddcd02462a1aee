"""Tests for the uvicorn runner: registry deregistration happens before draining."""

import dataclasses
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import uvicorn

from infisicalservice.api.app import create_app
from infisicalservice.api.server import RegisteredServer, build_server
from infisicalservice.config import RegistryConfig
from infisicalservice.services.registry import RegistryClient


@pytest.fixture
def registered_config(service_config):
    return dataclasses.replace(service_config, registry=RegistryConfig(url="http://registry:8090"))


class TestRegisteredServer:
    @pytest.mark.asyncio
    async def test_unregisters_before_draining(self, monkeypatch):
        order = []

        async def drain(self, sockets=None):
            order.append("drain")

        monkeypatch.setattr(uvicorn.Server, "shutdown", drain)
        registry_client = MagicMock(spec=RegistryClient)
        registry_client.unregister = AsyncMock(side_effect=lambda: order.append("unregister"))

        server = RegisteredServer(uvicorn.Config(MagicMock()), registry_client)
        await server.shutdown()
        assert order == ["unregister", "drain"]

    @pytest.mark.asyncio
    async def test_lifespan_exit_does_not_unregister_twice(
        self, monkeypatch, registered_config, action_registry
    ):
        events = []

        def handler(request):
            events.append(request.method)
            return httpx.Response(200)

        async def drain(self, sockets=None):
            events.append("drain")

        monkeypatch.setattr(uvicorn.Server, "shutdown", drain)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            registry_client = RegistryClient(registered_config, http)
            app = create_app(
                registered_config, registry=action_registry, registry_client=registry_client
            )
            server = RegisteredServer(uvicorn.Config(app), registry_client)
            async with app.router.lifespan_context(app):
                await server.shutdown()

        assert events == ["POST", "DELETE", "drain"]


class TestBuildServer:
    def test_app_and_server_share_config(self, service_config):
        config = dataclasses.replace(service_config, host="127.0.0.1", port=9000)
        server = build_server(config)
        assert server.config.host == "127.0.0.1"
        assert server.config.port == 9000
        app_config = server.config.app.state.config
        assert app_config.port == 9000
        assert app_config.host == "127.0.0.1"
        assert server.registry_client.config is config
