"""
uvicorn runner that deregisters from the service registry before draining.

uvicorn runs the lifespan shutdown only after in-flight connections finish, so
unregistering there would leave the registry routing traffic to a closing
server. RegisteredServer unregisters as soon as shutdown begins; the lifespan
exit then finds nothing left to remove.
"""

from __future__ import annotations

import logging
import socket

import uvicorn

from infisicalservice.api.app import create_app
from infisicalservice.config import ServiceConfig
from infisicalservice.services.registry import RegistryClient

logger = logging.getLogger(__name__)


class RegisteredServer(uvicorn.Server):
    def __init__(self, config: uvicorn.Config, registry_client: RegistryClient) -> None:
        super().__init__(config)
        self.registry_client = registry_client

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        await self.registry_client.unregister()
        await super().shutdown(sockets=sockets)


def build_server(config: ServiceConfig) -> RegisteredServer:
    """Build the app and server from one config, so both agree on host and port."""
    registry_client = RegistryClient(config)
    app = create_app(config, registry_client=registry_client)
    uv_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
    return RegisteredServer(uv_config, registry_client)


def serve(config: ServiceConfig) -> None:
    logger.debug("Binding %s:%d", config.host, config.port)
    # Port bind failures make uvicorn exit non-zero; that is the only fatal start-up error.
    build_server(config).run()
