"""
Service registry client: announces this service to the registry service.

Registration is a scoped resource: ``service_registration()`` registers on
entry and always unregisters on exit, including when the server is stopped by
SIGINT/SIGTERM. Registry failures are logged and never stop the service.

unregister() is idempotent: the uvicorn runner in api/server.py calls it as
soon as shutdown starts, and the lifespan exit is then a no-op.

When REGISTRYSERVICE_API_URL is unset both calls are no-ops.

Usage:
    async with service_registration(RegistryClient(cfg)):
        ...  # serve requests
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from infisicalservice.config import CAPABILITIES, ServiceConfig
from infisicalservice.semantic.models import SECRET_LIST_SCHEMA, ActionType

logger = logging.getLogger(__name__)

_ACTION_DESCRIPTIONS = {
    ActionType.RETRIEVE: "Retrieves credentials from Infisical secrets manager",
    ActionType.SEARCH: "Retrieves a single secret by key",
    ActionType.CREATE: "Creates a secret",
    ActionType.UPDATE: "Updates a secret value",
    ActionType.DELETE: "Deletes a secret",
}


class RegistryClient:
    """Registers and unregisters this service with the registry service."""

    def __init__(self, config: ServiceConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self.registered = False

    @property
    def enabled(self) -> bool:
        return self.config.registry.enabled

    def registration_payload(self) -> dict[str, Any]:
        cfg = self.config
        url = cfg.public_url
        return {
            "id": cfg.service_id,
            "name": cfg.service_name,
            "description": cfg.description,
            "port": cfg.port,
            "url": url,
            "version": cfg.version,
            "capabilities": list(CAPABILITIES),
            "actionCapabilities": [
                {
                    "actionType": str(action_type),
                    "description": description,
                    "resultSchema": SECRET_LIST_SCHEMA.to_dict(),
                }
                for action_type, description in _ACTION_DESCRIPTIONS.items()
            ],
            "apiVersions": [
                {
                    "version": cfg.version,
                    "url": f"{url}/v1",
                    "documentation": f"{url}/v1/api/docs",
                    "isDefault": True,
                    "status": "stable",
                }
            ],
        }

    async def _send(self, method: str, path: str, **kwargs: Any) -> bool:
        url = f"{self.config.registry.url}{path}"
        client = self._client or httpx.AsyncClient(timeout=self.config.registry.timeout)
        try:
            r = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Registry %s %s failed: %s", method, url, e)
            return False
        finally:
            if self._client is None:
                await client.aclose()
        if r.status_code >= 400:
            logger.error("Registry %s %s returned %d", method, url, r.status_code)
            return False
        return True

    async def register(self) -> bool:
        if not self.enabled:
            logger.debug("Registry URL not set; skipping registration")
            return False
        ok = await self._send("POST", "/v1/api/services", json=self.registration_payload())
        self.registered = ok
        if ok:
            logger.info("Registered %s with registry", self.config.service_id)
        else:
            logger.error("Failed to register with registry")
        return ok

    async def unregister(self) -> bool:
        """Remove this service from the registry. Only the first call after a
        successful register() sends a request; later calls are no-ops.
        """
        if not self.registered:
            return False
        self.registered = False
        ok = await self._send("DELETE", f"/v1/api/services/{self.config.service_id}")
        if ok:
            logger.info("Unregistered %s from registry", self.config.service_id)
        else:
            logger.error("Failed to unregister from registry")
        return ok


@asynccontextmanager
async def service_registration(client: RegistryClient) -> AsyncIterator[RegistryClient]:
    """Register on entry, unregister on every exit path."""
    await client.register()
    try:
        yield client
    finally:
        await client.unregister()
