"""Health and documentation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from infisicalservice import __version__
from infisicalservice.api.deps import get_action_registry, get_service_config
from infisicalservice.config import CAPABILITIES, ServiceConfig
from infisicalservice.semantic.registry import ActionRegistry

router = APIRouter(tags=["health"])

ENDPOINTS = [
    ("POST", "/v1/api/semantic/action",
     "Execute secrets management operations via semantic actions (primary interface)"),
    ("POST", "/v1/api/secrets", "Create secret (REST convenience - converts to CreateAction)"),
    ("GET", "/v1/api/secrets/{key}",
     "Retrieve secret (REST convenience - converts to SearchAction)"),
    ("PUT", "/v1/api/secrets/{key}", "Update secret (REST convenience - converts to UpdateAction)"),
    ("DELETE", "/v1/api/secrets/{key}",
     "Delete secret (REST convenience - converts to DeleteAction)"),
    ("GET", "/health", "Health check endpoint"),
]


@router.get("/health")
async def health(config: ServiceConfig = Depends(get_service_config)):
    """Liveness check."""
    return {"service": config.service_id, "status": "healthy", "version": __version__}


@router.get("/v1/api/docs")
async def docs(
    config: ServiceConfig = Depends(get_service_config),
    registry: ActionRegistry = Depends(get_action_registry),
):
    """Service documentation: identity, capabilities, supported actions and endpoints."""
    return {
        "serviceId": config.service_id,
        "name": config.service_name,
        "description": config.description,
        "version": config.version,
        "port": config.port,
        "capabilities": list(CAPABILITIES),
        "supportedActions": registry.supported_types(),
        "apiKeyRequired": config.api_key_required,
        "endpoints": [
            {"method": method, "path": path, "description": description}
            for method, path, description in ENDPOINTS
        ],
    }
