"""REST convenience endpoints. Each converts to a semantic action and dispatches it."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from infisicalservice.api.deps import execute_action, get_action_registry
from infisicalservice.semantic import rest
from infisicalservice.semantic.registry import ActionRegistry
from infisicalservice.semantic.rest import CreateSecretRequest, UpdateSecretRequest

router = APIRouter(prefix="/v1/api/secrets", tags=["secrets"])


@router.post("")
async def create_secret(
    body: CreateSecretRequest, registry: ActionRegistry = Depends(get_action_registry)
):
    """Create secret (converts to CreateAction)."""
    return await execute_action(registry, rest.create_action(body))


@router.get("/{key}")
async def get_secret(
    key: str,
    environment: str = Query(""),
    projectId: str = Query(""),
    secretPath: str = Query(""),
    registry: ActionRegistry = Depends(get_action_registry),
):
    """Retrieve secret (converts to SearchAction)."""
    action = rest.retrieve_action(key, environment, projectId, secretPath)
    return await execute_action(registry, action)


@router.put("/{key}")
async def update_secret(
    key: str,
    body: UpdateSecretRequest,
    registry: ActionRegistry = Depends(get_action_registry),
):
    """Update secret (converts to UpdateAction)."""
    return await execute_action(registry, rest.update_action(key, body))


@router.delete("/{key}")
async def delete_secret(
    key: str,
    environment: str = Query(""),
    projectId: str = Query(""),
    secretPath: str = Query(""),
    registry: ActionRegistry = Depends(get_action_registry),
):
    """Delete secret (converts to DeleteAction)."""
    action = rest.delete_action(key, environment, projectId, secretPath)
    return await execute_action(registry, action)
