"""Semantic action endpoint: the primary interface."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from infisicalservice.api.deps import execute_action, get_action_registry
from infisicalservice.semantic.parser import parse_action
from infisicalservice.semantic.registry import ActionRegistry

router = APIRouter(prefix="/v1/api", tags=["semantic"])


@router.post("/semantic/action")
async def semantic_action(
    request: Request, registry: ActionRegistry = Depends(get_action_registry)
):
    """Execute a JSON-LD or schema-typed action and return the resulting envelope."""
    body = await request.body()
    action = parse_action(body)
    return await execute_action(registry, action)
