"""Shared FastAPI dependencies and the action execution helper."""

from __future__ import annotations

import asyncio

from fastapi import Request
from fastapi.responses import JSONResponse

from infisicalservice.config import ServiceConfig
from infisicalservice.semantic.models import SemanticAction
from infisicalservice.semantic.registry import ActionRegistry


def get_action_registry(request: Request) -> ActionRegistry:
    """Action registry built at start-up (stored on app.state)."""
    return request.app.state.action_registry


def get_service_config(request: Request) -> ServiceConfig:
    return request.app.state.config


async def execute_action(registry: ActionRegistry, action: SemanticAction) -> JSONResponse:
    """Dispatch an action off the event loop and serialize the envelope.

    Backend calls block, so the handler runs in a worker thread.
    ServiceErrors propagate to the app's exception handler.
    """
    result = await asyncio.to_thread(registry.handle, action)
    return JSONResponse(result.to_dict())
