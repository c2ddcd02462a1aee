"""
Infisical Service: FastAPI app exposing secrets operations as semantic actions.

Start:
  infisicalservice serve
  # or
  uvicorn infisicalservice.api.app:create_app --factory --host 0.0.0.0 --port 8093

Lifecycle: handlers are registered once when the app is created; on start-up
the service registers with the registry service. Under `infisicalservice serve`
it unregisters when shutdown begins, before connections drain (see
api/server.py); the lifespan exit unregisters only if that has not happened.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from infisicalservice import __version__
from infisicalservice.api.middleware import APIKeyMiddleware, CorrelationMiddleware
from infisicalservice.api.routers import health, secrets, semantic
from infisicalservice.config import ServiceConfig, get_config
from infisicalservice.errors import ServiceError
from infisicalservice.masking import mask_credential
from infisicalservice.semantic.handlers import BackendFactory, build_registry
from infisicalservice.semantic.registry import ActionRegistry
from infisicalservice.services.registry import RegistryClient, service_registration

logger = logging.getLogger(__name__)


def log_startup(config: ServiceConfig) -> None:
    logger.info("Starting Infisical Semantic Service on port %d", config.port)
    logger.info("Supports Infisical secrets management with Schema.org semantic types")
    logger.info("Environment variables:")
    logger.info("  - INFISICAL_CLIENT_ID: %s", mask_credential(config.infisical.client_id))
    logger.info("  - INFISICAL_CLIENT_SECRET: %s", mask_credential(config.infisical.client_secret))
    if config.api_key_required:
        logger.info("API key authentication enabled")
    else:
        logger.info("Running in development mode (no API key required)")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Failed envelope when the error came from a handler, plain error body otherwise."""
    if exc.action is not None:
        body = exc.action.to_dict()
        body.update({k: v for k, v in exc.to_dict().items() if k not in ("error", "cause")})
    else:
        body = exc.to_dict()
    return JSONResponse(body, status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": f"Invalid request: {exc.errors()}"}, status_code=400)


def create_app(
    config: ServiceConfig | None = None,
    registry: ActionRegistry | None = None,
    backend_factory: BackendFactory | None = None,
    registry_client: RegistryClient | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Service configuration (defaults to get_config()).
        registry: Pre-built action registry; tests pass one holding fakes.
        backend_factory: Secrets backend factory for the default handlers.
        registry_client: Service-registry client used by the lifespan.
    """
    config = config or get_config()
    if registry is None:
        registry = build_registry(config.infisical, backend_factory)
    registry_client = registry_client or RegistryClient(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log_startup(config)
        async with service_registration(registry_client):
            yield
            logger.info("Shutting down server...")
        logger.info("Server stopped")

    app = FastAPI(
        title=config.service_name,
        description=config.description,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.action_registry = registry

    app.add_middleware(
        APIKeyMiddleware,
        api_key=config.api_key,
        protected_prefix="/v1/api",
        exempt_paths=frozenset({"/v1/api/docs"}),
    )
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(semantic.router)
    app.include_router(secrets.router)
    return app
