"""
Centralized configuration for the Infisical service.

All configuration is loaded from environment variables (and a local .env file
when present) with sensible defaults. Backend credentials are process-level
settings; they are never taken from an inbound request.

Usage:
    from infisicalservice.config import get_config
    cfg = get_config()
    print(cfg.port)                    # 8093
    print(cfg.infisical.has_credentials)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

SERVICE_ID = "infisicalservice"
SERVICE_NAME = "Infisical Secrets Management Service"
SERVICE_DESCRIPTION = "Secure secrets management using Infisical with semantic action support"
CAPABILITIES = ("credential-management", "secrets-management", "infisical")


@dataclass(frozen=True)
class InfisicalConfig:
    """Infisical backend connection parameters."""

    client_id: str = ""
    client_secret: str = ""
    site_url: str = ""  # fallback when an action's target carries no url

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class RegistryConfig:
    """Service registry parameters. Empty url disables registration."""

    url: str = ""
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True)
class ServiceConfig:
    """Top-level service configuration."""

    service_id: str = SERVICE_ID
    service_name: str = SERVICE_NAME
    description: str = SERVICE_DESCRIPTION
    version: str = "v1"

    host: str = "0.0.0.0"
    port: int = 8093
    service_url: str = ""
    api_key: str = ""
    log_level: str = "INFO"

    infisical: InfisicalConfig = field(default_factory=InfisicalConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @property
    def public_url(self) -> str:
        """URL other services use to reach this one."""
        if self.service_url:
            return self.service_url.rstrip("/")
        return f"http://localhost:{self.port}"

    @property
    def api_key_required(self) -> bool:
        return bool(self.api_key)


# Singleton
_config: ServiceConfig | None = None


def get_config() -> ServiceConfig:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> ServiceConfig:
    """Load configuration from environment variables."""
    env_path = Path(os.environ.get("INFISICAL_SERVICE_ENV_FILE", Path.cwd() / ".env"))
    if env_path.exists():
        load_dotenv(env_path, override=False)

    infisical = InfisicalConfig(
        client_id=os.environ.get("INFISICAL_CLIENT_ID", ""),
        client_secret=os.environ.get("INFISICAL_CLIENT_SECRET", ""),
        site_url=os.environ.get("INFISICAL_URL", ""),
    )

    registry = RegistryConfig(
        url=os.environ.get("REGISTRYSERVICE_API_URL", "").rstrip("/"),
        timeout=float(os.environ.get("REGISTRYSERVICE_TIMEOUT", "10")),
    )

    return ServiceConfig(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8093")),
        service_url=os.environ.get("INFISICAL_SERVICE_URL", ""),
        api_key=os.environ.get("INFISICAL_SERVICE_API_KEY", ""),
        log_level=os.environ.get("INFISICAL_SERVICE_LOG_LEVEL", "INFO").upper(),
        infisical=infisical,
        registry=registry,
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
