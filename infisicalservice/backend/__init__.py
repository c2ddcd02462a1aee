"""Secrets backend boundary: the Infisical API client and its abstract interface."""

from infisicalservice.backend.client import (
    BackendError,
    BackendSecret,
    InfisicalBackend,
    SecretScope,
    SecretsBackend,
    normalize_site_url,
)

__all__ = [
    "BackendError",
    "BackendSecret",
    "InfisicalBackend",
    "SecretScope",
    "SecretsBackend",
    "normalize_site_url",
]
