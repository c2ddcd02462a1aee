"""Service registry integration: self-registration with the registry service."""

from infisicalservice.services.registry import RegistryClient, service_registration

__all__ = ["RegistryClient", "service_registration"]
