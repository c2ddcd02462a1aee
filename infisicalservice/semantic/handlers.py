"""
Secrets action handlers: run semantic actions against Infisical.

Every handler walks the same state machine:

  created -> validating -> authenticating -> retrieving/executing -> completed
                      \\-> failed        \\-> failed              \\-> failed

Validation (target fields, object fields, process credentials) happens before
a backend is created, so a rejected action never reaches Infisical. Nothing is
retried here; the first failure is terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from infisicalservice.backend.client import (
    DEFAULT_SECRET_PATH,
    BackendError,
    BackendSecret,
    InfisicalBackend,
    SecretScope,
    SecretsBackend,
    normalize_site_url,
)
from infisicalservice.config import InfisicalConfig
from infisicalservice.errors import (
    AuthenticationError,
    BackendOperationError,
    ConfigurationError,
    RetrievalError,
    SecretNotFound,
    ValidationError,
)
from infisicalservice.masking import mask_secret_value
from infisicalservice.semantic.models import (
    ActionPhase,
    ActionResult,
    ActionType,
    SemanticAction,
)
from infisicalservice.semantic.registry import ActionHandler, ActionRegistry

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str], SecretsBackend]


class SecretsActionHandler(ActionHandler):
    """Shared validate -> authenticate -> execute pipeline."""

    # Extra fields that must be present besides the target, as JSON paths.
    required_fields: tuple[str, ...] = ()
    execute_phase: ActionPhase = ActionPhase.EXECUTING

    def __init__(self, config: InfisicalConfig, backend_factory: BackendFactory | None = None):
        self.config = config
        self.backend_factory = backend_factory or self._default_backend

    def _default_backend(self, site_url: str) -> SecretsBackend:
        return InfisicalBackend(site_url)

    def handle(self, action: SemanticAction) -> SemanticAction:
        action.start()
        site_url, scope = self._validate(action)

        if not self.config.has_credentials:
            raise ConfigurationError(
                "Infisical credentials not configured. "
                "Set INFISICAL_CLIENT_ID and INFISICAL_CLIENT_SECRET"
            )

        logger.info(
            "%s on Infisical (url=%s, project=%s, env=%s, path=%s, includeImports=%s)",
            action.type, site_url, scope.project_id, scope.environment,
            scope.secret_path, scope.include_imports,
        )

        action.advance(ActionPhase.AUTHENTICATING)
        with self._session(site_url) as backend:
            action.advance(self.execute_phase)
            secrets = self.execute(action, backend, scope)

        for secret in secrets:
            logger.debug("  - %s: %s", secret.key, mask_secret_value(secret.value))
        action.complete(ActionResult(value=[s.as_pair() for s in secrets]))
        return action

    def _validate(self, action: SemanticAction) -> tuple[str, SecretScope]:
        target = action.require_target()
        project_id = action.require_field("target.identifier")
        environment = action.require_field("target.environment")
        site_url = target.url or self.config.site_url
        if not site_url:
            raise ValidationError("target.url", "target.url (Infisical instance URL) is required")
        if target.include_imports is not None and not isinstance(target.include_imports, bool):
            raise ValidationError(
                "target.includeImports", "target.includeImports must be a boolean"
            )
        for name in self.required_fields:
            action.require_field(name)

        scope = SecretScope(
            project_id=project_id,
            environment=environment,
            secret_path=target.secret_path or DEFAULT_SECRET_PATH,
            include_imports=True if target.include_imports is None else target.include_imports,
        )
        return normalize_site_url(site_url), scope

    @contextmanager
    def _session(self, site_url: str) -> Iterator[SecretsBackend]:
        with self.backend_factory(site_url) as backend:
            try:
                backend.login(self.config.client_id, self.config.client_secret)
            except BackendError as e:
                raise AuthenticationError("Failed to authenticate with Infisical", e) from e
            yield backend

    def execute(
        self, action: SemanticAction, backend: SecretsBackend, scope: SecretScope
    ) -> list[BackendSecret]:
        raise NotImplementedError


class RetrieveSecretsHandler(SecretsActionHandler):
    """RetrieveAction: list every secret in the target scope."""

    action_type = ActionType.RETRIEVE
    execute_phase = ActionPhase.RETRIEVING

    def execute(self, action, backend, scope):
        try:
            secrets = backend.list_secrets(scope)
        except BackendError as e:
            raise RetrievalError("Failed to retrieve secrets from Infisical", e) from e
        logger.info("Successfully retrieved %d secrets", len(secrets))
        return secrets


class SearchSecretsHandler(RetrieveSecretsHandler):
    """SearchAction: retrieve, then keep the secret named by query/object.identifier."""

    action_type = ActionType.SEARCH

    def execute(self, action, backend, scope):
        secrets = super().execute(action, backend, scope)
        name = action.query or (action.object.identifier if action.object else None)
        if not name:
            return secrets
        matches = [s for s in secrets if s.key == name]
        if not matches:
            raise SecretNotFound(name)
        return matches


class CreateSecretHandler(SecretsActionHandler):
    action_type = ActionType.CREATE
    required_fields = ("object.identifier", "object.value")

    def execute(self, action, backend, scope):
        key, value = action.object.identifier, action.object.value
        try:
            secret = backend.create_secret(scope, key, value)
        except BackendError as e:
            raise BackendOperationError(f"Failed to create secret {key}", e) from e
        logger.info("Created secret %s", key)
        return [secret]


class UpdateSecretHandler(SecretsActionHandler):
    action_type = ActionType.UPDATE
    required_fields = ("object.identifier", "object.value")

    def execute(self, action, backend, scope):
        key, value = action.object.identifier, action.object.value
        try:
            secret = backend.update_secret(scope, key, value)
        except BackendError as e:
            raise BackendOperationError(f"Failed to update secret {key}", e) from e
        logger.info("Updated secret %s", key)
        return [secret]


class DeleteSecretHandler(SecretsActionHandler):
    action_type = ActionType.DELETE
    required_fields = ("object.identifier",)

    def execute(self, action, backend, scope):
        key = action.object.identifier
        try:
            secret = backend.delete_secret(scope, key)
        except BackendError as e:
            raise BackendOperationError(f"Failed to delete secret {key}", e) from e
        logger.info("Deleted secret %s", key)
        return [secret]


HANDLER_CLASSES: tuple[type[SecretsActionHandler], ...] = (
    RetrieveSecretsHandler,
    SearchSecretsHandler,
    CreateSecretHandler,
    UpdateSecretHandler,
    DeleteSecretHandler,
)


def build_registry(
    config: InfisicalConfig, backend_factory: BackendFactory | None = None
) -> ActionRegistry:
    """Register every secrets handler and freeze the registry."""
    registry = ActionRegistry()
    for cls in HANDLER_CLASSES:
        registry.add(cls(config, backend_factory))
    registry.freeze()
    return registry
