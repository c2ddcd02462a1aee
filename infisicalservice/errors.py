"""
Error taxonomy for the Infisical service.

Every error carries the HTTP status it maps to. Caller-input errors are 400,
a missing secret is 404, configuration and backend failures are 500. None of
them is retried; the API layer turns them into JSON bodies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from infisicalservice.semantic.models import SemanticAction


class ServiceError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code: int = 500

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        # Set by the dispatcher when the failure happened while handling an action.
        self.action: SemanticAction | None = None

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.cause is not None:
            body["cause"] = str(self.cause)
        return body


class ParseError(ServiceError):
    """Malformed JSON or missing @type discriminator."""

    status_code = 400


class InvalidRequest(ServiceError):
    """A REST request failed validation before an action was built."""

    status_code = 400


class ValidationError(ServiceError):
    """A required envelope or target field is missing."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} is required")
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["field"] = self.field
        return body


class UnsupportedAction(ServiceError):
    """No handler is registered for the action type."""

    status_code = 400

    def __init__(self, action_type: str, supported: list[str]) -> None:
        super().__init__(
            f"Unsupported action type: {action_type}. "
            f"Supported types: {', '.join(supported) or 'none'}"
        )
        self.action_type = action_type
        self.supported = supported

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["supportedTypes"] = self.supported
        return body


class SecretNotFound(ServiceError):
    status_code = 404

    def __init__(self, name: str) -> None:
        super().__init__(f"secret '{name}' not found")
        self.name = name


class ConfigurationError(ServiceError):
    """Process-level settings (backend credentials) are missing."""

    status_code = 500


class AuthenticationError(ServiceError):
    """The backend rejected the configured credentials."""

    status_code = 500


class RetrievalError(ServiceError):
    """The backend failed to list or read secrets."""

    status_code = 500


class BackendOperationError(ServiceError):
    """The backend failed to create, update or delete a secret."""

    status_code = 500
