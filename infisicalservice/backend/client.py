"""
Infisical backend: thin adapter over the Infisical Python SDK.

SecretsBackend is the seam the action handlers talk to; InfisicalBackend is
the production implementation over ``infisical_sdk.InfisicalSDKClient``.
Authentication and transport belong to the SDK. A backend instance lives for
one action: it is created, logged in, used and closed within the request, so
no session or token is shared between requests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SECRET_PATH = "/"


class BackendError(Exception):
    """Raised by a SecretsBackend when the backend call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class SecretScope:
    """Project/environment/path a secrets call is scoped to."""

    project_id: str
    environment: str
    secret_path: str = DEFAULT_SECRET_PATH
    include_imports: bool = True


@dataclass(frozen=True)
class BackendSecret:
    key: str
    value: str

    def as_pair(self) -> dict[str, str]:
        return {"name": self.key, "value": self.value}


def normalize_site_url(url: str) -> str:
    """Strip any scheme and trailing slash, then re-apply https://."""
    host = url.strip()
    for prefix in ("https://", "http://"):
        if host.startswith(prefix):
            host = host[len(prefix):]
            break
    return "https://" + host.rstrip("/")


class SecretsBackend(ABC):
    """Operations the action handlers need from a secrets backend."""

    @abstractmethod
    def login(self, client_id: str, client_secret: str) -> None: ...

    @abstractmethod
    def list_secrets(self, scope: SecretScope) -> list[BackendSecret]: ...

    @abstractmethod
    def create_secret(self, scope: SecretScope, key: str, value: str) -> BackendSecret: ...

    @abstractmethod
    def update_secret(self, scope: SecretScope, key: str, value: str) -> BackendSecret: ...

    @abstractmethod
    def delete_secret(self, scope: SecretScope, key: str) -> BackendSecret: ...

    def close(self) -> None:
        pass

    def __enter__(self) -> SecretsBackend:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class InfisicalBackend(SecretsBackend):
    """SecretsBackend over ``InfisicalSDKClient``.

    The SDK's own secret cache is disabled; every call goes to Infisical.
    """

    def __init__(self, site_url: str) -> None:
        self.site_url = site_url.rstrip("/")
        self._client: Any = None

    def _sdk(self) -> Any:
        if self._client is None:
            raise BackendError("not authenticated; call login() first")
        return self._client

    def login(self, client_id: str, client_secret: str) -> None:
        try:
            from infisical_sdk import InfisicalSDKClient
        except ImportError as e:
            raise BackendError("infisicalsdk package is not installed") from e

        try:
            client = InfisicalSDKClient(host=self.site_url, cache_ttl=None)
            client.auth.universal_auth.login(client_id=client_id, client_secret=client_secret)
        except Exception as e:
            raise BackendError(f"universal-auth login failed: {e}") from e
        self._client = client

    def close(self) -> None:
        self._client = None

    def list_secrets(self, scope: SecretScope) -> list[BackendSecret]:
        client = self._sdk()
        try:
            response = client.secrets.list_secrets(
                project_id=scope.project_id,
                environment_slug=scope.environment,
                secret_path=scope.secret_path,
                expand_secret_references=True,
                view_secret_value=True,
                include_imports=scope.include_imports,
            )
        except Exception as e:
            raise BackendError(f"list secrets failed: {e}") from e

        secrets = [_to_secret(s) for s in _items(getattr(response, "secrets", None), "secrets")]
        if scope.include_imports:
            # Secrets defined at the path take precedence over imported ones.
            seen = {s.key for s in secrets}
            for imported in _items(getattr(response, "imports", None), "imports"):
                for raw in _items(getattr(imported, "secrets", None), "imports.secrets"):
                    secret = _to_secret(raw)
                    if secret.key not in seen:
                        secrets.append(secret)
                        seen.add(secret.key)
        logger.debug("Infisical returned %d secrets", len(secrets))
        return secrets

    def create_secret(self, scope: SecretScope, key: str, value: str) -> BackendSecret:
        try:
            raw = self._sdk().secrets.create_secret_by_name(
                secret_name=key,
                project_id=scope.project_id,
                secret_path=scope.secret_path,
                environment_slug=scope.environment,
                secret_value=value,
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"create secret {key} failed: {e}") from e
        return _to_secret(raw) if raw is not None else BackendSecret(key, value)

    def update_secret(self, scope: SecretScope, key: str, value: str) -> BackendSecret:
        try:
            raw = self._sdk().secrets.update_secret_by_name(
                current_secret_name=key,
                project_id=scope.project_id,
                secret_path=scope.secret_path,
                environment_slug=scope.environment,
                secret_value=value,
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"update secret {key} failed: {e}") from e
        return _to_secret(raw) if raw is not None else BackendSecret(key, value)

    def delete_secret(self, scope: SecretScope, key: str) -> BackendSecret:
        try:
            raw = self._sdk().secrets.delete_secret_by_name(
                secret_name=key,
                project_id=scope.project_id,
                secret_path=scope.secret_path,
                environment_slug=scope.environment,
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"delete secret {key} failed: {e}") from e
        return _to_secret(raw) if raw is not None else BackendSecret(key, "")


def _items(value: Any, name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise BackendError(f"unexpected Infisical response: {name} is {type(value).__name__}")
    return list(value)


def _to_secret(raw: Any) -> BackendSecret:
    """Convert an SDK secret object (or raw dict) to a BackendSecret."""
    if isinstance(raw, dict):
        key, value = raw.get("secretKey"), raw.get("secretValue")
    else:
        key = getattr(raw, "secretKey", None)
        value = getattr(raw, "secretValue", None)
    if not isinstance(key, str) or not key:
        raise BackendError(f"unexpected Infisical response: secret without a key ({raw!r:.80})")
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise BackendError(f"unexpected Infisical response: value of {key} is not text")
    return BackendSecret(key=key, value=value)
