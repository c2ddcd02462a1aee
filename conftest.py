"""
Root-level shared test fixtures.

Inherited by tests/ and the API suite under infisicalservice/api/tests.
The Infisical backend is replaced by an in-memory fake that records every
call, so tests can assert that rejected actions never reach the backend.
"""

from __future__ import annotations

import pytest

from infisicalservice.backend.client import BackendError, BackendSecret, SecretScope, SecretsBackend
from infisicalservice.config import InfisicalConfig, RegistryConfig, ServiceConfig, reset_config
from infisicalservice.semantic.handlers import build_registry


class FakeInfisical:
    """In-memory Infisical: secrets keyed by (project, environment, path)."""

    def __init__(self) -> None:
        self.secrets: dict[tuple[str, str, str], dict[str, str]] = {}
        self.calls: list[tuple] = []
        self.sites: list[str] = []
        self.backends: list[FakeBackend] = []
        self.fail_login = False
        self.fail_list = False
        self.fail_write = False

    def seed(self, project: str, environment: str, secrets: dict[str, str], path: str = "/"):
        self.secrets.setdefault((project, environment, path), {}).update(secrets)

    def factory(self, site_url: str) -> FakeBackend:
        self.sites.append(site_url)
        backend = FakeBackend(self)
        self.backends.append(backend)
        return backend


class FakeBackend(SecretsBackend):
    def __init__(self, store: FakeInfisical) -> None:
        self.store = store
        self.closed = False

    def _bucket(self, scope: SecretScope) -> dict[str, str]:
        return self.store.secrets.setdefault(
            (scope.project_id, scope.environment, scope.secret_path), {}
        )

    def login(self, client_id, client_secret):
        self.store.calls.append(("login", client_id))
        if self.store.fail_login:
            raise BackendError("401 invalid client credentials", status_code=401)

    def list_secrets(self, scope):
        self.store.calls.append(("list", scope))
        if self.store.fail_list:
            raise BackendError("503 service unavailable", status_code=503)
        return [BackendSecret(k, v) for k, v in self._bucket(scope).items()]

    def create_secret(self, scope, key, value):
        self.store.calls.append(("create", scope, key))
        if self.store.fail_write:
            raise BackendError("400 secret already exists", status_code=400)
        self._bucket(scope)[key] = value
        return BackendSecret(key, value)

    def update_secret(self, scope, key, value):
        self.store.calls.append(("update", scope, key))
        bucket = self._bucket(scope)
        if self.store.fail_write or key not in bucket:
            raise BackendError(f"404 secret {key} not found", status_code=404)
        bucket[key] = value
        return BackendSecret(key, value)

    def delete_secret(self, scope, key):
        self.store.calls.append(("delete", scope, key))
        bucket = self._bucket(scope)
        if self.store.fail_write or key not in bucket:
            raise BackendError(f"404 secret {key} not found", status_code=404)
        return BackendSecret(key, bucket.pop(key))

    def close(self):
        self.closed = True


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove service env vars and point .env lookup at an empty directory."""
    for key in [
        "PORT",
        "HOST",
        "INFISICAL_CLIENT_ID",
        "INFISICAL_CLIENT_SECRET",
        "INFISICAL_URL",
        "INFISICAL_SERVICE_API_KEY",
        "INFISICAL_SERVICE_URL",
        "INFISICAL_SERVICE_LOG_LEVEL",
        "REGISTRYSERVICE_API_URL",
        "REGISTRYSERVICE_TIMEOUT",
    ]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("INFISICAL_SERVICE_ENV_FILE", str(tmp_path / ".env"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def infisical_config() -> InfisicalConfig:
    return InfisicalConfig(
        client_id="client-id-1234567890",
        client_secret="client-secret-abcdefghij",
        site_url="https://infisical.example.com",
    )


@pytest.fixture
def service_config(infisical_config) -> ServiceConfig:
    return ServiceConfig(port=18093, infisical=infisical_config, registry=RegistryConfig())


@pytest.fixture
def fake_infisical() -> FakeInfisical:
    store = FakeInfisical()
    store.seed("p1", "prod", {"DB_PASSWORD": "s3cr3t123", "API_TOKEN": "tok-abcdefghijkl"})
    return store


@pytest.fixture
def action_registry(infisical_config, fake_infisical):
    """Registry with the real secrets handlers wired to the fake backend."""
    return build_registry(infisical_config, fake_infisical.factory)
