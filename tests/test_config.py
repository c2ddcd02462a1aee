"""Tests for infisicalservice.config: environment-driven configuration."""

import pytest

from infisicalservice.config import (
    InfisicalConfig,
    RegistryConfig,
    ServiceConfig,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def _clean(clean_env):
    yield


class TestInfisicalConfig:
    def test_defaults(self):
        cfg = InfisicalConfig()
        assert cfg.client_id == ""
        assert cfg.site_url == ""
        assert cfg.has_credentials is False

    def test_requires_both_credentials(self):
        assert InfisicalConfig(client_id="id").has_credentials is False
        assert InfisicalConfig(client_secret="s").has_credentials is False
        assert InfisicalConfig(client_id="id", client_secret="s").has_credentials is True

    def test_frozen(self):
        cfg = InfisicalConfig()
        with pytest.raises(AttributeError):
            cfg.client_id = "other"  # type: ignore[misc]


class TestRegistryConfig:
    def test_disabled_without_url(self):
        assert RegistryConfig().enabled is False

    def test_enabled_with_url(self):
        assert RegistryConfig(url="http://registry:8096").enabled is True


class TestServiceConfig:
    def test_defaults(self):
        cfg = ServiceConfig()
        assert cfg.service_id == "infisicalservice"
        assert cfg.port == 8093
        assert cfg.api_key_required is False

    def test_public_url_default(self):
        assert ServiceConfig(port=9000).public_url == "http://localhost:9000"

    def test_public_url_override(self):
        cfg = ServiceConfig(service_url="http://infisicalservice:8093/")
        assert cfg.public_url == "http://infisicalservice:8093"


class TestGetConfig:
    def test_defaults_from_empty_env(self):
        cfg = get_config()
        assert cfg.port == 8093
        assert cfg.host == "0.0.0.0"
        assert cfg.infisical.has_credentials is False
        assert cfg.registry.enabled is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9999")
        monkeypatch.setenv("INFISICAL_CLIENT_ID", "cid")
        monkeypatch.setenv("INFISICAL_CLIENT_SECRET", "csecret")
        monkeypatch.setenv("INFISICAL_URL", "https://secrets.internal")
        monkeypatch.setenv("INFISICAL_SERVICE_API_KEY", "k3y")
        monkeypatch.setenv("REGISTRYSERVICE_API_URL", "http://registry:8096/")
        monkeypatch.setenv("INFISICAL_SERVICE_LOG_LEVEL", "debug")

        cfg = get_config()
        assert cfg.port == 9999
        assert cfg.infisical.client_id == "cid"
        assert cfg.infisical.client_secret == "csecret"
        assert cfg.infisical.site_url == "https://secrets.internal"
        assert cfg.api_key == "k3y"
        assert cfg.registry.url == "http://registry:8096"
        assert cfg.log_level == "DEBUG"

    def test_singleton(self):
        assert get_config() is get_config()

    def test_reset(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("PORT", "8100")
        reset_config()
        second = get_config()
        assert first is not second
        assert second.port == 8100

    def test_loads_dotenv_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / "service.env"
        env_file.write_text("INFISICAL_CLIENT_ID=from-dotenv\n")
        monkeypatch.setenv("INFISICAL_SERVICE_ENV_FILE", str(env_file))
        # setenv first so monkeypatch removes the dotenv-loaded value on teardown
        monkeypatch.setenv("INFISICAL_CLIENT_ID", "placeholder")
        monkeypatch.delenv("INFISICAL_CLIENT_ID")

        cfg = get_config()
        assert cfg.infisical.client_id == "from-dotenv"

    def test_environment_wins_over_dotenv(self, monkeypatch, tmp_path):
        env_file = tmp_path / "service.env"
        env_file.write_text("INFISICAL_CLIENT_ID=from-dotenv\n")
        monkeypatch.setenv("INFISICAL_SERVICE_ENV_FILE", str(env_file))
        monkeypatch.setenv("INFISICAL_CLIENT_ID", "from-env")

        assert get_config().infisical.client_id == "from-env"
