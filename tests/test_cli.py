"""Tests for the infisicalservice CLI."""

import httpx

from infisicalservice import __version__
from infisicalservice import cli
from infisicalservice.api import server


class TestVersion:
    def test_version_command(self, capsys):
        assert cli.main(["version"]) == 0
        assert capsys.readouterr().out.strip() == f"infisicalservice {__version__}"

    def test_version_flag(self, capsys):
        assert cli.main(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "serve" in capsys.readouterr().out


class TestHealth:
    def test_healthy(self, monkeypatch, capsys, clean_env):
        seen = []

        def fake_get(url, timeout):
            seen.append(url)
            return httpx.Response(200, json={"status": "healthy"})

        monkeypatch.setattr(httpx, "get", fake_get)
        assert cli.main(["health", "--url", "http://localhost:18093/"]) == 0
        assert seen == ["http://localhost:18093/health"]
        assert '"healthy"' in capsys.readouterr().out

    def test_defaults_to_configured_url(self, monkeypatch, clean_env):
        seen = []
        monkeypatch.setenv("PORT", "9123")
        monkeypatch.setattr(
            httpx, "get", lambda url, timeout: seen.append(url) or httpx.Response(200, json={})
        )
        cli.main(["health"])
        assert seen == ["http://localhost:9123/health"]

    def test_unhealthy_status(self, monkeypatch, clean_env):
        monkeypatch.setattr(httpx, "get", lambda url, timeout: httpx.Response(503, text="down"))
        assert cli.main(["health", "--url", "http://localhost:18093"]) == 1

    def test_unreachable(self, monkeypatch, capsys, clean_env):
        def refuse(url, timeout):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(httpx, "get", refuse)
        assert cli.main(["health", "--url", "http://localhost:18093"]) == 1
        assert "unreachable" in capsys.readouterr().err


class TestServe:
    def test_cli_overrides_reach_app_config(self, monkeypatch, clean_env):
        captured = []
        monkeypatch.setattr(server, "serve", captured.append)
        monkeypatch.setattr(cli, "_configure_logging", lambda level: None)

        argv = ["serve", "--port", "9000", "--host", "127.0.0.1", "--log-level", "debug"]
        assert cli.main(argv) == 0
        (config,) = captured
        assert config.port == 9000
        assert config.host == "127.0.0.1"
        assert config.log_level == "DEBUG"

    def test_defaults_from_environment(self, monkeypatch, clean_env):
        captured = []
        monkeypatch.setenv("PORT", "18100")
        monkeypatch.setattr(server, "serve", captured.append)
        monkeypatch.setattr(cli, "_configure_logging", lambda level: None)

        assert cli.main(["serve"]) == 0
        assert captured[0].port == 18100
        assert captured[0].host == "0.0.0.0"
        assert captured[0].log_level == "INFO"
