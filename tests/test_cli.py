"""End-to-end tests for the Typer commands."""

from __future__ import annotations

import functools
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from rcprov.cli import app
from rcprov.commands import provision as provision_cmd
from rcprov.commands import proxy as proxy_cmd
from rcprov.services.provisioner import Provisioner
from rcprov.services.runcloud import RunCloudClient

runner = CliRunner()

BASE_ARGS = ["provision", "--domain", "example.com", "--app", "example", "--password", "S3cret!pass"]


@pytest.fixture
def offline(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, fake_api):
    """Route the provision command to the fake API with no propagation delay."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        provision_cmd,
        "RunCloudClient",
        lambda key, server: RunCloudClient(
            key, server, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_api))
        ),
    )
    monkeypatch.setattr(provision_cmd, "Provisioner", functools.partial(Provisioner, sleep=AsyncMock()))
    return fake_api


class TestProvisionCommand:
    def test_missing_credentials_exit_before_network(self, offline):
        result = runner.invoke(app, BASE_ARGS)
        assert result.exit_code == 1
        assert "RC_API_KEY" in result.output
        assert offline.calls == []

    def test_custom_without_owner(self, offline, env):
        result = runner.invoke(app, [*BASE_ARGS, "--type", "custom"], env=env)
        assert result.exit_code == 1
        assert offline.calls == []

    def test_unsupported_php_rejected(self, offline, env):
        result = runner.invoke(app, [*BASE_ARGS, "--php", "5.6"], env=env)
        assert result.exit_code != 0
        assert offline.calls == []

    def test_success(self, offline, env):
        result = runner.invoke(app, [*BASE_ARGS, "--ssl", "--php", "8.3"], env=env)
        assert result.exit_code == 0, result.output
        assert offline.calls == ["create_wordpress", "install_hub", "get_domains", "install_ssl"]
        assert offline.bodies["create_wordpress"]["phpVersion"] == "php83rc"
        assert "Process Complete" in result.output

    def test_env_toggle_respected(self, offline, env):
        result = runner.invoke(app, BASE_ARGS, env={**env, "RC_INSTALL_HUB": "false"})
        assert result.exit_code == 0, result.output
        assert offline.calls == ["create_wordpress"]

    def test_cli_toggle_beats_env(self, offline, env):
        result = runner.invoke(app, [*BASE_ARGS, "--hub"], env={**env, "RC_INSTALL_HUB": "false"})
        assert result.exit_code == 0, result.output
        assert offline.calls == ["create_wordpress", "install_hub"]

    def test_env_file(self, offline, tmp_path: Path):
        env_file = tmp_path / "prod.env"
        env_file.write_text("RC_API_KEY=filekey\nRC_SERVER_ID=42\nRC_INSTALL_HUB=false\n")
        result = runner.invoke(app, [*BASE_ARGS, "--env-file", str(env_file)])
        assert result.exit_code == 0, result.output
        assert offline.requests[0].headers["Authorization"] == "Bearer filekey"

    def test_hub_failure_still_exits_zero(self, offline, env):
        offline.failures["install_hub"] = (500, {"message": "hub down"})
        result = runner.invoke(app, [*BASE_ARGS, "--ssl"], env=env)
        assert result.exit_code == 0, result.output
        assert offline.calls[-1] == "install_ssl"
        assert "Process Complete" in result.output

    def test_creation_failure_exits_one(self, offline, env):
        offline.failures["create_wordpress"] = (401, {"message": "Unauthenticated."})
        result = runner.invoke(app, [*BASE_ARGS, "--ssl"], env=env)
        assert result.exit_code == 1
        assert "Authentication Failed" in result.output
        assert offline.calls == ["create_wordpress"]


class TestProxyCommand:
    def test_requires_root(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr("rcprov.services.nginx.os.geteuid", lambda: 1000)
        result = runner.invoke(app, ["proxy", "setup", "--site", "myapp", "--config-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "root" in result.output
        assert list(tmp_path.iterdir()) == []

    def test_syntax_failure_removes_file(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr("rcprov.services.nginx.os.geteuid", lambda: 0)
        failed = subprocess.CompletedProcess(["nginx-rc", "-t"], 1, stdout="", stderr="emerg: bad directive")
        with patch("rcprov.services.nginx._run", return_value=failed):
            result = runner.invoke(proxy_cmd.app, ["--site", "myapp", "--config-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert not (tmp_path / "myapp.location.root.server.conf").exists()

    def test_success_with_env_config_dir(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr("rcprov.services.nginx.os.geteuid", lambda: 0)
        ok = subprocess.CompletedProcess([], 0, stdout="", stderr="")
        with patch("rcprov.services.nginx._run", return_value=ok):
            result = runner.invoke(
                app, ["proxy", "setup", "--site", "myapp"], env={"RC_PROXY_CONFIG_DIR": str(tmp_path)}
            )

        assert result.exit_code == 0, result.output
        assert "127.0.0.1:3000;" in (tmp_path / "myapp.location.root.server.conf").read_text()
