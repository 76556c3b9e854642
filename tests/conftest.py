"""Shared test fixtures."""

from __future__ import annotations

import io
import json
import os
from typing import Any

import httpx
import pytest
from rich.console import Console

from rcprov.config import CliOptions, resolve_config
from rcprov.models import ProvisionConfig
from rcprov.services.reporter import Reporter
from rcprov.services.runcloud import RunCloudClient


class FakeRunCloud:
    """httpx MockTransport handler emulating the RunCloud API.

    Records every call as an operation name in ``calls`` and the decoded
    request bodies in ``bodies``. ``failures`` maps an operation name to a
    ``(status, body)`` error response.
    """

    def __init__(
        self,
        *,
        app_id: int = 101,
        create_body: dict[str, Any] | None = None,
        domains: list[dict[str, Any]] | None = None,
        failures: dict[str, tuple[int, dict[str, Any]]] | None = None,
    ) -> None:
        self.create_body = create_body if create_body is not None else {"id": app_id, "name": "example"}
        self.domains = domains if domains is not None else [
            {"id": 7, "name": "example.com"},
            {"id": 8, "name": "www.example.com"},
        ]
        self.failures = failures or {}
        self.calls: list[str] = []
        self.bodies: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def operation(request: httpx.Request) -> str:
        path = request.url.path
        if path.endswith("/webapps/wordpress"):
            return "create_wordpress"
        if path.endswith("/webapps"):
            return "create_custom_app"
        if path.endswith("/settings/fpmnginx"):
            return "update_fpm_settings"
        if path.endswith("/runcloudhub"):
            return "install_hub"
        if path.endswith("/ssl"):
            return "install_ssl"
        if path.endswith("/domains"):
            return "get_domains"
        return "unknown"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        op = self.operation(request)
        self.calls.append(op)
        self.requests.append(request)
        if request.content:
            self.bodies[op] = json.loads(request.content)

        if op in self.failures:
            status, body = self.failures[op]
            return httpx.Response(status, json=body)
        if op in ("create_wordpress", "create_custom_app"):
            return httpx.Response(200, json=self.create_body)
        if op == "get_domains":
            return httpx.Response(200, json={"data": self.domains, "meta": {}})
        return httpx.Response(200, json={"status": "ok"})

    def client(self) -> RunCloudClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return RunCloudClient("test-key", "42", http_client=http)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's RC_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("RC_"):
            monkeypatch.delenv(name)


@pytest.fixture
def env() -> dict[str, str]:
    return {"RC_API_KEY": "test-key", "RC_SERVER_ID": "42"}


@pytest.fixture
def fake_api() -> FakeRunCloud:
    return FakeRunCloud()


@pytest.fixture
def reporter() -> Reporter:
    """Reporter writing to in-memory buffers; read them via ``.out.file``."""
    return Reporter(
        out=Console(file=io.StringIO(), width=200, highlight=False),
        err=Console(file=io.StringIO(), width=200, highlight=False),
    )


@pytest.fixture
def make_api() -> type[FakeRunCloud]:
    return FakeRunCloud


@pytest.fixture
def make_config(env: dict[str, str]):
    """Build a ProvisionConfig from CLI-style overrides on top of ``env``."""

    def _make(env_overrides: dict[str, str] | None = None, **overrides: Any) -> ProvisionConfig:
        options = {"domain": "example.com", "app_name": "example", "password": "S3cret!pass"}
        options.update(overrides)
        return resolve_config(CliOptions(**options), {**env, **(env_overrides or {})})

    return _make
