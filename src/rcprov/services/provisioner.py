"""Provisioning sequence: create app -> wait -> patch PHP -> Hub -> SSL -> summary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import BaseModel, Field

from rcprov.constants import PROPAGATION_DELAY
from rcprov.errors import ApiError, DomainLookupError, RcprovError
from rcprov.models import (
    CustomAppPayload,
    DatabaseCredentials,
    HubType,
    ProvisionConfig,
    WordPressPayload,
)
from rcprov.services.credentials import generate_db_password, generate_id
from rcprov.services.reporter import Reporter
from rcprov.services.runcloud import RunCloudClient

log = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class StepResult(BaseModel):
    """Outcome of one best-effort step after creation."""

    name: str
    ok: bool = True
    skipped: bool = False
    error: str | None = None


class ProvisionResult(BaseModel):
    app_id: int | str
    database: DatabaseCredentials | None = None
    steps: list[StepResult] = Field(default_factory=list)

    def step(self, name: str) -> StepResult | None:
        return next((s for s in self.steps if s.name == name), None)


class Provisioner:
    """Runs the provisioning sequence for one resolved configuration.

    Only the creation call is fatal. Every later step records its failure in
    a ``StepResult``, prints a warning and a hint, and lets the run reach its
    final summary. Nothing is retried or rolled back.
    """

    def __init__(
        self,
        config: ProvisionConfig,
        client: RunCloudClient,
        reporter: Reporter,
        *,
        sleep: Sleep = asyncio.sleep,
        delay: float = PROPAGATION_DELAY,
    ) -> None:
        self.cfg = config
        self.client = client
        self.reporter = reporter
        self._sleep = sleep
        self._delay = delay

    async def run(self) -> ProvisionResult:
        kind = "WordPress Site" if self.cfg.is_wordpress else "Custom Web App"
        self.reporter.header(f"Provisioning {kind}...")
        self.print_initial_summary()

        database = self.build_database() if self.cfg.is_wordpress else None
        app_id = await self._create(database)
        result = ProvisionResult(app_id=app_id, database=database)

        if self.cfg.needs_propagation_wait:
            self.reporter.step(f"Waiting for file system propagation ({self._delay:g}s)...")
            await self._sleep(self._delay)

        if self.cfg.is_wordpress:
            # Must run after the wait so the FPM config files exist.
            if self.cfg.unrestricted_php:
                result.steps.append(await self._unlock_php_functions(app_id))
            if self.cfg.install_hub:
                result.steps.append(await self._install_hub(app_id))
            else:
                self.reporter.info("Skipping RunCloud Hub installation.")
                result.steps.append(StepResult(name="hub", skipped=True))

        if self.cfg.install_ssl:
            result.steps.append(await self._install_ssl(app_id))

        self.print_final_summary(result)
        return result

    # ── Payloads ─────────────────────────────────────────────────

    def build_database(self) -> DatabaseCredentials:
        return DatabaseCredentials.from_suffix(generate_id(), generate_db_password())

    def build_wordpress_payload(self, database: DatabaseCredentials) -> WordPressPayload:
        return WordPressPayload(
            name=self.cfg.app_name,
            domain_name=self.cfg.domain_name,
            site_title=f"Site - {self.cfg.domain_name}",
            admin_username=self.cfg.admin_user,
            admin_email=self.cfg.admin_email,
            password=self.cfg.admin_password,
            db_name=database.name,
            db_user=database.user,
            db_password=database.password,
            php_version=self.cfg.php_version,
            stack=self.cfg.stack,
            user=self.cfg.owner_id,
        )

    def build_custom_payload(self) -> CustomAppPayload:
        if self.cfg.owner_id is None:
            raise RcprovError("Custom apps require an owner id.")
        return CustomAppPayload(
            name=self.cfg.app_name,
            domain_name=self.cfg.domain_name,
            user=self.cfg.owner_id,
            php_version=self.cfg.php_version,
            stack=self.cfg.stack,
        )

    # ── Steps ────────────────────────────────────────────────────

    async def _create(self, database: DatabaseCredentials | None) -> int | str:
        if database is not None:
            self.reporter.step("Creating WordPress Instance...")
            response = await self.client.create_wordpress(self.build_wordpress_payload(database))
        else:
            self.reporter.step("Creating Custom Web App...")
            response = await self.client.create_custom_app(self.build_custom_payload())

        app_id = response.get("id") if isinstance(response, dict) else None
        if app_id is None:
            raise ApiError("API Error: creation response did not include an application id.")
        label = "WordPress" if database is not None else "Web App"
        self.reporter.success(f"{label} Created (ID: {app_id})")
        return app_id

    async def _best_effort(
        self,
        name: str,
        action: Callable[[], Awaitable[object]],
        *,
        success: str,
        failure: str,
        hint: str | None = None,
    ) -> StepResult:
        try:
            await action()
        except (RcprovError, httpx.HTTPError) as exc:
            log.debug("step %s failed", name, exc_info=True)
            self.reporter.warn(f"{failure}: {exc}")
            if hint:
                self.reporter.info(f"   {hint}")
            return StepResult(name=name, ok=False, error=str(exc))
        self.reporter.success(success)
        return StepResult(name=name)

    async def _unlock_php_functions(self, app_id: int | str) -> StepResult:
        self.reporter.step("Unlocking PHP Functions (PATCH)...")
        # An empty string removes every disabled function.
        return await self._best_effort(
            "unrestrict_php",
            lambda: self.client.update_fpm_settings(app_id, {"disableFunctions": ""}),
            success="PHP Functions Unrestricted (exec, passthru enabled)",
            failure="Failed to update FPM settings",
        )

    async def _install_hub(self, app_id: int | str) -> StepResult:
        self.reporter.step("Installing RunCloud Hub...")
        return await self._best_effort(
            "hub",
            lambda: self.client.install_hub(app_id, self.cfg.hub),
            success="RunCloud Hub Installed",
            failure="Hub Installation Failed",
            hint="You can install this manually via the Dashboard.",
        )

    async def _request_certificate(self, app_id: int | str) -> None:
        domains = await self.client.get_domains(app_id)
        match = next((d for d in domains if d.name == self.cfg.domain_name), None)
        if match is None:
            raise DomainLookupError(f"Domain ID lookup failed for {self.cfg.domain_name}.")
        await self.client.install_ssl(app_id, match.id)

    async def _install_ssl(self, app_id: int | str) -> StepResult:
        self.reporter.step("Configuring SSL (Let's Encrypt)...")
        return await self._best_effort(
            "ssl",
            lambda: self._request_certificate(app_id),
            success="SSL Installation Queued",
            failure="SSL Failed",
            hint="Note: DNS must point to this server IP for SSL to work.",
        )

    # ── Output ───────────────────────────────────────────────────

    def print_initial_summary(self) -> None:
        r = self.reporter
        r.kv("Domain", self.cfg.domain_name)
        r.kv("App Name", self.cfg.app_name)
        r.kv("Type", self.cfg.app_type.value)
        r.kv("Stack", f"{self.cfg.stack_label} ({self.cfg.stack})")
        r.kv("PHP", self.cfg.php_version)

        if self.cfg.is_wordpress:
            r.kv("PHP Mode", "Unrestricted" if self.cfg.unrestricted_php else "Secure (Default)")
            if self.cfg.install_hub:
                if self.cfg.hub.type is HubType.redis:
                    r.kv("Hub", f"Redis (Obj: {str(self.cfg.hub.redis_object).lower()})")
                else:
                    r.kv("Hub", "Native Nginx")
            else:
                r.kv("Hub", "Disabled")
        else:
            r.kv("PHP Mode", "Unrestricted (custom app)")

        r.kv("SSL", "Enabled (Let's Encrypt)" if self.cfg.install_ssl else "Disabled")

    def print_final_summary(self, result: ProvisionResult) -> None:
        r = self.reporter
        r.divider()
        failed = [s.name for s in result.steps if not s.ok]
        if failed:
            r.success(f"Process Complete (with warnings: {', '.join(failed)})")
        else:
            r.success("Process Complete")

        r.kv("URL", f"http://{self.cfg.domain_name}")
        if self.cfg.is_wordpress and result.database is not None:
            r.kv("User", self.cfg.admin_user)
            generated = " (Generated)" if self.cfg.is_auto_password else ""
            r.kv("Pass", f"{self.cfg.admin_password}{generated}")
            r.kv("Email", self.cfg.admin_email)
            r.kv("DB Name", result.database.name)
        else:
            r.kv("App ID", result.app_id)
            r.info("   Upload your application files via SFTP as the owning system user.")
        r.divider()
