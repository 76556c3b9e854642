"""Web application provisioning command."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer

from rcprov.config import CliOptions, load_environment, resolve_config
from rcprov.errors import ConfigError, RcprovError
from rcprov.models import AppType, HubType, PhpVersion, ProvisionConfig, StackName
from rcprov.services.provisioner import ProvisionResult, Provisioner
from rcprov.services.reporter import Reporter
from rcprov.services.runcloud import RunCloudClient


async def run_provisioning(cfg: ProvisionConfig, reporter: Reporter) -> ProvisionResult:
    """Open an API client for ``cfg`` and run the full sequence."""
    async with RunCloudClient(cfg.api_key, cfg.server_id) as client:
        return await Provisioner(cfg, client, reporter).run()


def provision(
    domain: str = typer.Option(..., "--domain", "-d", help="Domain name (e.g., example.com)"),
    app_name: str = typer.Option(..., "--app", "-a", help="Web application name"),
    app_type: AppType = typer.Option(AppType.wordpress, "--type", "-t", help="Application type"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="WordPress admin user [env: RC_ADMIN_USER]"),
    password: Optional[str] = typer.Option(
        None, "--password", "-P", help="WordPress admin password [env: RC_ADMIN_PASSWORD]"
    ),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="WordPress admin email [env: RC_ADMIN_EMAIL]"),
    owner: Optional[int] = typer.Option(
        None, "--owner", "-o", help="System user id owning the app [env: RC_DEFAULT_USER]"
    ),
    php: PhpVersion = typer.Option(PhpVersion.php82, "--php", "-p", help="PHP version"),
    stack: StackName = typer.Option(StackName.nginx, "--stack", "-s", help="Web server stack (WordPress only)"),
    hub: Optional[bool] = typer.Option(
        None, "--hub/--no-hub", help="Install the RunCloud Hub plugin [env: RC_INSTALL_HUB]", show_default=False
    ),
    hub_type: Optional[HubType] = typer.Option(None, "--hub-type", help="Hub cache type [env: RC_HUB_TYPE]"),
    redis_obj: Optional[bool] = typer.Option(
        None, "--redis-obj/--no-redis-obj", help="Enable Redis object cache [env: RC_HUB_REDIS_OBJ]", show_default=False
    ),
    ssl: Optional[bool] = typer.Option(
        None, "--ssl/--no-ssl", help="Provision a Let's Encrypt certificate [env: RC_INSTALL_SSL]", show_default=False
    ),
    unrestricted: Optional[bool] = typer.Option(
        None,
        "--unrestricted/--no-unrestricted",
        help="Clear disabled PHP functions (exec, shell_exec, ...) [env: RC_UNRESTRICTED_PHP]",
        show_default=False,
    ),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Load variables from this .env file"),
) -> None:
    """Provision a WordPress or custom web app on a RunCloud server."""
    reporter = Reporter()

    try:
        env = load_environment(env_file)
        cfg = resolve_config(
            CliOptions(
                domain=domain,
                app_name=app_name,
                app_type=app_type,
                user=user,
                password=password,
                email=email,
                owner=owner,
                php=php,
                stack=stack,
                hub=hub,
                hub_type=hub_type,
                redis_obj=redis_obj,
                ssl=ssl,
                unrestricted=unrestricted,
            ),
            env,
        )
    except ConfigError as exc:
        reporter.error(str(exc))
        reporter.info("Please check your .env file.")
        raise typer.Exit(exc.exit_code)

    try:
        asyncio.run(run_provisioning(cfg, reporter))
    except RcprovError as exc:
        reporter.error(str(exc))
        raise typer.Exit(exc.exit_code)
    except httpx.HTTPError as exc:
        reporter.error(f"{type(exc).__name__}: {exc}")
        raise typer.Exit(1)
