"""Configuration resolution: CLI flag > environment variable > built-in default."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel

from rcprov.constants import (
    CUSTOM_STACK,
    DEFAULT_ADMIN_USER,
    DEFAULT_HUB_TYPE,
    DEFAULT_INSTALL_HUB,
    DEFAULT_INSTALL_SSL,
    DEFAULT_REDIS_OBJECT,
    DEFAULT_UNRESTRICTED_PHP,
    PHP_VERSIONS,
    STACKS,
)
from rcprov.errors import ConfigError
from rcprov.models import AppType, HubConfig, HubType, PhpVersion, ProvisionConfig, StackName
from rcprov.services.credentials import generate_strong_password


class CliOptions(BaseModel):
    """Values given on the command line. ``None`` means the flag was not passed."""

    domain: str
    app_name: str
    app_type: AppType = AppType.wordpress
    user: str | None = None
    password: str | None = None
    email: str | None = None
    owner: int | None = None
    php: PhpVersion = PhpVersion.php82
    stack: StackName = StackName.nginx
    hub: bool | None = None
    hub_type: HubType | None = None
    redis_obj: bool | None = None
    ssl: bool | None = None
    unrestricted: bool | None = None


def load_environment(env_file: Path | None = None) -> dict[str, str]:
    """Return ``.env`` values overlaid with the real process environment.

    Real environment variables win over the file, matching ``load_dotenv``'s
    default of not overriding what is already set.
    """
    path = env_file if env_file is not None else find_dotenv(usecwd=True)
    if env_file is not None and not env_file.is_file():
        raise ConfigError(f"Env file not found: {env_file}")
    file_values = dotenv_values(path) if path else {}
    merged = {k: v for k, v in file_values.items() if v is not None}
    merged.update(os.environ)
    return merged


def resolve_flag(cli_value: bool | None, env: Mapping[str, str], name: str, default: bool) -> bool:
    """Tri-state boolean: explicit CLI value, else ``env[name] == "true"``, else default."""
    if cli_value is not None:
        return cli_value
    if name in env:
        return env[name] == "true"
    return default


def _resolve_owner(cli_owner: int | None, env: Mapping[str, str]) -> int | None:
    if cli_owner is not None:
        return cli_owner
    raw = env.get("RC_DEFAULT_USER")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"RC_DEFAULT_USER must be a numeric system user id, got {raw!r}") from exc


def _resolve_hub_type(cli_value: HubType | None, env: Mapping[str, str]) -> HubType:
    if cli_value is not None:
        return cli_value
    raw = env.get("RC_HUB_TYPE") or DEFAULT_HUB_TYPE
    try:
        return HubType(raw)
    except ValueError as exc:
        choices = ", ".join(t.value for t in HubType)
        raise ConfigError(f"RC_HUB_TYPE must be one of {choices}, got {raw!r}") from exc


def resolve_config(options: CliOptions, env: Mapping[str, str]) -> ProvisionConfig:
    """Merge CLI options with the environment and validate the result.

    Raises ConfigError before any network I/O when the API key, server id or
    (for custom apps) the owner id is missing.
    """
    api_key = env.get("RC_API_KEY", "")
    server_id = env.get("RC_SERVER_ID", "")
    missing = [name for name, value in (("RC_API_KEY", api_key), ("RC_SERVER_ID", server_id)) if not value]
    if missing:
        raise ConfigError(f"Missing required config: {', '.join(missing)}.")

    owner_id = _resolve_owner(options.owner, env)
    if options.app_type is AppType.custom and owner_id is None:
        raise ConfigError("Custom apps require an owner: pass --owner or set RC_DEFAULT_USER.")

    admin_password = options.password or env.get("RC_ADMIN_PASSWORD")
    is_auto_password = not admin_password
    if is_auto_password:
        admin_password = generate_strong_password()

    if options.app_type is AppType.custom:
        stack = CUSTOM_STACK
    else:
        stack = STACKS[options.stack.value]

    hub_type = _resolve_hub_type(options.hub_type, env)
    hub = HubConfig(
        type=hub_type,
        redis_object=resolve_flag(options.redis_obj, env, "RC_HUB_REDIS_OBJ", DEFAULT_REDIS_OBJECT),
    )

    return ProvisionConfig(
        api_key=api_key,
        server_id=server_id,
        app_type=options.app_type,
        domain_name=options.domain,
        app_name=options.app_name,
        admin_user=options.user or env.get("RC_ADMIN_USER") or DEFAULT_ADMIN_USER,
        admin_password=admin_password,
        admin_email=options.email or env.get("RC_ADMIN_EMAIL") or f"admin@{options.domain}",
        is_auto_password=is_auto_password,
        owner_id=owner_id,
        php_version=PHP_VERSIONS[options.php.value],
        stack=stack,
        stack_label="custom" if options.app_type is AppType.custom else options.stack.value,
        install_hub=resolve_flag(options.hub, env, "RC_INSTALL_HUB", DEFAULT_INSTALL_HUB),
        install_ssl=resolve_flag(options.ssl, env, "RC_INSTALL_SSL", DEFAULT_INSTALL_SSL),
        unrestricted_php=resolve_flag(
            options.unrestricted, env, "RC_UNRESTRICTED_PHP", DEFAULT_UNRESTRICTED_PHP
        ),
        hub=hub,
    )
