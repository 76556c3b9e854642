"""Resolved provisioning configuration."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class AppType(str, Enum):
    wordpress = "wordpress"
    custom = "custom"


class PhpVersion(str, Enum):
    php74 = "7.4"
    php80 = "8.0"
    php81 = "8.1"
    php82 = "8.2"
    php83 = "8.3"
    php84 = "8.4"


class StackName(str, Enum):
    nginx = "nginx"
    apache = "apache"


class HubType(str, Enum):
    native = "native"
    redis = "redis"


class HubConfig(BaseModel):
    """RunCloud Hub cache settings."""

    model_config = ConfigDict(frozen=True)

    type: HubType = HubType.native
    redis_object: bool = False

    @model_validator(mode="before")
    @classmethod
    def _object_cache_needs_redis(cls, data: Any) -> Any:
        # Object cache only exists on the redis backend
        if isinstance(data, dict) and HubType(data.get("type", HubType.native)) is not HubType.redis:
            data = {**data, "redis_object": False}
        return data


class ProvisionConfig(BaseModel):
    """Runtime configuration resolved once at startup, read-only afterwards."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    server_id: str
    app_type: AppType = AppType.wordpress
    domain_name: str
    app_name: str

    admin_user: str = "admin"
    admin_password: str
    admin_email: str
    is_auto_password: bool = False
    owner_id: int | None = None

    php_version: str = "php82rc"
    stack: str = "nativenginx"
    stack_label: str = "nginx"

    install_hub: bool = True
    install_ssl: bool = False
    unrestricted_php: bool = False
    hub: HubConfig = HubConfig()

    @property
    def is_wordpress(self) -> bool:
        return self.app_type is AppType.wordpress

    @property
    def needs_propagation_wait(self) -> bool:
        """True when any step after creation touches the app's files."""
        if self.install_ssl:
            return True
        return self.is_wordpress and (self.install_hub or self.unrestricted_php)
