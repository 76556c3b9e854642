"""RunCloud web application payloads and records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rcprov.constants import CUSTOM_STACK, STACK_MODE, WP_DB_PREFIX


class DatabaseCredentials(BaseModel):
    """Database generated for a WordPress app."""

    name: str
    user: str
    password: str

    @classmethod
    def from_suffix(cls, suffix: str, password: str) -> DatabaseCredentials:
        return cls(name=f"db_{suffix}", user=f"u_{suffix}", password=password)


class _ApiPayload(BaseModel):
    """Serialized with the API's camelCase keys; unset optionals are omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class WordPressPayload(_ApiPayload):
    """Body of POST /servers/{id}/webapps/wordpress."""

    name: str
    domain_name: str
    site_title: str
    admin_username: str
    admin_email: str
    password: str
    db_name: str
    db_user: str
    db_password: str
    db_prefix: str = WP_DB_PREFIX
    php_version: str
    stack: str
    stack_mode: str = STACK_MODE
    user: int | None = None


class CustomAppPayload(_ApiPayload):
    """Body of POST /servers/{id}/webapps for a custom (non-WordPress) app."""

    name: str
    domain_name: str
    user: int
    php_version: str
    stack: str = CUSTOM_STACK
    stack_mode: str = STACK_MODE
    disable_functions: str = ""
    allow_url_fopen: bool = True


class Domain(BaseModel):
    """One entry of GET /servers/{id}/webapps/{app}/domains."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    name: str = Field(default="")
