"""Pydantic models shared by the provisioner and the proxy registrar."""

from rcprov.models.provision import (
    AppType,
    HubConfig,
    HubType,
    PhpVersion,
    ProvisionConfig,
    StackName,
)
from rcprov.models.proxy import ProxyEntry
from rcprov.models.webapp import (
    CustomAppPayload,
    DatabaseCredentials,
    Domain,
    WordPressPayload,
)

__all__ = [
    "AppType",
    "CustomAppPayload",
    "DatabaseCredentials",
    "Domain",
    "HubConfig",
    "HubType",
    "PhpVersion",
    "ProvisionConfig",
    "ProxyEntry",
    "StackName",
    "WordPressPayload",
]
