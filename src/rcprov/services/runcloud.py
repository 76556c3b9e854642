"""Async HTTP client for the RunCloud API v3.

One method per remote operation; all of them go through ``_request`` which
attaches the bearer token, serializes the JSON body and turns non-success
responses into ``ApiError`` subclasses. Callers can treat any return value
as success.
"""

from __future__ import annotations

import json
import logging
import socket
from typing import Any

import httpx
from pydantic import ValidationError

from rcprov.constants import API_BASE, HUB_CACHE_FOLDER_SIZE, HUB_CACHE_VALID_MINUTES
from rcprov.errors import (
    ApiError,
    ApiValidationError,
    AuthenticationError,
    NetworkError,
    PermissionDeniedError,
)
from rcprov.models import CustomAppPayload, Domain, HubConfig, WordPressPayload

log = logging.getLogger(__name__)

# Fixed certificate policy: Let's Encrypt over HTTP-01, no redirect/HSTS, no auto-renew.
SSL_POLICY: dict[str, Any] = {
    "advancedSSL": True,
    "autoSSL": False,
    "provider": "letsencrypt",
    "enableHttp": False,
    "enableHsts": False,
    "authorizationMethod": "http-01",
    "environment": "live",
}


def _is_name_resolution_error(exc: BaseException) -> bool:
    """Walk the exception chain looking for a DNS lookup failure."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


class RunCloudClient:
    """Binds API key and server id; use as ``async with RunCloudClient(...) as client``."""

    def __init__(
        self,
        api_key: str,
        server_id: str,
        *,
        base_url: str = API_BASE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        if not server_id:
            raise ValueError("server_id is required")
        self.api_key = api_key
        self.server_id = server_id
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=None)

    async def __aenter__(self) -> RunCloudClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def _server_path(self) -> str:
        return f"/servers/{self.server_id}"

    # ── Operations ───────────────────────────────────────────────

    async def create_wordpress(self, payload: WordPressPayload) -> dict[str, Any]:
        """Create a web app and install WordPress into it."""
        return await self._request("POST", f"{self._server_path}/webapps/wordpress", payload.to_api())

    async def create_custom_app(self, payload: CustomAppPayload) -> dict[str, Any]:
        """Create an empty custom web app."""
        return await self._request("POST", f"{self._server_path}/webapps", payload.to_api())

    async def install_hub(self, app_id: int | str, hub: HubConfig) -> dict[str, Any]:
        """Install the RunCloud Hub caching plugin."""
        body = {
            "cacheType": hub.type.value,
            "redisObjectCache": hub.redis_object,
            "cacheFolderSize": HUB_CACHE_FOLDER_SIZE,
            "cacheValidMinute": HUB_CACHE_VALID_MINUTES,
        }
        return await self._request("POST", f"{self._server_path}/webapps/{app_id}/runcloudhub", body)

    async def get_domains(self, app_id: int | str) -> list[Domain]:
        """List the domains attached to a web app."""
        data = await self._request("GET", f"{self._server_path}/webapps/{app_id}/domains")
        items = data.get("data") if isinstance(data, dict) else data
        if not isinstance(items, list):
            items = []
        try:
            return [Domain.model_validate(item) for item in items]
        except ValidationError as exc:
            raise ApiError("API Error: unexpected domain list response") from exc

    async def install_ssl(self, app_id: int | str, domain_id: int | str) -> dict[str, Any]:
        """Request a Let's Encrypt certificate for one domain of the app."""
        return await self._request(
            "POST",
            f"{self._server_path}/webapps/{app_id}/domains/{domain_id}/ssl",
            dict(SSL_POLICY),
        )

    async def update_fpm_settings(self, app_id: int | str, payload: dict[str, Any]) -> dict[str, Any]:
        """PATCH PHP-FPM / Nginx settings of the app."""
        return await self._request("PATCH", f"{self._server_path}/webapps/{app_id}/settings/fpmnginx", payload)

    # ── Transport ────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        kwargs: dict[str, Any] = {"headers": self._headers()}
        if body is not None and method != "GET":
            kwargs["json"] = body

        log.debug("%s %s", method, url)
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if _is_name_resolution_error(exc):
                raise NetworkError(
                    "Network Error: Could not connect to RunCloud API. Check internet connection."
                ) from exc
            raise
        log.debug("%s %s -> %s", method, url, resp.status_code)

        data = self._parse_body(resp)
        if not resp.is_success:
            self._raise_for_status(resp.status_code, data)
        return data

    @staticmethod
    def _parse_body(resp: httpx.Response) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            if resp.is_success:
                raise ApiError(
                    f"API Error ({resp.status_code}): response is not valid JSON",
                    status_code=resp.status_code,
                ) from exc
            return {"message": resp.text[:200]}

    @staticmethod
    def _raise_for_status(status: int, data: Any) -> None:
        """Map an error response to the matching exception."""
        message = data.get("message") if isinstance(data, dict) else None
        if not message:
            message = json.dumps(data)

        if status == 401:
            raise AuthenticationError("Authentication Failed (401): Invalid Bearer Token.", status_code=status)
        if status == 403:
            raise PermissionDeniedError(
                "Permission Denied (403): Credentials valid but access denied. Check RC_SERVER_ID.",
                status_code=status,
            )
        if status == 422:
            errors = data.get("errors") if isinstance(data, dict) else None
            details = ""
            if isinstance(errors, dict) and errors:
                lines = [
                    f"{field}: {', '.join(msgs) if isinstance(msgs, list) else msgs}"
                    for field, msgs in errors.items()
                ]
                details = "\n   " + "\n   ".join(lines)
            raise ApiValidationError(
                f"Validation Error (422): {message}{details}",
                status_code=status,
                errors=errors if isinstance(errors, dict) else None,
            )
        raise ApiError(f"API Error ({status}): {message}", status_code=status)
