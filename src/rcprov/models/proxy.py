"""Reverse-proxy fragment model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from rcprov.constants import PROXY_CONFIG_DIR, PROXY_FILE_SUFFIX, PROXY_START_PORT


class ProxyEntry(BaseModel):
    """A location fragment routing a site to a local port behind nginx-rc."""

    site: str
    port: int = Field(default=PROXY_START_PORT, ge=1, le=65535)
    config_dir: Path = PROXY_CONFIG_DIR
    headers: list[str] = Field(
        default_factory=lambda: [
            "X-Forwarded-For $proxy_add_x_forwarded_for",
            "X-Forwarded-Proto $scheme",
            "X-Real-IP $remote_addr",
            "Host $http_host",
        ]
    )

    @property
    def file_name(self) -> str:
        return f"{self.site}{PROXY_FILE_SUFFIX}"

    @property
    def path(self) -> Path:
        return self.config_dir / self.file_name

    @property
    def upstream(self) -> str:
        return f"http://127.0.0.1:{self.port}"
