"""nginx-rc reverse-proxy registration: port discovery, validation and reload."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path

from rcprov.constants import (
    NGINX_RELOAD_CMD,
    NGINX_TEST_CMD,
    PROXY_FILE_SUFFIX,
    PROXY_START_PORT,
)
from rcprov.errors import CommandError, ConfigError, NginxConfigError, PrivilegeError
from rcprov.models import ProxyEntry
from rcprov.services import proxy_renderer
from rcprov.services.reporter import Reporter

log = logging.getLogger(__name__)

_UPSTREAM_PORT_RE = re.compile(r"127\.0\.0\.1:(\d+)")
_SITE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _run(cmd: list[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(cmd, check=check, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise CommandError(f"Command not found: {cmd[0]}") from exc
    except subprocess.CalledProcessError as exc:
        raise CommandError(f"Command failed: {' '.join(cmd)}\nstderr: {exc.stderr}") from exc


def require_root() -> None:
    """Raise PrivilegeError unless running as root."""
    if os.geteuid() != 0:
        raise PrivilegeError(
            "Permission Denied: this command must be run as root (sudo) to write to /etc/nginx-rc/."
        )


def find_next_port(config_dir: Path, start_port: int = PROXY_START_PORT) -> int:
    """Return max(port used by existing fragments) + 1, or ``start_port``.

    Only the first ``127.0.0.1:<port>`` of each fragment counts. Unreadable
    files are skipped.
    """
    if not config_dir.is_dir():
        return start_port

    used: list[int] = []
    for conf in sorted(config_dir.glob(f"*{PROXY_FILE_SUFFIX}")):
        try:
            content = conf.read_text()
        except OSError as exc:
            log.warning("Could not read config file %s, skipping: %s", conf.name, exc)
            continue
        match = _UPSTREAM_PORT_RE.search(content)
        if match:
            used.append(int(match.group(1)))

    if not used:
        return start_port
    return max(used) + 1


def validate_config() -> None:
    """Run nginx-rc -t. Raises NginxConfigError on failure."""
    try:
        result = _run(NGINX_TEST_CMD, check=False)
    except CommandError as exc:
        raise NginxConfigError(str(exc)) from exc
    if result.returncode != 0:
        raise NginxConfigError(result.stderr.strip() or result.stdout.strip())


def reload() -> None:
    """Reload the nginx-rc service."""
    _run(NGINX_RELOAD_CMD)


def register_proxy(
    site: str,
    reporter: Reporter,
    *,
    config_dir: Path,
    port: int | None = None,
) -> ProxyEntry:
    """Write ``<site>.location.root.server.conf``, validate, and reload nginx-rc.

    A failed syntax check deletes the new fragment before raising. A failed
    reload leaves the fragment in place.
    """
    if not _SITE_RE.match(site):
        raise ConfigError(f"Invalid site name: {site!r}")

    if port:
        reporter.info("Manual port override detected.")
    else:
        reporter.info("Auto-detecting next available port...")
        port = find_next_port(config_dir)

    entry = ProxyEntry(site=site, port=port, config_dir=config_dir)

    reporter.header("Configuring Nginx Proxy...")
    reporter.kv("Site", entry.site)
    reporter.kv("Port", entry.port)
    reporter.kv("Path", entry.path)

    proxy_renderer.write_fragment(entry.path, proxy_renderer.render_proxy_location(entry))
    reporter.success("Configuration file created.")

    reporter.step("Testing Nginx configuration...")
    try:
        validate_config()
    except NginxConfigError as exc:
        entry.path.unlink(missing_ok=True)
        raise NginxConfigError(f"Nginx Syntax Check Failed. Reverting changes. Details: {exc}") from exc
    reporter.success("Syntax OK.")

    reporter.step("Reloading Nginx...")
    reload()
    reporter.success("Nginx Reloaded.")

    reporter.divider()
    reporter.info(f"Proxy active: {entry.upstream}")
    reporter.divider()
    return entry
