"""Reverse-proxy registration for Node.js style apps behind nginx-rc."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from rcprov.constants import PROXY_CONFIG_DIR
from rcprov.errors import RcprovError
from rcprov.services import nginx
from rcprov.services.reporter import Reporter

app = typer.Typer(no_args_is_help=True)


@app.command()
def setup(
    site: str = typer.Option(..., "--site", "-s", help="Site/app name (used for the file name)"),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", min=1, max=65535, help="Port to proxy to (default: next free port)"
    ),
    config_dir: Path = typer.Option(
        PROXY_CONFIG_DIR, "--config-dir", envvar="RC_PROXY_CONFIG_DIR", help="nginx-rc extra config directory"
    ),
) -> None:
    """Route a site to 127.0.0.1:<port> and reload nginx-rc."""
    reporter = Reporter()
    try:
        nginx.require_root()
        nginx.register_proxy(site, reporter, config_dir=config_dir, port=port)
    except RcprovError as exc:
        reporter.error(str(exc))
        raise typer.Exit(exc.exit_code)
