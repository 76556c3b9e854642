"""Jinja2-based nginx-rc location fragment renderer."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from rcprov.models import ProxyEntry

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_proxy_location(entry: ProxyEntry) -> str:
    """Render the proxy headers and proxy_pass for one site."""
    env = _get_env()
    template = env.get_template("proxy.location.conf.j2")
    return template.render(entry=entry)


def write_fragment(path: Path, content: str) -> None:
    """Write a fragment to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
