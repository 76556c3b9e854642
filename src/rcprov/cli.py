"""Root Typer application for the rcprov CLI."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from rcprov.commands import provision, proxy

app = typer.Typer(
    name="rcprov",
    help="Provision WordPress and custom web apps on RunCloud servers.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP traffic and step details"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


app.command(name="provision")(provision.provision)
app.add_typer(proxy.app, name="proxy", help="nginx-rc reverse-proxy management.")

if __name__ == "__main__":
    app()
