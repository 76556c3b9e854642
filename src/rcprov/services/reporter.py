"""Human-readable progress output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape


class Reporter:
    """Progress sink handed to the provisioner and the proxy registrar.

    Progress goes to ``out``; warnings and errors go to ``err`` (stderr by
    default) so they survive output redirection.
    """

    KEY_WIDTH = 14

    def __init__(self, out: Console | None = None, err: Console | None = None) -> None:
        self.out = out or Console(highlight=False)
        self.err = err or Console(stderr=True, highlight=False)

    def header(self, msg: str) -> None:
        self.out.print(f"\n[bold]{escape(msg)}[/bold]")

    def step(self, msg: str) -> None:
        self.out.print(f"\n[bold cyan]>[/bold cyan] {escape(msg)}")

    def info(self, msg: str) -> None:
        self.out.print(msg, markup=False)

    def success(self, msg: str) -> None:
        self.out.print(f"[green]✓[/green] {escape(msg)}")

    def warn(self, msg: str) -> None:
        self.err.print(f"[yellow]![/yellow] {escape(msg)}")

    def error(self, msg: str) -> None:
        self.err.print(f"[red]✗ Error:[/red] {escape(msg)}")

    def kv(self, key: str, value: object) -> None:
        self.out.print(f"   {key.ljust(self.KEY_WIDTH)}: {value}", markup=False)

    def divider(self) -> None:
        self.out.rule(style="dim")
