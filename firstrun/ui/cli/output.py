"""
Console rendering — the reporter and summaries the CLI prints.
"""

from __future__ import annotations

import click

from firstrun.core.models.result import OperationResult
from firstrun.core.observability.reporter import Reporter

STATUS_COLORS = {"ok": "green", "partial": "yellow", "failed": "red"}


class ConsoleReporter(Reporter):
    """Renders progress and notices on the terminal."""

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def on_progress(self, current: int, total: int, label: str) -> None:
        if not self._quiet:
            click.echo(f"   [{current}/{total}] {label}")

    def on_notice(self, title: str, message: str) -> None:
        click.secho(f"   ⚠️  {title}: ", fg="yellow", nl=False)
        click.echo(message)

    def on_batch_complete(self, label: str, result: OperationResult) -> None:
        print_result(label, result)


def print_result(label: str, result: OperationResult) -> None:
    """Print one batch's buckets and a one-line summary."""
    click.echo()
    click.secho(f"   {label}", fg="white", bold=True)

    for name in result.success:
        click.secho(f"     ✓ {name}", fg="green")
    for name in result.failed:
        click.secho(f"     ✗ {name}", fg="red")
    for name in result.skipped:
        click.secho(f"     ⊘ {name}", fg="yellow")

    if result.total == 0:
        click.echo("     (nothing to do)")

    click.secho(
        f"     {len(result.success)} succeeded, "
        f"{len(result.failed)} failed, {len(result.skipped)} skipped",
        fg=STATUS_COLORS.get(result.status, "white"),
    )


def print_error(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
