"""
firstrun — CLI entrypoint.

Usage:
    python -m firstrun.main --help
    firstrun auto
    firstrun software --interactive
    firstrun catalog check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from firstrun import __version__
from firstrun.core.observability.logging_config import (
    FILE_ENV,
    FILE_LEVEL_ENV,
    console_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="firstrun")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to firstrun.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """firstrun — provision a fresh Windows machine from catalogs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup ───────────────────────────────────────────
    # Mutating commands re-run setup with these plus a per-run file
    ctx.obj["logging"] = {
        "level": console_level(debug=debug, verbose=verbose, quiet=quiet),
        "log_file": os.environ.get(FILE_ENV),
        "log_file_level": os.environ.get(FILE_LEVEL_ENV),
    }
    setup_logging(**ctx.obj["logging"])


@cli.command()
@click.option("--no-restore-point", is_flag=True, help="Skip the system restore point.")
@click.option("--mock", is_flag=True, help="Use mock adapters (nothing touches the machine).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def auto(ctx: click.Context, no_restore_point: bool, mock: bool, as_json: bool) -> None:
    """Install, tweak and debloat using only recommended entries.

    Examples:

        firstrun auto

        firstrun auto --no-restore-point

        firstrun auto --mock --json
    """
    from firstrun.core.use_cases.run import run_auto
    from firstrun.ui.cli.common import build_session_context
    from firstrun.ui.cli.output import STATUS_COLORS, print_error

    session = build_session_context(ctx, mock=mock, interactive=False, as_json=as_json)
    restore_point = session.settings.create_restore_point and not no_restore_point

    if not as_json:
        mode_label = "[mock] " if mock else ""
        click.secho(f"\n⚡ {mode_label}Automatic provisioning", fg="cyan", bold=True)

    result = run_auto(session, restore_point=restore_point)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.restore_point is False:
        click.secho("   ⚠️  Restore point could not be created", fg="yellow")
    for error in result.errors:
        print_error(error)

    merged = result.merged
    click.echo()
    status = "failed" if result.errors else merged.status
    click.secho(
        f"   Result: {len(merged.success)}/{merged.total} succeeded, "
        f"{len(merged.failed)} failed, {len(merged.skipped)} skipped",
        fg=STATUS_COLORS.get(status, "white"),
        bold=True,
    )
    click.echo()

    if not result.ok:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Inspect the mock adapters instead.")
@click.pass_context
def doctor(ctx: click.Context, as_json: bool, mock: bool) -> None:
    """Check tool availability and elevation."""
    from firstrun.adapters.registry import build_registry
    from firstrun.adapters.system.elevation import is_admin, is_windows
    from firstrun.ui.cli.common import load_settings_or_exit

    settings = load_settings_or_exit(ctx)
    registry = build_registry(mock_mode=mock, timeout=settings.command_timeout)
    adapters = registry.adapter_status()
    report = {
        "windows": is_windows(),
        "admin": is_admin(),
        "adapters": adapters,
        "ok": all(a["available"] for a in adapters.values()),
    }

    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    def _line(ok: bool, label: str) -> None:
        if ok:
            click.secho(f"   ✓ {label}", fg="green")
        else:
            click.secho(f"   ✗ {label}", fg="red")

    click.secho("\n🩺 firstrun doctor", fg="cyan", bold=True)
    _line(report["windows"], "Windows")
    _line(report["admin"], "Administrator")
    for name, status in adapters.items():
        _line(status["available"], f"{name} ({status['type']})")
    click.echo()


@cli.command()
@click.option("-n", "count", default=20, show_default=True, help="Number of entries.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent runs."""
    from firstrun.core.persistence.history import HistoryWriter
    from firstrun.ui.cli.common import load_settings_or_exit
    from firstrun.ui.cli.output import STATUS_COLORS

    settings = load_settings_or_exit(ctx)
    writer = HistoryWriter(settings.log_dir)
    entries = writer.read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No runs recorded yet.")
        return

    click.echo()
    for entry in entries:
        mock_label = " [mock]" if entry.mock else ""
        click.echo(f"   {entry.timestamp[:19]}  {entry.kind:<10} {entry.mode:<12}", nl=False)
        click.secho(entry.status, fg=STATUS_COLORS.get(entry.status, "white"), nl=False)
        click.echo(
            f"  ✓{len(entry.succeeded)} ✗{len(entry.failed)} ⊘{len(entry.skipped)}{mock_label}"
        )
        if entry.error:
            click.echo(f"     │ {entry.error}")

    total = writer.entry_count()
    if total > len(entries):
        click.echo(f"\n   {len(entries)} of {total} runs shown (-n for more)")
    click.echo()


@cli.command("restore-point")
@click.option("--description", "-d", default=None, help="Restore point description.")
@click.option("--mock", is_flag=True, help="Use mock adapters (nothing touches the machine).")
@click.pass_context
def restore_point(ctx: click.Context, description: str | None, mock: bool) -> None:
    """Create a system restore point now."""
    from firstrun.adapters.registry import build_registry
    from firstrun.core.services.backup import (
        DEFAULT_RESTORE_POINT_DESCRIPTION,
        create_restore_point,
    )
    from firstrun.ui.cli.common import load_settings_or_exit, warn_if_not_admin

    settings = load_settings_or_exit(ctx)
    registry = build_registry(mock_mode=mock, timeout=settings.command_timeout)
    if not mock:
        warn_if_not_admin()

    if create_restore_point(registry.shell, description or DEFAULT_RESTORE_POINT_DESCRIPTION):
        click.secho("✅ Restore point created", fg="green")
        return

    click.secho("❌ Restore point could not be created", fg="red")
    sys.exit(1)


# ── Register sub-commands from firstrun/ui/cli/ ───────────────────

from firstrun.ui.cli.batch import bloatware, software, tweaks
from firstrun.ui.cli.catalog import catalog

cli.add_command(software)
cli.add_command(tweaks)
cli.add_command(bloatware)
cli.add_command(catalog)


if __name__ == "__main__":
    cli()
