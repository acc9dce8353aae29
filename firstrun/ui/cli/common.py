"""
Shared CLI plumbing — settings, session context, elevation warning.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from firstrun.core.models.settings import Settings

logger = logging.getLogger(__name__)


def load_settings_or_exit(ctx: click.Context) -> Settings:
    """Settings for this invocation; prints the error and exits 1 if invalid."""
    from firstrun.core.config.loader import ConfigError, load_settings
    from firstrun.ui.cli.output import print_error

    if "settings" in ctx.obj:
        return ctx.obj["settings"]

    config_path: Path | None = ctx.obj.get("config_path")
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        print_error(str(e))
        sys.exit(1)

    ctx.obj["settings"] = settings
    return settings


def build_session_context(
    ctx: click.Context,
    *,
    mock: bool,
    interactive: bool,
    as_json: bool = False,
):
    """Build the SessionContext for a mutating command.

    Real runs also get a per-run log file under ``log_dir``.
    """
    from firstrun.adapters.registry import build_registry
    from firstrun.core.observability.logging_config import setup_logging
    from firstrun.core.observability.reporter import LogReporter
    from firstrun.core.persistence.history import HistoryWriter
    from firstrun.core.use_cases.run import SessionContext
    from firstrun.ui.cli.output import ConsoleReporter

    settings = load_settings_or_exit(ctx)
    registry = build_registry(mock_mode=mock, timeout=settings.command_timeout)

    if not mock:
        log_path = setup_logging(**ctx.obj.get("logging", {}), run_dir=settings.log_dir)
        logger.info("Run log: %s", log_path)
        warn_if_not_admin(as_json)

    reporter = LogReporter() if as_json else ConsoleReporter(quiet=ctx.obj.get("quiet", False))
    return SessionContext(
        settings=settings,
        registry=registry,
        reporter=reporter,
        interactive=interactive,
        history=HistoryWriter(settings.log_dir),
    )


def warn_if_not_admin(as_json: bool = False) -> None:
    from firstrun.adapters.system.elevation import is_admin

    if is_admin():
        return
    logger.warning("Not running as administrator")
    if not as_json:
        click.secho(
            "⚠️  Not running as administrator: machine-wide changes will fail.",
            fg="yellow",
            err=True,
        )
