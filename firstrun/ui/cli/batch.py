"""
CLI commands for single-subsystem runs — software, tweaks, bloatware.

Usage::

    firstrun software                 # interactive menu
    firstrun tweaks --recommended     # recommended entries only
    firstrun bloatware --mock --json
"""

from __future__ import annotations

import json
import sys

import click

from firstrun.core.config.catalog_loader import CatalogKind

_HELP = {
    CatalogKind.SOFTWARE: "Install software from the software catalog.",
    CatalogKind.TWEAKS: "Apply registry and system tweaks.",
    CatalogKind.BLOATWARE: "Remove preinstalled apps.",
}


def make_batch_command(kind: CatalogKind) -> click.Command:
    """Build the click command running one subsystem."""

    @click.command(name=kind.value, help=_HELP[kind])
    @click.option(
        "--recommended/--interactive",
        default=False,
        help="Take the recommended entries, or choose from a menu (default).",
    )
    @click.option("--mock", is_flag=True, help="Use mock adapters (nothing touches the machine).")
    @click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
    @click.pass_context
    def command(ctx: click.Context, recommended: bool, mock: bool, as_json: bool) -> None:
        from firstrun.core.config.catalog_loader import load_catalog
        from firstrun.core.engine.selection import SelectionMode
        from firstrun.core.use_cases.run import catalog_path, run_batch_for
        from firstrun.ui.cli.common import build_session_context
        from firstrun.ui.cli.menu import choose_entries
        from firstrun.ui.cli.output import print_error

        interactive = not recommended
        session = build_session_context(ctx, mock=mock, interactive=interactive, as_json=as_json)

        if recommended:
            batch = run_batch_for(kind, session, SelectionMode.RECOMMENDED)
        else:
            path = catalog_path(kind, session.settings)
            catalog = load_catalog(path, kind)
            if catalog is None:
                print_error(f"Could not load {kind.value} catalog: {path}")
                sys.exit(1)
            selection = choose_entries(catalog, err=as_json)
            batch = run_batch_for(
                kind,
                session,
                SelectionMode.EXPLICIT,
                selection=selection,
                catalog=catalog,
            )

        if as_json:
            click.echo(json.dumps(batch.to_dict(), indent=2))
            if not batch.ok:
                sys.exit(1)
            return

        if batch.error:
            print_error(batch.error)
            sys.exit(1)

        click.echo()
        if not batch.result.all_ok:
            sys.exit(1)

    return command


software = make_batch_command(CatalogKind.SOFTWARE)
tweaks = make_batch_command(CatalogKind.TWEAKS)
bloatware = make_batch_command(CatalogKind.BLOATWARE)
