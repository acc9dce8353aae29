"""
CLI commands for catalog inspection.

Usage::

    firstrun catalog list software
    firstrun catalog check --json
"""

from __future__ import annotations

import json
import sys

import click

from firstrun.core.config.catalog_loader import CatalogKind

_KINDS = click.Choice([k.value for k in CatalogKind])


@click.group()
def catalog() -> None:
    """Catalogs — list entries and validate documents."""


# ── List ────────────────────────────────────────────────────────


@catalog.command("list")
@click.argument("kind", type=_KINDS)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_entries(ctx: click.Context, kind: str, as_json: bool) -> None:
    """List a catalog's entries by category (★ = recommended)."""
    from firstrun.core.config.catalog_loader import CatalogError, read_catalog
    from firstrun.core.use_cases.run import catalog_path
    from firstrun.ui.cli.common import load_settings_or_exit
    from firstrun.ui.cli.menu import catalog_groups
    from firstrun.ui.cli.output import print_error

    settings = load_settings_or_exit(ctx)
    path = catalog_path(CatalogKind(kind), settings)
    try:
        loaded = read_catalog(path, CatalogKind(kind))
    except CatalogError as e:
        print_error(str(e))
        sys.exit(1)

    groups = catalog_groups(loaded)

    if as_json:
        click.echo(json.dumps(
            {
                "kind": kind,
                "path": str(path),
                "categories": [
                    {"name": name, "entries": [e.model_dump(mode="json") for e in entries]}
                    for name, entries in groups
                ],
            },
            indent=2,
        ))
        return

    click.secho(f"\n📋 {kind} — {path}", fg="cyan", bold=True)
    for name, entries in groups:
        click.echo()
        click.secho(f"   {name}", fg="white", bold=True)
        for entry in entries:
            star = "★" if entry.recommended else " "
            ident = entry.id
            label = entry.name if ident == entry.name else f"{entry.name} ({ident})"
            click.echo(f"     {star} {label}")
    click.echo()


# ── Check ───────────────────────────────────────────────────────


@catalog.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Validate the software, tweaks and bloatware catalogs."""
    from firstrun.core.use_cases.catalog_check import check_catalogs
    from firstrun.ui.cli.common import load_settings_or_exit

    result = check_catalogs(load_settings_or_exit(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    for report in result.reports:
        click.echo()
        if report.valid:
            click.secho(f"✅ {report.kind.value}", fg="green", bold=True, nl=False)
            click.echo(
                f"  {report.category_count} categories, {report.entry_count} entries, "
                f"{report.recommended_count} recommended"
            )
        else:
            click.secho(f"❌ {report.kind.value}", fg="red", bold=True)
            for err in report.errors:
                click.echo(f"   • {err}")

        for warn in report.warnings:
            click.secho(f"   ⚠️  {warn}", fg="yellow")

    click.echo()
    if not result.valid:
        sys.exit(1)
