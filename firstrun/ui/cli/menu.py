"""
Interactive selection menu.

Each category is shown as a numbered list with recommended entries
pre-selected. The operator answers with numbers and ranges
(``1,3 5-7``), ``all``, ``none``, or Enter to keep the defaults.
"""

from __future__ import annotations

import click

from firstrun.core.models.catalog import (
    BloatwareCatalog,
    Catalog,
    CatalogEntry,
    SoftwareCatalog,
    SoftwarePackage,
    Tweak,
    TweaksCatalog,
)


def catalog_groups(catalog: Catalog) -> list[tuple[str, list[CatalogEntry]]]:
    """(category name, entries) pairs in catalog order."""
    if isinstance(catalog, BloatwareCatalog):
        return [("Preinstalled apps", list(catalog.entries()))]
    if isinstance(catalog, SoftwareCatalog):
        groups = [(c.name, list(c.packages)) for c in catalog.categories]
    elif isinstance(catalog, TweaksCatalog):
        groups = [(c.name, list(c.tweaks)) for c in catalog.categories]
    else:
        raise TypeError(f"Unsupported catalog type: {type(catalog).__name__}")
    return [(name, entries) for name, entries in groups if entries]


def parse_selection(text: str, count: int, default: list[int]) -> list[int]:
    """Parse a menu answer into sorted 1-based indexes.

    Raises:
        click.BadParameter: On anything that is not a valid answer.
    """
    text = text.strip().lower()
    if not text:
        return list(default)
    if text == "all":
        return list(range(1, count + 1))
    if text == "none":
        return []

    chosen: set[int] = set()
    for token in text.replace(",", " ").split():
        start, sep, end = token.partition("-")
        try:
            lo = int(start)
            hi = int(end) if sep else lo
        except ValueError:
            raise click.BadParameter(f"'{token}' is not a number or range") from None
        if lo > hi or lo < 1 or hi > count:
            raise click.BadParameter(f"'{token}' is outside 1-{count}")
        chosen.update(range(lo, hi + 1))
    return sorted(chosen)


def choose_entries(catalog: Catalog, *, err: bool = False) -> list[CatalogEntry]:
    """Walk the operator through every category; returns the chosen entries.

    With ``err`` set the menu and prompts go to stderr, leaving stdout
    to machine-readable output.
    """
    selection: list[CatalogEntry] = []

    for name, entries in catalog_groups(catalog):
        click.echo(err=err)
        click.secho(f"   {name}", fg="cyan", bold=True, err=err)
        default = [i for i, e in enumerate(entries, start=1) if e.recommended]
        for i, entry in enumerate(entries, start=1):
            mark = "x" if i in default else " "
            description = entry.description if isinstance(entry, (SoftwarePackage, Tweak)) else ""
            suffix = f"  {description}" if description else ""
            click.echo(f"     [{mark}] {i:2d}. {entry.name}{suffix}", err=err)

        default_text = ",".join(str(i) for i in default) or "none"
        indexes = click.prompt(
            "   Select",
            default=default_text,
            value_proc=lambda text, n=len(entries), d=default: parse_selection(text, n, d),
            err=err,
        )
        selection.extend(entries[i - 1] for i in indexes)

    return selection
