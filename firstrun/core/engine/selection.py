"""
Eligibility filter — decides which catalog entries a batch processes.

Two modes: fully automatic runs take every recommended entry in
catalog order; interactive runs pass the operator's explicit choice
through unchanged so it flows down the same pipeline.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from firstrun.core.models.catalog import Catalog, CatalogEntry


class SelectionMode(str, Enum):
    RECOMMENDED = "recommended"
    EXPLICIT = "explicit"


def select_entries(
    catalog: Catalog,
    mode: SelectionMode,
    selection: Sequence[CatalogEntry] | None = None,
) -> list[CatalogEntry]:
    """Produce the ordered list of entries to process.

    Args:
        catalog: The loaded catalog.
        mode: RECOMMENDED or EXPLICIT.
        selection: The operator's chosen entries (EXPLICIT only).

    Returns:
        Entries in processing order. May be empty.
    """
    if SelectionMode(mode) is SelectionMode.EXPLICIT:
        return list(selection or [])
    return recommended_entries(catalog.entries())


def recommended_entries(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Keep only recommended entries, preserving order."""
    return [e for e in entries if e.recommended]
