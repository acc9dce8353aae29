"""
Catalog loader — reads the software, tweaks and bloatware documents.

Catalogs are JSON. ``read_catalog`` is strict and raises CatalogError;
``load_catalog`` is what batch runs call: it never raises and returns
None when the document could not be loaded, so one broken catalog only
stops its own subsystem.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from firstrun.core.models.catalog import (
    BloatwareCatalog,
    Catalog,
    SoftwareCatalog,
    TweaksCatalog,
)

logger = logging.getLogger(__name__)


class CatalogKind(str, Enum):
    SOFTWARE = "software"
    TWEAKS = "tweaks"
    BLOATWARE = "bloatware"


# kind → (model, required top-level key)
_CATALOG_SCHEMAS: dict[CatalogKind, tuple[type, str]] = {
    CatalogKind.SOFTWARE: (SoftwareCatalog, "categories"),
    CatalogKind.TWEAKS: (TweaksCatalog, "categories"),
    CatalogKind.BLOATWARE: (BloatwareCatalog, "bloatware"),
}


class CatalogError(Exception):
    """Raised when a catalog document is missing or structurally invalid."""


def read_catalog(path: Path, kind: CatalogKind) -> Catalog:
    """Parse and validate a catalog document.

    Args:
        path: Path to the JSON document.
        kind: Which catalog schema to apply.

    Returns:
        The typed catalog.

    Raises:
        CatalogError: If the file is missing, unparseable, lacks the
            required top-level key, or fails validation.
    """
    kind = CatalogKind(kind)
    model, required_key = _CATALOG_SCHEMAS[kind]

    if not path.is_file():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        # Catalogs edited on Windows often carry a BOM
        raw = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Expected a JSON object in {path}, got {type(data).__name__}")

    if required_key not in data:
        raise CatalogError(f"Missing required key '{required_key}' in {kind.value} catalog {path}")

    try:
        return model.model_validate(data)
    except Exception as e:
        raise CatalogError(f"Invalid {kind.value} catalog {path}: {e}") from e


def load_catalog(path: Path, kind: CatalogKind) -> Catalog | None:
    """Load a catalog, returning None instead of raising.

    Args:
        path: Path to the JSON document.
        kind: Which catalog schema to apply.

    Returns:
        The typed catalog, or None if it could not be loaded.
    """
    try:
        catalog = read_catalog(path, kind)
    except CatalogError as e:
        logger.error("%s", e)
        return None

    logger.info(
        "Loaded %s catalog: %d categories, %d entries",
        CatalogKind(kind).value,
        catalog.category_count,
        catalog.entry_count,
    )
    return catalog
