"""
Bundled default catalogs.

The three catalog documents shipped with the package live in
``firstrun/core/data/catalogs/``. A settings file may point any of
them elsewhere; this module only answers "where is the default".

Usage::

    from firstrun.core.data import bundled_catalog

    path = bundled_catalog("software")   # .../catalogs/software.json
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent
_CATALOG_DIR = _DATA_DIR / "catalogs"


def bundled_catalog(kind: str) -> Path:
    """Path of the bundled catalog for ``kind`` (software, tweaks, bloatware)."""
    return _CATALOG_DIR / f"{kind}.json"

