"""
Domain models — Pydantic catalog types and result records.

All models are re-exported here for convenient access:

    from firstrun.core.models import SoftwareCatalog, Tweak, OperationResult, Outcome
"""

from firstrun.core.models.catalog import (
    BloatwareApp,
    BloatwareCatalog,
    Catalog,
    CatalogEntry,
    OneDriveOptions,
    RegistryValue,
    SoftwareCatalog,
    SoftwareCategory,
    SoftwarePackage,
    Tweak,
    TweakCategory,
    TweaksCatalog,
)
from firstrun.core.models.result import InstallSignal, OperationResult, Outcome
from firstrun.core.models.settings import CatalogPaths, Settings

__all__ = [
    # catalog.py
    "BloatwareApp",
    "BloatwareCatalog",
    "Catalog",
    "CatalogEntry",
    # settings.py
    "CatalogPaths",
    # result.py
    "InstallSignal",
    "OneDriveOptions",
    "OperationResult",
    "Outcome",
    "RegistryValue",
    "Settings",
    "SoftwareCatalog",
    "SoftwareCategory",
    "SoftwarePackage",
    "Tweak",
    "TweakCategory",
    "TweaksCatalog",
]
