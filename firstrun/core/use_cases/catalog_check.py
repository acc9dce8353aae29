"""
Catalog check use case — validate the catalogs and report issues.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from firstrun.core.config.catalog_loader import CatalogError, CatalogKind, read_catalog
from firstrun.core.models.catalog import (
    BloatwareCatalog,
    Catalog,
    SoftwareCatalog,
    TweaksCatalog,
)
from firstrun.core.models.settings import Settings
from firstrun.core.services.bloatware import is_protected
from firstrun.core.use_cases.run import AUTO_ORDER, catalog_path


@dataclass
class CatalogReport:
    """Validation outcome of one catalog document."""

    kind: CatalogKind
    path: Path
    category_count: int = 0
    entry_count: int = 0
    recommended_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "path": str(self.path),
            "valid": self.valid,
            "categories": self.category_count,
            "entries": self.entry_count,
            "recommended": self.recommended_count,
            "errors": self.errors,
            "warnings": self.warnings,
        }


@dataclass
class CatalogCheckResult:
    reports: list[CatalogReport] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return all(r.valid for r in self.reports)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "catalogs": [r.to_dict() for r in self.reports],
        }


def _duplicates(values: Iterable[str]) -> list[str]:
    counts = Counter(values)
    return sorted(v for v, n in counts.items() if n > 1)


def check_catalog(kind: CatalogKind, path: Path) -> CatalogReport:
    """Validate one catalog and look for semantic problems.

    Structural problems are errors. Things that load but will behave
    surprisingly (duplicate names merge in the result buckets, tweaks
    that do nothing) are warnings.
    """
    kind = CatalogKind(kind)
    report = CatalogReport(kind=kind, path=path)

    try:
        catalog = read_catalog(path, kind)
    except CatalogError as e:
        report.errors.append(str(e))
        return report

    entries = list(catalog.entries())
    report.category_count = catalog.category_count
    report.entry_count = len(entries)
    report.recommended_count = sum(1 for e in entries if e.recommended)

    for name in _duplicates(e.name for e in entries):
        report.warnings.append(f"Duplicate display name '{name}': results will not tell the entries apart")

    _check_specific(catalog, report)
    return report


def _check_specific(catalog: Catalog, report: CatalogReport) -> None:
    if isinstance(catalog, SoftwareCatalog):
        for dupe in _duplicates(p.id for p in catalog.entries()):
            report.warnings.append(f"Duplicate package id '{dupe}'")
        for pkg in catalog.entries():
            if pkg.winget_unavailable and not pkg.manual_url:
                report.warnings.append(f"'{pkg.name}' is manual-only but has no manualUrl")

    elif isinstance(catalog, TweaksCatalog):
        for tweak in catalog.entries():
            if not tweak.info and not tweak.has_registry_phase and not tweak.has_command_phase:
                report.warnings.append(f"Tweak '{tweak.name}' has no registry values and no commands")

    elif isinstance(catalog, BloatwareCatalog):
        for dupe in _duplicates(a.id for a in catalog.entries()):
            report.warnings.append(f"Duplicate app id '{dupe}'")
        if "" in catalog.protected:
            report.warnings.append("Empty token in protected list is ignored")
        for app in catalog.entries():
            if is_protected(app.id, catalog.protected):
                report.warnings.append(f"'{app.name}' is protected and will always be skipped")


def check_catalogs(
    settings: Settings,
    kinds: Sequence[CatalogKind] = AUTO_ORDER,
) -> CatalogCheckResult:
    """Validate every configured catalog."""
    result = CatalogCheckResult()
    for kind in kinds:
        result.reports.append(check_catalog(kind, catalog_path(kind, settings)))
    return result
