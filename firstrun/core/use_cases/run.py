"""
Run use case — provision one or more subsystems of the machine.

This is the top-level orchestrator: for each subsystem it loads the
catalog, selects entries, builds the matching action, runs the batch
and records history. The full vertical slice from operator intent to
a recorded OperationResult.

Auto mode runs software, then tweaks, then bloatware. A catalog that
cannot be loaded stops only its own subsystem.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from firstrun.adapters.registry import AdapterRegistry
from firstrun.core.config.catalog_loader import CatalogKind, load_catalog
from firstrun.core.data import bundled_catalog
from firstrun.core.engine.executor import generate_operation_id, run_batch
from firstrun.core.engine.selection import SelectionMode, select_entries
from firstrun.core.models.catalog import BloatwareCatalog, Catalog, CatalogEntry
from firstrun.core.models.result import OperationResult
from firstrun.core.models.settings import Settings
from firstrun.core.observability.reporter import LogReporter, Reporter
from firstrun.core.persistence.history import HistoryEntry, HistoryWriter
from firstrun.core.reliability.retry import RetryPolicy
from firstrun.core.services.backup import RegistryBackup, create_restore_point
from firstrun.core.services.bloatware import RemoveAppAction, is_protected
from firstrun.core.services.software import InstallAction, ManualFallback
from firstrun.core.services.tweaks import TweakAction

logger = logging.getLogger(__name__)

AUTO_ORDER = (CatalogKind.SOFTWARE, CatalogKind.TWEAKS, CatalogKind.BLOATWARE)

_LABELS = {
    CatalogKind.SOFTWARE: "Software",
    CatalogKind.TWEAKS: "Tweaks",
    CatalogKind.BLOATWARE: "Bloatware",
}


@dataclass
class SessionContext:
    """Everything a session needs, built once per invocation.

    ``retry_policy`` and ``backup`` are derived from the settings and
    the registry editor unless given explicitly.
    """

    settings: Settings
    registry: AdapterRegistry
    reporter: Reporter = field(default_factory=LogReporter)
    interactive: bool = False
    sleep: Callable[[float], None] = time.sleep
    history: HistoryWriter | None = None
    retry_policy: RetryPolicy | None = None
    backup: RegistryBackup | None = None

    def __post_init__(self) -> None:
        if self.retry_policy is None:
            self.retry_policy = RetryPolicy(
                max_retries=self.settings.max_retries,
                retry_delay_seconds=self.settings.retry_delay_seconds,
                sleep=self.sleep,
            )
        if self.backup is None:
            self.backup = RegistryBackup(self.registry.registry_editor, self.settings.backup_dir)


@dataclass
class BatchRunResult:
    """Result of one subsystem's batch."""

    kind: CatalogKind
    mode: SelectionMode = SelectionMode.RECOMMENDED
    operation_id: str = ""
    catalog_path: Path | None = None
    result: OperationResult = field(default_factory=OperationResult)
    duration_ms: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result.all_ok

    def to_dict(self) -> dict:
        data: dict = {
            "kind": self.kind.value,
            "mode": self.mode.value,
            "operation_id": self.operation_id,
            "catalog": str(self.catalog_path) if self.catalog_path else None,
            "status": "failed" if self.error else self.result.status,
            "result": self.result.to_dict(),
            "duration_ms": self.duration_ms,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class SessionResult:
    """Result of a multi-subsystem session."""

    batches: list[BatchRunResult] = field(default_factory=list)
    restore_point: bool | None = None     # None = not attempted

    @property
    def merged(self) -> OperationResult:
        return OperationResult.combine([b.result for b in self.batches])

    @property
    def errors(self) -> list[str]:
        return [b.error for b in self.batches if b.error]

    @property
    def ok(self) -> bool:
        return all(b.ok for b in self.batches)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "restore_point": self.restore_point,
            "batches": [b.to_dict() for b in self.batches],
            "result": self.merged.to_dict(),
            "errors": self.errors,
        }


def catalog_path(kind: CatalogKind, settings: Settings) -> Path:
    """The catalog document for ``kind``: the settings override, else bundled."""
    kind = CatalogKind(kind)
    override = getattr(settings.catalogs, kind.value)
    return override if override is not None else bundled_catalog(kind.value)


def build_action(kind: CatalogKind, catalog: Catalog, context: SessionContext):
    """The per-entry action and protection check for one subsystem.

    Returns:
        ``(action, protection_check)``; the check is None except for
        bloatware.

    Raises:
        TypeError: If a bloatware batch is given another catalog type.
    """
    registry = context.registry
    kind = CatalogKind(kind)

    if kind is CatalogKind.SOFTWARE:
        fallback = ManualFallback(
            registry.shell,
            context.settings.downloads_dir,
            reporter=context.reporter,
            interactive=context.interactive,
            open_urls=context.settings.open_manual_urls,
        )
        action = InstallAction(
            registry.package_manager,
            context.retry_policy,
            fallback,
            locale=context.settings.locale,
        )
        return action, None

    if kind is CatalogKind.TWEAKS:
        return TweakAction(registry.registry_editor, registry.shell, context.backup), None

    if not isinstance(catalog, BloatwareCatalog):
        raise TypeError(f"bloatware batches need a BloatwareCatalog, got {type(catalog).__name__}")
    protected = catalog.protected
    action = RemoveAppAction(registry.app_store, registry.package_manager, registry.shell)
    return action, lambda app: is_protected(app.id, protected)


def run_batch_for(
    kind: CatalogKind,
    context: SessionContext,
    mode: SelectionMode = SelectionMode.RECOMMENDED,
    selection: Sequence[CatalogEntry] | None = None,
    catalog: Catalog | None = None,
) -> BatchRunResult:
    """Run one subsystem end to end.

    Args:
        kind: Which subsystem.
        context: The session context.
        mode: RECOMMENDED or EXPLICIT.
        selection: The operator's chosen entries (EXPLICIT only).
        catalog: An already-loaded catalog; loaded from disk if None.

    Returns:
        BatchRunResult. A catalog that cannot be loaded sets ``error``
        and nothing is attempted.
    """
    kind = CatalogKind(kind)
    mode = SelectionMode(mode)
    batch = BatchRunResult(kind=kind, mode=mode, operation_id=generate_operation_id())
    start = time.monotonic()

    # ── Load catalog ─────────────────────────────────────────────
    batch.catalog_path = catalog_path(kind, context.settings)
    if catalog is None:
        catalog = load_catalog(batch.catalog_path, kind)
        if catalog is None:
            batch.error = f"Could not load {kind.value} catalog: {batch.catalog_path}"
            _record(context, batch)
            return batch

    # ── Select and execute ───────────────────────────────────────
    entries = select_entries(catalog, mode, selection)
    action, protection_check = build_action(kind, catalog, context)

    batch.result = run_batch(
        entries,
        action,
        protection_check=protection_check,
        reporter=context.reporter,
        label=_LABELS[kind],
    )
    batch.duration_ms = int((time.monotonic() - start) * 1000)

    _record(context, batch)
    return batch


def run_session(
    kinds: Sequence[CatalogKind],
    context: SessionContext,
    mode: SelectionMode = SelectionMode.RECOMMENDED,
    *,
    restore_point: bool = False,
) -> SessionResult:
    """Run several subsystems in order, continuing past failures.

    Args:
        kinds: Subsystems to run, in order.
        context: The session context.
        mode: Selection mode applied to every subsystem.
        restore_point: Create a system restore point first.
    """
    session = SessionResult()

    if restore_point:
        session.restore_point = create_restore_point(context.registry.shell)
        if not session.restore_point:
            logger.warning("Continuing without a restore point")

    for kind in kinds:
        batch = run_batch_for(kind, context, mode)
        session.batches.append(batch)
        if batch.error:
            logger.error("%s", batch.error)

    merged = session.merged
    logger.info(
        "Session complete: %d succeeded, %d failed, %d skipped",
        len(merged.success),
        len(merged.failed),
        len(merged.skipped),
    )
    return session


def run_auto(context: SessionContext, *, restore_point: bool = True) -> SessionResult:
    """Recommended-only run of every subsystem."""
    return run_session(AUTO_ORDER, context, SelectionMode.RECOMMENDED, restore_point=restore_point)


def _record(context: SessionContext, batch: BatchRunResult) -> None:
    if context.history is None:
        return
    entry = HistoryEntry.from_result(
        batch.result,
        operation_id=batch.operation_id,
        kind=batch.kind.value,
        mode=batch.mode.value,
        mock=context.registry.mock_mode,
        duration_ms=batch.duration_ms,
        error=batch.error,
    )
    if batch.error:
        entry.status = "failed"
    context.history.write(entry)
