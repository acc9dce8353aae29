"""
Tests for use cases — subsystem runs, sessions and catalog checks.
"""

import json
from pathlib import Path

import pytest

from firstrun.core.config.catalog_loader import CatalogKind, read_catalog
from firstrun.core.data import bundled_catalog
from firstrun.core.engine.selection import SelectionMode
from firstrun.core.models import InstallSignal, Settings
from firstrun.core.persistence.history import HistoryWriter
from firstrun.core.use_cases.catalog_check import check_catalog, check_catalogs
from firstrun.core.use_cases.run import (
    AUTO_ORDER,
    SessionContext,
    build_action,
    catalog_path,
    run_auto,
    run_batch_for,
    run_session,
)


@pytest.fixture
def context(settings, mock_registry, reporter) -> SessionContext:
    return SessionContext(
        settings=settings,
        registry=mock_registry,
        reporter=reporter,
        interactive=False,
        sleep=lambda seconds: None,
        history=HistoryWriter(settings.log_dir),
    )


# ── Catalog paths ────────────────────────────────────────────────────


class TestCatalogPath:
    def test_override(self, settings, catalog_dir):
        assert catalog_path(CatalogKind.SOFTWARE, settings) == catalog_dir / "software.json"

    def test_bundled_default(self):
        assert catalog_path(CatalogKind.TWEAKS, Settings()) == bundled_catalog("tweaks")


# ── Single subsystem ─────────────────────────────────────────────────


class TestRunBatchFor:
    def test_software_recommended(self, context, mock_registry):
        mock_registry.package_manager.installed.add("Mozilla.Firefox")
        batch = run_batch_for(CatalogKind.SOFTWARE, context)
        assert batch.error is None
        assert batch.result.to_dict() == {
            "Success": ["7-Zip", "Vendor Tool"],
            "Failed": [],
            "Skipped": ["Firefox"],
        }

    def test_installed_recommended_only_package_is_skipped(self, context, mock_registry, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps({
            "categories": [{"name": "X", "packages": [{"id": "A", "name": "A", "recommended": True}]}]
        }))
        context.settings.catalogs.software = path
        mock_registry.package_manager.installed.add("A")
        batch = run_batch_for(CatalogKind.SOFTWARE, context)
        assert batch.result.to_dict() == {"Success": [], "Failed": [], "Skipped": ["A"]}
        assert mock_registry.package_manager.install_calls == []

    def test_software_failure_after_retries(self, context, mock_registry):
        mock_registry.package_manager.set_failure("7zip.7zip")
        batch = run_batch_for(CatalogKind.SOFTWARE, context)
        assert batch.result.failed == ["7-Zip"]
        assert not batch.ok
        assert len([c for c in mock_registry.package_manager.install_calls if c[0] == "7zip.7zip"]) == 3

    def test_hash_mismatch_recovered(self, context, mock_registry):
        mock_registry.package_manager.set_signals("7zip.7zip", [InstallSignal.HASH_MISMATCH])
        batch = run_batch_for(CatalogKind.SOFTWARE, context)
        assert "7-Zip" in batch.result.success

    def test_scripted_manual_entry_downloads(self, context, mock_registry, settings):
        run_batch_for(CatalogKind.SOFTWARE, context)
        shell = mock_registry.shell
        assert shell.downloads == [
            ("https://example.com/downloads/VendorSetup.exe", settings.downloads_dir / "VendorSetup.exe")
        ]
        assert shell.opened == []

    def test_interactive_manual_entry_opens_browser(self, context, mock_registry):
        context.interactive = True
        run_batch_for(CatalogKind.SOFTWARE, context)
        assert mock_registry.shell.opened == ["https://example.com/downloads/VendorSetup.exe"]
        assert mock_registry.shell.downloads == []

    def test_explicit_selection(self, context):
        catalog = read_catalog(context.settings.catalogs.software, CatalogKind.SOFTWARE)
        chrome = [p for p in catalog.entries() if p.name == "Google Chrome"]
        batch = run_batch_for(
            CatalogKind.SOFTWARE,
            context,
            SelectionMode.EXPLICIT,
            selection=chrome,
            catalog=catalog,
        )
        assert batch.result.success == ["Google Chrome"]
        assert batch.mode is SelectionMode.EXPLICIT

    def test_tweaks(self, context, mock_registry):
        batch = run_batch_for(CatalogKind.TWEAKS, context)
        # info tweak is recommended but never applied
        assert batch.result.to_dict() == {
            "Success": ["Disable telemetry"],
            "Failed": [],
            "Skipped": ["Review app permissions"],
        }
        assert mock_registry.registry_editor.exports

    def test_bloatware(self, context, mock_registry):
        store = mock_registry.app_store
        store.installed = ["Microsoft.BingNews", "king.com.CandyCrushSaga", "Microsoft.WindowsStore"]
        batch = run_batch_for(CatalogKind.BLOATWARE, context)
        assert batch.result.to_dict() == {
            "Success": ["Microsoft News", "Candy Crush"],
            "Failed": [],
            "Skipped": ["Get Help", "Microsoft Store"],
        }
        assert ("remove_user", "Microsoft.WindowsStore") not in store.call_log

    def test_broken_catalog(self, context, tmp_path, reporter):
        broken = tmp_path / "broken.json"
        broken.write_text("{")
        context.settings.catalogs.tweaks = broken
        batch = run_batch_for(CatalogKind.TWEAKS, context)
        assert batch.error and "tweaks" in batch.error
        assert batch.result.total == 0
        assert reporter.progress == []
        assert batch.to_dict()["status"] == "failed"

    def test_history_recorded(self, context, settings):
        run_batch_for(CatalogKind.TWEAKS, context)
        entries = HistoryWriter(settings.log_dir).read_all()
        assert len(entries) == 1
        assert entries[0].kind == "tweaks"
        assert entries[0].mock is True

    def test_bloatware_action_needs_bloatware_catalog(self, context):
        software = read_catalog(context.settings.catalogs.software, CatalogKind.SOFTWARE)
        with pytest.raises(TypeError, match="BloatwareCatalog"):
            build_action(CatalogKind.BLOATWARE, software, context)

    def test_bloatware_action_has_protection_check(self, context):
        bloat = read_catalog(context.settings.catalogs.bloatware, CatalogKind.BLOATWARE)
        _, check = build_action(CatalogKind.BLOATWARE, bloat, context)
        assert check(next(a for a in bloat.entries() if a.id == "Microsoft.WindowsStore"))

    def test_reporter_sees_batch(self, context, reporter):
        run_batch_for(CatalogKind.SOFTWARE, context)
        assert [label for label, _ in reporter.batches] == ["Software"]
        assert reporter.notices[0][0] == "Vendor Tool"


# ── Sessions ─────────────────────────────────────────────────────────


class TestRunSession:
    def test_auto_order_and_merge(self, context):
        session = run_auto(context, restore_point=False)
        assert [b.kind for b in session.batches] == list(AUTO_ORDER)
        merged = session.merged
        for bucket in ("success", "failed", "skipped"):
            assert len(getattr(merged, bucket)) == sum(
                len(getattr(b.result, bucket)) for b in session.batches
            )
        assert session.restore_point is None

    def test_restore_point_created_first(self, context, mock_registry):
        session = run_session([CatalogKind.TWEAKS], context, restore_point=True)
        assert session.restore_point is True
        assert "Checkpoint-Computer" in mock_registry.shell.scripts[0]

    def test_restore_point_failure_not_fatal(self, context, mock_registry):
        mock_registry.shell.set_exit_code("powershell", 1)
        session = run_session([CatalogKind.TWEAKS], context, restore_point=True)
        assert session.restore_point is False
        assert session.batches[0].result.success == ["Disable telemetry"]

    def test_continues_past_broken_catalog(self, context, tmp_path):
        context.settings.catalogs.software = tmp_path / "missing.json"
        session = run_session(AUTO_ORDER, context)
        assert session.batches[0].error
        assert session.batches[1].result.success == ["Disable telemetry"]
        assert not session.ok
        assert len(session.errors) == 1

    def test_to_dict(self, context):
        data = run_session([CatalogKind.TWEAKS], context).to_dict()
        assert data["ok"] is True
        assert data["result"]["Success"] == ["Disable telemetry"]
        assert data["batches"][0]["kind"] == "tweaks"

    def test_retry_policy_from_settings(self, settings, mock_registry):
        settings.max_retries = 5
        ctx = SessionContext(settings=settings, registry=mock_registry)
        assert ctx.retry_policy.max_retries == 5
        assert ctx.backup is not None


# ── Catalog check ────────────────────────────────────────────────────


class TestCatalogCheck:
    def test_test_catalogs(self, settings):
        result = check_catalogs(settings)
        assert result.valid
        bloat = result.reports[2]
        assert any("Microsoft Store" in w for w in bloat.warnings)

    def test_bundled_catalogs_valid(self):
        result = check_catalogs(Settings())
        assert result.valid, result.to_dict()

    def test_invalid_catalog(self, tmp_path):
        path = tmp_path / "software.json"
        path.write_text("[]")
        report = check_catalog(CatalogKind.SOFTWARE, path)
        assert not report.valid
        assert report.to_dict()["errors"]

    def test_semantic_warnings(self, tmp_path):
        path = tmp_path / "software.json"
        path.write_text(json.dumps({
            "categories": [{"name": "X", "packages": [
                {"id": "a", "name": "Same"},
                {"id": "a", "name": "Same"},
                {"id": "m", "name": "Manual", "wingetUnavailable": True},
            ]}]
        }))
        report = check_catalog(CatalogKind.SOFTWARE, path)
        assert report.valid
        text = " ".join(report.warnings)
        assert "Duplicate display name 'Same'" in text
        assert "Duplicate package id 'a'" in text
        assert "no manualUrl" in text

    def test_tweak_without_phases_warned(self, tmp_path):
        path = tmp_path / "tweaks.json"
        path.write_text(json.dumps({"categories": [{"name": "X", "tweaks": [{"name": "Nothing"}]}]}))
        report = check_catalog(CatalogKind.TWEAKS, path)
        assert any("Nothing" in w for w in report.warnings)

    def test_counts(self, catalog_dir: Path):
        report = check_catalog(CatalogKind.SOFTWARE, catalog_dir / "software.json")
        assert report.category_count == 2
        assert report.entry_count == 4
        assert report.recommended_count == 3