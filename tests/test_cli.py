"""
Tests for CLI commands — auto, subsystem runs, catalog, history, doctor,
and the interactive selection menu.

Every command that would touch the machine runs with ``--mock``.
"""

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from firstrun.core.config.catalog_loader import CatalogKind, read_catalog
from firstrun.main import cli
from firstrun.ui.cli.menu import catalog_groups, parse_selection


@pytest.fixture
def config(settings_file: Path, catalog_dir: Path) -> str:
    """Path to a firstrun.yml whose catalogs are the test catalogs."""
    return str(settings_file)


def _invoke(args, input=None):
    return CliRunner().invoke(cli, args, input=input)


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        result = _invoke(["--help"])
        assert result.exit_code == 0
        assert "provision a fresh Windows machine" in result.output
        for command in ("auto", "software", "tweaks", "bloatware", "catalog", "history", "doctor"):
            assert command in result.output

    def test_version(self):
        result = _invoke(["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_config(self, tmp_path: Path):
        bad = tmp_path / "firstrun.yml"
        bad.write_text("max_retries: -1\n")
        result = _invoke(["--config", str(bad), "auto", "--mock"])
        assert result.exit_code == 1
        assert "Invalid settings" in result.output

    def test_missing_config(self, tmp_path: Path):
        result = _invoke(["--config", str(tmp_path / "nope.yml"), "history"])
        assert result.exit_code == 1
        assert "not found" in result.output


# ── auto ─────────────────────────────────────────────────────────────


class TestAutoCommand:
    def test_auto_json(self, config):
        result = _invoke(["--config", config, "auto", "--mock", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert [b["kind"] for b in data["batches"]] == ["software", "tweaks", "bloatware"]
        assert data["restore_point"] is True
        assert data["result"]["Success"] == ["Firefox", "7-Zip", "Vendor Tool", "Disable telemetry"]

    def test_auto_no_restore_point(self, config):
        result = _invoke(["--config", config, "auto", "--mock", "--json", "--no-restore-point"])
        assert json.loads(result.stdout)["restore_point"] is None

    def test_auto_pretty(self, config):
        result = _invoke(["--config", config, "auto", "--mock"])
        assert result.exit_code == 0, result.output
        assert "[mock] Automatic provisioning" in result.output
        assert "✓ Firefox" in result.output
        assert "Result: 4/" in result.output

    def test_auto_broken_catalog_exits_1(self, tmp_path: Path, catalog_dir: Path):
        config = tmp_path / "broken.yml"
        config.write_text(
            "retry_delay_seconds: 0\n"
            "catalogs:\n"
            "  software: catalogs/missing.json\n"
            "  tweaks: catalogs/tweaks.json\n"
            "  bloatware: catalogs/bloatware.json\n"
            "log_dir: logs\n"
        )
        result = _invoke(["--config", str(config), "auto", "--mock", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["ok"] is False
        assert data["batches"][1]["result"]["Success"] == ["Disable telemetry"]

    def test_auto_records_history(self, config, tmp_path: Path):
        _invoke(["--config", config, "auto", "--mock", "--no-restore-point"])
        lines = (tmp_path / "logs" / "history.ndjson").read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["kind"] for line in lines] == ["software", "tweaks", "bloatware"]


# ── software / tweaks / bloatware ────────────────────────────────────


class TestBatchCommands:
    def test_recommended_json(self, config):
        result = _invoke(["--config", config, "tweaks", "--recommended", "--mock", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["kind"] == "tweaks"
        assert data["mode"] == "recommended"
        assert data["result"] == {
            "Success": ["Disable telemetry"],
            "Failed": [],
            "Skipped": ["Review app permissions"],
        }

    def test_interactive_defaults(self, config):
        # Enter keeps the recommended entries in both categories
        result = _invoke(["--config", config, "software", "--mock"], input="\n\n")
        assert result.exit_code == 0, result.output
        assert "[x]  1. Firefox" in result.output
        assert "[ ]  2. Google Chrome" in result.output
        assert "✓ 7-Zip" in result.output
        assert "Vendor Tool" in result.output

    def test_interactive_explicit_choice(self, config):
        result = _invoke(
            ["--config", config, "software", "--interactive", "--mock", "--json"],
            input="all\nnone\n",
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout[result.stdout.index("{"):])
        assert data["mode"] == "explicit"
        assert data["result"]["Success"] == ["Firefox", "Google Chrome"]

    def test_interactive_json_keeps_menu_off_stdout(self, config):
        result = _invoke(["--config", config, "bloatware", "--mock", "--json"], input="\n")
        assert result.exit_code == 0, result.output
        assert "Preinstalled apps" in result.stderr
        assert "Preinstalled apps" not in result.stdout
        data = json.loads(result.stdout)
        assert data["mode"] == "explicit"
        assert data["result"]["Skipped"] == ["Microsoft News", "Get Help", "Candy Crush", "Microsoft Store"]

    def test_interactive_reprompts_on_bad_answer(self, config):
        result = _invoke(["--config", config, "software", "--mock"], input="9\n2\nnone\n")
        assert result.exit_code == 0, result.output
        assert "outside 1-2" in result.output
        assert "✓ Google Chrome" in result.output

    def test_bloatware_nothing_installed(self, config):
        result = _invoke(["--config", config, "bloatware", "--recommended", "--mock", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["result"]["Success"] == []
        assert "Microsoft Store" in data["result"]["Skipped"]

    def test_broken_catalog(self, tmp_path: Path):
        config = tmp_path / "firstrun.yml"
        config.write_text("catalogs:\n  tweaks: nowhere.json\nlog_dir: logs\n")
        result = _invoke(["--config", str(config), "tweaks", "--mock"])
        assert result.exit_code == 1
        assert "Could not load tweaks catalog" in result.output


# ── catalog ──────────────────────────────────────────────────────────


class TestCatalogCommands:
    def test_list(self, config):
        result = _invoke(["--config", config, "catalog", "list", "software"])
        assert result.exit_code == 0
        assert "Browsers" in result.output
        assert "★ Firefox (Mozilla.Firefox)" in result.output

    def test_list_bundled(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = _invoke(["catalog", "list", "bloatware"])
        assert result.exit_code == 0
        assert "Microsoft OneDrive" in result.output

    def test_list_json(self, config):
        result = _invoke(["--config", config, "catalog", "list", "tweaks", "--json"])
        data = json.loads(result.stdout)
        assert [c["name"] for c in data["categories"]] == ["Privacy", "Power"]

    def test_unknown_kind(self):
        result = _invoke(["catalog", "list", "drivers"])
        assert result.exit_code == 2

    def test_check(self, config):
        result = _invoke(["--config", config, "catalog", "check"])
        assert result.exit_code == 0
        assert "✅ software" in result.output
        assert "protected and will always be skipped" in result.output

    def test_check_json_invalid(self, tmp_path: Path, catalog_dir: Path):
        (catalog_dir / "software.json").write_text("[]")
        config = tmp_path / "firstrun.yml"
        config.write_text("catalogs:\n  software: catalogs/software.json\n")
        result = _invoke(["--config", str(config), "catalog", "check", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["catalogs"][0]["errors"]


# ── history / doctor / restore-point ─────────────────────────────────


class TestHistoryCommand:
    def test_empty(self, config):
        result = _invoke(["--config", config, "history"])
        assert result.exit_code == 0
        assert "No runs recorded yet" in result.output

    def test_after_run(self, config):
        _invoke(["--config", config, "tweaks", "--recommended", "--mock"])
        result = _invoke(["--config", config, "history"])
        assert "tweaks" in result.output
        assert "[mock]" in result.output

    def test_json_limit(self, config):
        for _ in range(3):
            _invoke(["--config", config, "tweaks", "--recommended", "--mock"])
        result = _invoke(["--config", config, "history", "-n", "2", "--json"])
        assert len(json.loads(result.stdout)) == 2

    def test_footer_counts_all_runs(self, config):
        for _ in range(3):
            _invoke(["--config", config, "tweaks", "--recommended", "--mock"])
        result = _invoke(["--config", config, "history", "-n", "1"])
        assert "1 of 3 runs shown" in result.output


class TestDoctorCommand:
    def test_mock_json(self, config):
        result = _invoke(["--config", config, "doctor", "--mock", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert set(data["adapters"]) == {"winget", "appx", "registry", "shell"}
        assert data["ok"] is True

    def test_pretty(self, config):
        result = _invoke(["--config", config, "doctor", "--mock"])
        assert "firstrun doctor" in result.output
        assert "winget" in result.output


class TestRestorePointCommand:
    def test_mock(self, config):
        result = _invoke(["--config", config, "restore-point", "--mock"])
        assert result.exit_code == 0
        assert "Restore point created" in result.output


# ── Menu ─────────────────────────────────────────────────────────────


class TestParseSelection:
    def test_empty_keeps_default(self):
        assert parse_selection("  ", 5, [1, 3]) == [1, 3]

    def test_all_and_none(self):
        assert parse_selection("ALL", 3, []) == [1, 2, 3]
        assert parse_selection("none", 3, [1]) == []

    def test_numbers_and_ranges(self):
        assert parse_selection("4, 1 2-3 2", 5, []) == [1, 2, 3, 4]

    @pytest.mark.parametrize("text", ["0", "6", "3-1", "x", "1-y"])
    def test_rejects(self, text):
        with pytest.raises(click.BadParameter):
            parse_selection(text, 5, [])


class TestCatalogGroups:
    def test_categories_in_order(self, catalog_dir: Path):
        loaded = read_catalog(catalog_dir / "software.json", CatalogKind.SOFTWARE)
        groups = catalog_groups(loaded)
        assert [name for name, _ in groups] == ["Browsers", "Utilities"]
        assert [e.name for e in groups[1][1]] == ["7-Zip", "Vendor Tool"]

    def test_tweak_categories(self, catalog_dir: Path):
        loaded = read_catalog(catalog_dir / "tweaks.json", CatalogKind.TWEAKS)
        groups = catalog_groups(loaded)
        assert [name for name, _ in groups] == ["Privacy", "Power"]
        assert groups[1][1][0].name == "High performance plan"

    def test_bloatware_single_group_with_onedrive(self, catalog_dir: Path):
        loaded = read_catalog(catalog_dir / "bloatware.json", CatalogKind.BLOATWARE)
        [(name, entries)] = catalog_groups(loaded)
        assert name == "Preinstalled apps"
        assert entries[-1].name == "Microsoft OneDrive"
