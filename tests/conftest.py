"""
Shared test fixtures and configuration.
"""

import json
import textwrap
from pathlib import Path

import pytest

from firstrun.adapters.registry import build_registry
from firstrun.core.models.result import OperationResult
from firstrun.core.models.settings import CatalogPaths, Settings
from firstrun.core.observability.reporter import Reporter

SOFTWARE = {
    "categories": [
        {
            "name": "Browsers",
            "packages": [
                {"id": "Mozilla.Firefox", "name": "Firefox", "recommended": True},
                {"id": "Google.Chrome", "name": "Google Chrome"},
            ],
        },
        {
            "name": "Utilities",
            "packages": [
                {"id": "7zip.7zip", "name": "7-Zip", "recommended": True},
                {
                    "id": "Vendor.Tool",
                    "name": "Vendor Tool",
                    "recommended": True,
                    "wingetUnavailable": True,
                    "manualUrl": "https://example.com/downloads/VendorSetup.exe",
                    "manualNote": "Run the installer.",
                },
            ],
        },
    ]
}

TWEAKS = {
    "categories": [
        {
            "name": "Privacy",
            "tweaks": [
                {
                    "name": "Disable telemetry",
                    "recommended": True,
                    "registry": [
                        {
                            "path": "HKLM:\\SOFTWARE\\Policies\\Microsoft\\Windows\\DataCollection",
                            "name": "AllowTelemetry",
                            "value": 0,
                            "type": "DWord",
                        }
                    ],
                },
                {"name": "Review app permissions", "info": True, "recommended": True},
            ],
        },
        {
            "name": "Power",
            "tweaks": [
                {
                    "name": "High performance plan",
                    "powerConfig": ["powercfg /setactive SCHEME_MIN"],
                },
            ],
        },
    ]
}

BLOATWARE = {
    "bloatware": [
        {"id": "Microsoft.BingNews", "name": "Microsoft News", "recommended": True},
        {"id": "Microsoft.GetHelp", "name": "Get Help", "recommended": True},
        {"id": "*CandyCrush*", "name": "Candy Crush", "recommended": True},
        {"id": "Microsoft.WindowsStore", "name": "Microsoft Store", "recommended": True},
    ],
    "protected": ["Microsoft.WindowsStore", "Microsoft.DesktopAppInstaller"],
    "onedrive": {"recommended": False},
}


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


class RecordingReporter(Reporter):
    """Reporter that remembers every hook call."""

    def __init__(self):
        self.progress: list[tuple[int, int, str]] = []
        self.notices: list[tuple[str, str]] = []
        self.batches: list[tuple[str, OperationResult]] = []

    def on_progress(self, current, total, label):
        self.progress.append((current, total, label))

    def on_notice(self, title, message):
        self.notices.append((title, message))

    def on_batch_complete(self, label, result):
        self.batches.append((label, result))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Directory holding the three test catalogs."""
    directory = tmp_path / "catalogs"
    write_json(directory / "software.json", SOFTWARE)
    write_json(directory / "tweaks.json", TWEAKS)
    write_json(directory / "bloatware.json", BLOATWARE)
    return directory


@pytest.fixture
def settings(tmp_path: Path, catalog_dir: Path) -> Settings:
    return Settings(
        retry_delay_seconds=0,
        catalogs=CatalogPaths(
            software=catalog_dir / "software.json",
            tweaks=catalog_dir / "tweaks.json",
            bloatware=catalog_dir / "bloatware.json",
        ),
        backup_dir=tmp_path / "backups",
        log_dir=tmp_path / "logs",
        downloads_dir=tmp_path / "downloads",
    )


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """A firstrun.yml pointing at the test catalogs via relative paths."""
    content = textwrap.dedent("""\
        max_retries: 2
        retry_delay_seconds: 0
        catalogs:
          software: catalogs/software.json
          tweaks: catalogs/tweaks.json
          bloatware: catalogs/bloatware.json
        backup_dir: backups
        log_dir: logs
        downloads_dir: downloads
    """)
    path = tmp_path / "firstrun.yml"
    path.write_text(content)
    return path


@pytest.fixture
def mock_registry():
    return build_registry(mock_mode=True)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
