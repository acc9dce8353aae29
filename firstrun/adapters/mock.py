"""
Mock adapters — in-memory test doubles for every adapter contract.

Used in mock mode to walk a full session without touching the
machine, and by the test suite. Each mock succeeds by default, keeps
a call log, and can be told to fail for specific ids.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterable, Sequence

from firstrun.adapters.base import (
    AppPackageStore,
    PackageManager,
    RegistryData,
    RegistryEditor,
    SystemShell,
)
from firstrun.core.models.result import InstallSignal


class MockPackageManager(PackageManager):
    """Package manager double.

    ``installed`` ids report as present. ``set_signals`` scripts the
    install results for one id; once the script runs out the package
    installs successfully.
    """

    def __init__(
        self,
        installed: Iterable[str] = (),
        available: bool = True,
        adapter_name: str = "winget",
    ):
        self._name = adapter_name
        self._available = available
        self.installed: set[str] = set(installed)
        self._signals: dict[str, deque[InstallSignal]] = {}
        self._uninstall_failures: set[str] = set()
        self.call_log: list[tuple[str, str, dict]] = []

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available

    @property
    def install_calls(self) -> list[tuple[str, dict]]:
        return [(pid, kw) for op, pid, kw in self.call_log if op == "install"]

    def set_signals(self, package_id: str, signals: Sequence[InstallSignal]) -> None:
        self._signals[package_id] = deque(signals)

    def set_failure(self, package_id: str) -> None:
        """Make every install of ``package_id`` fail."""
        self._signals[package_id] = deque([InstallSignal.FAILED] * 1000)

    def set_uninstall_failure(self, package_id: str) -> None:
        self._uninstall_failures.add(package_id)

    def install(
        self,
        package_id: str,
        *,
        locale: str | None = None,
        force: bool = False,
    ) -> InstallSignal:
        self.call_log.append(("install", package_id, {"locale": locale, "force": force}))
        script = self._signals.get(package_id)
        signal = script.popleft() if script else InstallSignal.SUCCEEDED
        if signal is InstallSignal.SUCCEEDED:
            self.installed.add(package_id)
        return signal

    def is_installed(self, package_id: str) -> bool:
        self.call_log.append(("is_installed", package_id, {}))
        return package_id in self.installed

    def uninstall(self, package_id: str) -> bool:
        self.call_log.append(("uninstall", package_id, {}))
        if package_id in self._uninstall_failures:
            return False
        self.installed.discard(package_id)
        return True

    def reset(self) -> None:
        self.call_log.clear()
        self._signals.clear()
        self._uninstall_failures.clear()


class MockAppPackageStore(AppPackageStore):
    """App package store double backed by a list of installed names."""

    def __init__(self, installed: Iterable[str] = (), available: bool = True):
        self._available = available
        self.installed: list[str] = list(installed)
        self.provisioned: set[str] = set(self.installed)
        self._user_failures: set[str] = set()
        self._provisioned_failures: set[str] = set()
        self.call_log: list[tuple[str, str]] = []
        self.listing_fails = False

    @property
    def name(self) -> str:
        return "appx"

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, package_id: str, *, provisioned: bool = False) -> None:
        """Make the user (default) or provisioned removal of an id fail."""
        if provisioned:
            self._provisioned_failures.add(package_id)
        else:
            self._user_failures.add(package_id)

    def list_installed(self) -> list[str] | None:
        self.call_log.append(("list", ""))
        if self.listing_fails:
            return None
        return list(self.installed)

    def remove_user_package(self, package_id: str) -> bool:
        self.call_log.append(("remove_user", package_id))
        if package_id in self._user_failures:
            return False
        self.installed = [n for n in self.installed if n != package_id]
        return True

    def remove_provisioned_package(self, package_id: str) -> bool:
        self.call_log.append(("remove_provisioned", package_id))
        if package_id in self._provisioned_failures:
            return False
        self.provisioned.discard(package_id)
        return True


class MockRegistryEditor(RegistryEditor):
    """Registry double: a dict of (path, name) → (value, type)."""

    def __init__(self, available: bool = True):
        self._available = available
        self.values: dict[tuple[str, str], tuple[RegistryData, str]] = {}
        self.exports: list[tuple[str, Path]] = []
        self.tool_calls: list[list[str]] = []
        self._write_failures: set[str] = set()
        self._tool_failures: set[str] = set()
        self._export_failures: set[str] = set()

    @property
    def name(self) -> str:
        return "registry"

    def is_available(self) -> bool:
        return self._available

    def set_write_failure(self, value_name: str, *, tool_too: bool = False) -> None:
        """Direct writes of ``value_name`` fail; optionally reg.exe as well."""
        self._write_failures.add(value_name)
        if tool_too:
            self._tool_failures.add(value_name)

    def set_export_failure(self, path: str) -> None:
        self._export_failures.add(path)

    def write_value(
        self,
        path: str,
        value_name: str,
        value: RegistryData,
        value_type: str,
    ) -> bool:
        if value_name in self._write_failures:
            return False
        self.values[(path, value_name)] = (value, value_type)
        return True

    def export_key(self, path: str, destination: Path) -> bool:
        if path in self._export_failures:
            return False
        self.exports.append((path, destination))
        return True

    def run_tool(self, args: Sequence[str]) -> int:
        self.tool_calls.append(list(args))
        if any(a in self._tool_failures for a in args):
            return 1
        return 0


class MockSystemShell(SystemShell):
    """System shell double with scripted exit codes and a fake filesystem."""

    def __init__(
        self,
        available: bool = True,
        files: Iterable[Path | str] = (),
        running: Iterable[str] = (),
    ):
        self._available = available
        self.files: set[Path] = {Path(f) for f in files}
        self.running: set[str] = {r.lower() for r in running}
        self.exit_codes: dict[str, int] = {}
        self.commands: list[str] = []
        self.executed: list[tuple[Path, list[str]]] = []
        self.scripts: list[str] = []
        self.opened: list[str] = []
        self.downloads: list[tuple[str, Path]] = []
        self.download_ok = True

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return self._available

    def set_exit_code(self, command_or_path: str | Path, code: int) -> None:
        self.exit_codes[str(command_or_path)] = code

    def run(self, command: str) -> int:
        self.commands.append(command)
        return self.exit_codes.get(command, 0)

    def run_executable(self, path: Path, args: Sequence[str] = ()) -> int:
        self.executed.append((Path(path), list(args)))
        return self.exit_codes.get(str(path), 0)

    def run_powershell(self, script: str) -> int:
        self.scripts.append(script)
        return self.exit_codes.get("powershell", 0)

    def process_running(self, image_name: str) -> bool:
        return image_name.lower() in self.running

    def stop_process(self, image_name: str) -> bool:
        self.running.discard(image_name.lower())
        return True

    def path_exists(self, path: Path) -> bool:
        return Path(path) in self.files

    def open_url(self, url: str) -> bool:
        self.opened.append(url)
        return True

    def download(self, url: str, destination: Path) -> bool:
        self.downloads.append((url, destination))
        if self.download_ok:
            self.files.add(Path(destination))
        return self.download_ok
