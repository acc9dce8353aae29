"""
Adapter base — the contract between the actions and the machine.

Actions never shell out or touch the registry themselves. They call
adapters, and adapters translate every raw exit code into a boolean,
an integer exit status, or an InstallSignal at their boundary.

Adapters NEVER raise to callers. A process that cannot be started, a
missing tool, an access-denied key: all of these come back as failure
values.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from firstrun.core.models.result import InstallSignal

RegistryData = int | str | list[str]


class Adapter(ABC):
    """Abstract base class for all adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'winget', 'appx', 'registry')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class PackageManager(Adapter):
    """Installs and queries packages by package-manager id."""

    @abstractmethod
    def install(
        self,
        package_id: str,
        *,
        locale: str | None = None,
        force: bool = False,
    ) -> InstallSignal:
        """Install one package. ``force`` bypasses the cached installer hash."""

    @abstractmethod
    def is_installed(self, package_id: str) -> bool:
        """Whether the package is currently installed."""

    @abstractmethod
    def uninstall(self, package_id: str) -> bool:
        """Uninstall one package. True on success."""


class AppPackageStore(Adapter):
    """Lists and removes installed app packages."""

    @abstractmethod
    def list_installed(self) -> list[str] | None:
        """Names of all installed app packages, or None if listing failed."""

    @abstractmethod
    def remove_user_package(self, package_id: str) -> bool:
        """Remove the installed package for existing users."""

    @abstractmethod
    def remove_provisioned_package(self, package_id: str) -> bool:
        """Remove the provisioned package so new profiles don't get it."""


class RegistryEditor(Adapter):
    """Writes registry values and exports keys."""

    @abstractmethod
    def write_value(
        self,
        path: str,
        value_name: str,
        value: RegistryData,
        value_type: str,
    ) -> bool:
        """Create the key if needed and set the value. True on success."""

    @abstractmethod
    def export_key(self, path: str, destination: Path) -> bool:
        """Export a key to a .reg file. True on success."""

    @abstractmethod
    def run_tool(self, args: Sequence[str]) -> int:
        """Run the command-line registry tool; returns its exit code."""


class SystemShell(Adapter):
    """Runs system commands and inspects processes and files."""

    @abstractmethod
    def run(self, command: str) -> int:
        """Run a command line through the shell; returns its exit code."""

    @abstractmethod
    def run_executable(self, path: Path, args: Sequence[str] = ()) -> int:
        """Run an executable directly; returns its exit code."""

    @abstractmethod
    def run_powershell(self, script: str) -> int:
        """Run a PowerShell script block; returns its exit code."""

    @abstractmethod
    def process_running(self, image_name: str) -> bool:
        """Whether a process with this image name is running."""

    @abstractmethod
    def stop_process(self, image_name: str) -> bool:
        """Force-stop every process with this image name."""

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Whether a file exists."""

    @abstractmethod
    def open_url(self, url: str) -> bool:
        """Open a URL for the user. True if a browser accepted it."""

    @abstractmethod
    def download(self, url: str, destination: Path) -> bool:
        """Download ``url`` to ``destination``. True on success."""
