"""
Remove-app action — Store app packages and the OneDrive client.

App packages are removed in two phases:

    1. the installed package, for every existing user
    2. the provisioned copy, so new profiles don't get it back

Only phase 1 decides the outcome. A failed phase 2 leaves current
users clean and is reported as a warning.

OneDrive is not an app package on most builds. It ships its own
uninstaller, which is located on disk and run with ``/uninstall``.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, Mapping

from firstrun.adapters.base import AppPackageStore, PackageManager, SystemShell
from firstrun.core.models.catalog import ONEDRIVE_ID, BloatwareApp
from firstrun.core.models.result import Outcome

logger = logging.getLogger(__name__)

ONEDRIVE_PROCESS = "OneDrive.exe"
ONEDRIVE_SETUP = "OneDriveSetup.exe"


def is_protected(entry_id: str, protected: Iterable[str]) -> bool:
    """Whether an app id overlaps any protected token.

    Case-sensitive substring match in both directions: ``Foo`` guards
    ``FooBar`` and ``BarFoo`` guards ``Bar``. Empty tokens never match.
    """
    return any(token and (token in entry_id or entry_id in token) for token in protected)


def matching_packages(app_id: str, installed: Iterable[str]) -> list[str]:
    """Installed package names an app id refers to (``*`` wildcards allowed)."""
    if "*" in app_id:
        return [name for name in installed if fnmatch.fnmatchcase(name, app_id)]
    return [name for name in installed if name == app_id]


def onedrive_uninstallers(environ: Mapping[str, str]) -> list[Path]:
    """Known OneDriveSetup.exe locations, most common first."""
    system_root = Path(environ.get("SystemRoot") or environ.get("SYSTEMROOT") or "C:\\Windows")
    paths = [
        system_root / "System32" / ONEDRIVE_SETUP,
        system_root / "SysWOW64" / ONEDRIVE_SETUP,
    ]
    local_app_data = environ.get("LOCALAPPDATA")
    if local_app_data:
        paths.append(Path(local_app_data) / "Microsoft" / "OneDrive" / ONEDRIVE_SETUP)
    return paths


class RemoveAppAction:
    """The per-entry action for bloatware batches.

    One instance serves one batch: the installed-package listing is
    taken on first use and reused for every later entry.
    """

    def __init__(
        self,
        app_store: AppPackageStore,
        package_manager: PackageManager,
        shell: SystemShell,
        environ: Mapping[str, str] | None = None,
    ):
        self._store = app_store
        self._pm = package_manager
        self._shell = shell
        self._environ = environ if environ is not None else os.environ
        self._installed: list[str] | None = None
        self._listed = False

    def __call__(self, app: BloatwareApp) -> Outcome:
        if app.kind == "onedrive":
            return self.remove_onedrive()
        return self.remove_package(app)

    @property
    def installed(self) -> list[str] | None:
        """Installed package names, or None when the store could not list them."""
        if not self._listed:
            self._installed = self._store.list_installed()
            self._listed = True
            if self._installed is None:
                logger.error("Installed app packages could not be listed")
            else:
                logger.debug("%d app packages installed", len(self._installed))
        return self._installed

    def remove_package(self, app: BloatwareApp) -> Outcome:
        installed = self.installed
        # Unknown presence is a failure, never a skip
        if installed is None:
            logger.error("Cannot remove %s: installed packages are unknown", app.name)
            return Outcome.FAILED

        matches = matching_packages(app.id, installed)
        if not matches:
            logger.info("%s is not installed", app.name)
            return Outcome.SKIPPED

        if not self._store.remove_user_package(app.id):
            logger.error("Could not remove %s (%s)", app.name, app.id)
            return Outcome.FAILED

        if not self._store.remove_provisioned_package(app.id):
            logger.warning(
                "%s removed for existing users, but the provisioned package remains",
                app.name,
            )
        return Outcome.SUCCESS

    def remove_onedrive(self) -> Outcome:
        uninstallers = [p for p in onedrive_uninstallers(self._environ) if self._shell.path_exists(p)]
        running = self._shell.process_running(ONEDRIVE_PROCESS)

        if not uninstallers and not running and not self._pm.is_installed(ONEDRIVE_ID):
            logger.info("OneDrive is not present")
            return Outcome.SKIPPED

        if running and not self._shell.stop_process(ONEDRIVE_PROCESS):
            logger.warning("Could not stop %s", ONEDRIVE_PROCESS)

        if uninstallers:
            setup = uninstallers[0]
            code = self._shell.run_executable(setup, ["/uninstall"])
            if code != 0:
                logger.error("%s /uninstall exited with %d", setup, code)
                return Outcome.FAILED
            return Outcome.SUCCESS

        logger.info("No OneDrive uninstaller found, using the package manager")
        if self._pm.uninstall(ONEDRIVE_ID):
            return Outcome.SUCCESS
        logger.error("Package manager could not uninstall OneDrive")
        return Outcome.FAILED
