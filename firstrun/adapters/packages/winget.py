"""
Winget adapter — package installs through the Windows Package Manager.

Winget reports its results as HRESULT-style exit codes. They are
translated into InstallSignal values here so that nothing above this
layer looks at a raw exit code.
"""

from __future__ import annotations

import logging
import shutil

from firstrun.adapters.base import PackageManager
from firstrun.adapters.shell.command import run_command
from firstrun.core.models.result import InstallSignal

logger = logging.getLogger(__name__)

# Exit codes (unsigned). Windows hands them back unsigned, other
# launchers sometimes sign them, so both forms are normalised.
HASH_MISMATCH = 0x8A150011             # APPINSTALLER_CLI_ERROR_INSTALLER_HASH_MISMATCH
UPDATE_NOT_APPLICABLE = 0x8A15002B     # no newer version: already installed
PACKAGE_ALREADY_INSTALLED = 0x8A150061
NO_PACKAGE_FOUND = 0x8A150014

_ALREADY_INSTALLED_CODES = frozenset({UPDATE_NOT_APPLICABLE, PACKAGE_ALREADY_INSTALLED})

_AGREEMENT_FLAGS = ("--accept-source-agreements", "--accept-package-agreements")


def translate_install_exit(code: int) -> InstallSignal:
    """Map a winget install exit code onto an InstallSignal."""
    code &= 0xFFFFFFFF
    if code == 0:
        return InstallSignal.SUCCEEDED
    if code in _ALREADY_INSTALLED_CODES:
        return InstallSignal.ALREADY_INSTALLED
    if code == HASH_MISMATCH:
        return InstallSignal.HASH_MISMATCH
    return InstallSignal.FAILED


class WingetAdapter(PackageManager):
    """Install, query and uninstall packages with winget.

    Commands always match the id exactly (``-e --id``) and run silently.
    """

    def __init__(self, executable: str = "winget", timeout: int | None = None):
        self._executable = executable
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "winget"

    def is_available(self) -> bool:
        if shutil.which(self._executable) is None:
            return False
        return run_command([self._executable, "--version"], timeout=30).ok

    def install(
        self,
        package_id: str,
        *,
        locale: str | None = None,
        force: bool = False,
    ) -> InstallSignal:
        cmd = [
            self._executable, "install", "-e", "--id", package_id,
            "--silent", *_AGREEMENT_FLAGS,
        ]
        if locale:
            cmd.extend(["--locale", locale])
        if force:
            cmd.append("--force")

        result = run_command(cmd, timeout=self._timeout)
        signal = translate_install_exit(result.returncode)
        if signal is InstallSignal.FAILED:
            logger.debug(
                "winget install %s exited 0x%08X: %s",
                package_id,
                result.returncode & 0xFFFFFFFF,
                result.stdout[-500:],
            )
        return signal

    def is_installed(self, package_id: str) -> bool:
        result = run_command(
            [
                self._executable, "list", "-e", "--id", package_id,
                "--accept-source-agreements",
            ],
            timeout=self._timeout,
        )
        # winget exits non-zero when nothing matches; the id is echoed on a hit
        return result.ok and package_id.lower() in result.stdout.lower()

    def uninstall(self, package_id: str) -> bool:
        result = run_command(
            [
                self._executable, "uninstall", "-e", "--id", package_id,
                "--silent", "--accept-source-agreements",
            ],
            timeout=self._timeout,
        )
        return result.ok
