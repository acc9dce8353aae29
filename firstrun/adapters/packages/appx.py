"""
Appx adapter — lists and removes Store app packages via PowerShell.

Removal has two halves: the package installed for existing users, and
the provisioned copy that Windows stages into every new profile.
"""

from __future__ import annotations

import json
import logging
import shutil

from firstrun.adapters.base import AppPackageStore
from firstrun.adapters.shell.command import run_powershell

logger = logging.getLogger(__name__)


def _ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string."""
    return "'" + value.replace("'", "''") + "'"


class AppxAdapter(AppPackageStore):
    """Store app packages on the local machine (all users)."""

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "appx"

    def is_available(self) -> bool:
        return shutil.which("powershell") is not None

    def list_installed(self) -> list[str] | None:
        result = run_powershell(
            "Get-AppxPackage -AllUsers | Select-Object -ExpandProperty Name "
            "| Sort-Object -Unique | ConvertTo-Json -Compress",
            timeout=self._timeout,
        )
        if not result.ok:
            logger.warning("Could not list installed app packages: %s", result.stderr)
            return None
        if not result.stdout:
            return []
        try:
            names = json.loads(result.stdout)
        except json.JSONDecodeError:
            logger.warning("Unexpected app package listing: %s", result.stdout[:200])
            return None
        # A single match is serialised as a bare string
        if isinstance(names, str):
            return [names]
        return [n for n in names if isinstance(n, str)]

    def remove_user_package(self, package_id: str) -> bool:
        script = (
            f"$ErrorActionPreference = 'Stop'; "
            f"Get-AppxPackage -AllUsers -Name {_ps_quote(package_id)} "
            f"| Remove-AppxPackage -AllUsers"
        )
        result = run_powershell(script, timeout=self._timeout)
        if not result.ok:
            logger.debug("Remove-AppxPackage %s failed: %s", package_id, result.stderr)
        return result.ok

    def remove_provisioned_package(self, package_id: str) -> bool:
        script = (
            f"$ErrorActionPreference = 'Stop'; "
            f"Get-AppxProvisionedPackage -Online "
            f"| Where-Object {{ $_.DisplayName -like {_ps_quote(package_id)} }} "
            f"| Remove-AppxProvisionedPackage -Online | Out-Null"
        )
        result = run_powershell(script, timeout=self._timeout)
        if not result.ok:
            logger.debug("Remove-AppxProvisionedPackage %s failed: %s", package_id, result.stderr)
        return result.ok
