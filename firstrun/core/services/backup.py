"""
Safety net — registry key backups and a system restore point.

Backups are best-effort and for manual restore only: a key is exported
to a .reg file before its first write in a session, and nothing here
ever blocks the write that follows.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from firstrun.adapters.base import RegistryEditor, SystemShell
from firstrun.adapters.system.registry_editor import reg_tool_key

logger = logging.getLogger(__name__)

DEFAULT_RESTORE_POINT_DESCRIPTION = "firstrun: before provisioning"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _canonical_key(path: str) -> str:
    try:
        return reg_tool_key(path)
    except ValueError:
        return path.strip().rstrip("\\")


def backup_file_name(path: str) -> str:
    """File name for a key's export, e.g. ``HKCU_Software_Foo.reg``."""
    return _UNSAFE_CHARS.sub("_", _canonical_key(path)).strip("_") + ".reg"


class RegistryBackup:
    """Exports registry keys into one timestamped directory per session.

    Each key is exported at most once per session, so a tweak touching
    a key that an earlier tweak already changed does not overwrite the
    original backup.
    """

    def __init__(
        self,
        editor: RegistryEditor,
        backup_dir: Path,
        stamp: str | None = None,
    ):
        self._editor = editor
        self._dir = backup_dir / (stamp or datetime.now().strftime("%Y%m%d-%H%M%S"))
        self._exported: dict[str, Path | None] = {}

    @property
    def directory(self) -> Path:
        return self._dir

    @property
    def exported(self) -> list[Path]:
        return [p for p in self._exported.values() if p is not None]

    def backup_key(self, path: str) -> Path | None:
        """Export ``path`` once; returns the .reg file or None."""
        key = _canonical_key(path)
        if key in self._exported:
            return self._exported[key]

        destination = self._dir / backup_file_name(path)
        try:
            ok = self._editor.export_key(path, destination)
        except Exception as e:
            logger.debug("Backup of %s raised: %s", key, e)
            ok = False

        if ok:
            logger.debug("Backed up %s → %s", key, destination)
            self._exported[key] = destination
        else:
            # Usually the key does not exist yet; there is nothing to save
            logger.debug("No backup taken for %s", key)
            self._exported[key] = None
        return self._exported[key]


def create_restore_point(
    shell: SystemShell,
    description: str = DEFAULT_RESTORE_POINT_DESCRIPTION,
) -> bool:
    """Create a system restore point. Returns False instead of raising.

    Windows throttles restore points to one per 24 hours; the creation
    frequency is lifted first so a fresh machine always gets one.
    """
    safe_description = description.replace("'", "''")
    script = (
        "$ErrorActionPreference = 'Stop'; "
        "Enable-ComputerRestore -Drive \"$env:SystemDrive\\\" -ErrorAction SilentlyContinue; "
        "New-ItemProperty -Path 'HKLM:\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\SystemRestore' "
        "-Name SystemRestorePointCreationFrequency -Value 0 -PropertyType DWord -Force | Out-Null; "
        f"Checkpoint-Computer -Description '{safe_description}' -RestorePointType 'MODIFY_SETTINGS'"
    )
    logger.info("Creating restore point: %s", description)
    try:
        code = shell.run_powershell(script)
    except Exception as e:
        logger.warning("Restore point creation raised: %s", e)
        return False
    if code != 0:
        logger.warning("Restore point could not be created (exit %d)", code)
        return False
    logger.info("Restore point created")
    return True
