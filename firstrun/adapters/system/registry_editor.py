"""
Registry adapter — value writes through winreg, reg.exe for the rest.

Direct writes use winreg. Keys that refuse a direct write (policy keys,
ACL-protected keys) get a second chance through ``reg add``, and
backups are taken with ``reg export``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from firstrun.adapters.base import RegistryData, RegistryEditor
from firstrun.adapters.shell.command import run_command

try:  # Windows-only standard module
    import winreg
except ImportError:  # pragma: no cover - not available on Linux runners
    winreg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_HIVE_ALIASES = {
    "HKLM": "HKLM",
    "HKEY_LOCAL_MACHINE": "HKLM",
    "HKCU": "HKCU",
    "HKEY_CURRENT_USER": "HKCU",
    "HKCR": "HKCR",
    "HKEY_CLASSES_ROOT": "HKCR",
    "HKU": "HKU",
    "HKEY_USERS": "HKU",
    "HKCC": "HKCC",
    "HKEY_CURRENT_CONFIG": "HKCC",
}

# short hive → winreg.HKEY_* suffix
_HIVE_CONSTANTS = {
    "HKLM": "LOCAL_MACHINE",
    "HKCU": "CURRENT_USER",
    "HKCR": "CLASSES_ROOT",
    "HKU": "USERS",
    "HKCC": "CURRENT_CONFIG",
}


def split_registry_path(path: str) -> tuple[str, str]:
    """Split any common registry path spelling into (hive, subkey).

    Accepts ``HKCU:\\Software\\X``, ``HKCU\\Software\\X``,
    ``HKEY_CURRENT_USER\\Software\\X`` and ``Registry::HKEY_...`` forms.

    Raises:
        ValueError: If the hive is not recognised.
    """
    cleaned = path.strip().replace("/", "\\")
    if cleaned.lower().startswith("registry::"):
        cleaned = cleaned[len("registry::"):]
    hive, _, subkey = cleaned.partition("\\")
    hive = hive.rstrip(":").upper()
    if hive not in _HIVE_ALIASES:
        raise ValueError(f"Unsupported registry hive in {path!r}")
    return _HIVE_ALIASES[hive], subkey.strip("\\")


def reg_tool_key(path: str) -> str:
    """Key spelling understood by reg.exe (``HKCU\\Software\\X``)."""
    hive, subkey = split_registry_path(path)
    return f"{hive}\\{subkey}" if subkey else hive


def reg_tool_data(value: RegistryData, value_type: str) -> str:
    """Render a value as the ``/d`` argument of ``reg add``."""
    if value_type == "REG_MULTI_SZ" and isinstance(value, list):
        return "\\0".join(value)
    if value_type == "REG_BINARY":
        return _binary_hex(value)
    if value_type in ("REG_DWORD", "REG_QWORD"):
        return str(_as_int(value))
    return str(value)


def _as_int(value: RegistryData) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 0)
    raise ValueError(f"Expected an integer value, got {value!r}")


def _binary_hex(value: RegistryData) -> str:
    if isinstance(value, list):
        value = "".join(value)
    return str(value).replace(",", "").replace(" ", "")


def _winreg_value(value: RegistryData, value_type: str) -> tuple[int, object]:
    """Convert catalog data to (winreg type constant, winreg data)."""
    if value_type == "REG_DWORD":
        return winreg.REG_DWORD, _as_int(value)
    if value_type == "REG_QWORD":
        return winreg.REG_QWORD, _as_int(value)
    if value_type == "REG_EXPAND_SZ":
        return winreg.REG_EXPAND_SZ, str(value)
    if value_type == "REG_MULTI_SZ":
        return winreg.REG_MULTI_SZ, list(value) if isinstance(value, list) else [str(value)]
    if value_type == "REG_BINARY":
        return winreg.REG_BINARY, bytes.fromhex(_binary_hex(value))
    return winreg.REG_SZ, str(value)


class WindowsRegistryAdapter(RegistryEditor):
    """The local machine's registry."""

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "registry"

    def is_available(self) -> bool:
        return winreg is not None

    def write_value(
        self,
        path: str,
        value_name: str,
        value: RegistryData,
        value_type: str,
    ) -> bool:
        if winreg is None:
            return False
        try:
            hive, subkey = split_registry_path(path)
            root = getattr(winreg, f"HKEY_{_HIVE_CONSTANTS[hive]}")
            kind, data = _winreg_value(value, value_type)
            with winreg.CreateKeyEx(root, subkey, 0, winreg.KEY_SET_VALUE) as key:
                winreg.SetValueEx(key, value_name, 0, kind, data)
        except (OSError, ValueError) as e:
            logger.debug("Direct write %s\\%s failed: %s", path, value_name, e)
            return False
        logger.debug("Set %s\\%s = %r (%s)", path, value_name, value, value_type)
        return True

    def export_key(self, path: str, destination: Path) -> bool:
        try:
            key = reg_tool_key(path)
        except ValueError as e:
            logger.debug("Cannot export %s: %s", path, e)
            return False
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("Cannot create %s: %s", destination.parent, e)
            return False
        return self.run_tool(["export", key, str(destination), "/y"]) == 0

    def run_tool(self, args: Sequence[str]) -> int:
        return run_command(["reg", *args], timeout=self._timeout).returncode

