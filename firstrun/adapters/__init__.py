"""Adapters — bindings to the package manager, app store, registry and shell.

Public re-exports for convenient access.
"""

from firstrun.adapters.base import (
    Adapter,
    AppPackageStore,
    PackageManager,
    RegistryEditor,
    SystemShell,
)
from firstrun.adapters.registry import AdapterRegistry, build_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "AppPackageStore",
    "PackageManager",
    "RegistryEditor",
    "SystemShell",
    "build_registry",
]
