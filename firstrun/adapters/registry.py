"""
Adapter registry — one place to build, swap and inspect adapters.

A session never constructs adapters itself. The CLI builds a registry
(real adapters, or mocks in mock mode) and the session pulls the four
collaborators it needs from it.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from firstrun.adapters.base import (
    Adapter,
    AppPackageStore,
    PackageManager,
    RegistryEditor,
    SystemShell,
)

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Adapter)


class AdapterRegistry:
    """Registry of adapters keyed by name.

    Features:
        - Register adapters by name
        - Typed lookup of the package manager, app store, registry
          editor and shell
        - Availability report for ``firstrun doctor``
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def require(self, kind: type[A]) -> A:
        """Return the first registered adapter implementing ``kind``.

        Raises:
            LookupError: If none is registered.
        """
        for adapter in self._adapters.values():
            if isinstance(adapter, kind):
                return adapter
        raise LookupError(f"No {kind.__name__} adapter registered")

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Get availability status of all registered adapters."""
        status = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.is_available()
            except Exception:
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": adapter.__class__.__name__,
            }
        return status

    @property
    def package_manager(self) -> PackageManager:
        return self.require(PackageManager)

    @property
    def app_store(self) -> AppPackageStore:
        return self.require(AppPackageStore)

    @property
    def registry_editor(self) -> RegistryEditor:
        return self.require(RegistryEditor)

    @property
    def shell(self) -> SystemShell:
        return self.require(SystemShell)


def build_registry(mock_mode: bool = False, timeout: int | None = None) -> AdapterRegistry:
    """Registry with the machine's adapters, or in-memory mocks.

    Args:
        mock_mode: Register mocks that never touch the machine.
        timeout: Per-command timeout for real adapters (None = unlimited).
    """
    registry = AdapterRegistry(mock_mode=mock_mode)

    if mock_mode:
        from firstrun.adapters.mock import (
            MockAppPackageStore,
            MockPackageManager,
            MockRegistryEditor,
            MockSystemShell,
        )

        registry.register(MockPackageManager())
        registry.register(MockAppPackageStore())
        registry.register(MockRegistryEditor())
        registry.register(MockSystemShell())
        return registry

    from firstrun.adapters.packages.appx import AppxAdapter
    from firstrun.adapters.packages.winget import WingetAdapter
    from firstrun.adapters.shell.command import ShellCommandAdapter
    from firstrun.adapters.system.registry_editor import WindowsRegistryAdapter

    registry.register(WingetAdapter(timeout=timeout))
    registry.register(AppxAdapter(timeout=timeout))
    registry.register(WindowsRegistryAdapter(timeout=timeout))
    registry.register(ShellCommandAdapter(timeout=timeout))
    return registry
