"""
Apply-tweak action — registry writes and system commands.

A tweak has up to two phases, each with its own status:

    registry phase   every value written, with a reg.exe fallback
    command phase    every power-config command run in order

A failing value or command marks its phase Failed but never stops the
remaining steps. The tweak's outcome combines both phases: any Failed
wins, then any Success, otherwise Skipped.
"""

from __future__ import annotations

import logging

from firstrun.adapters.base import RegistryEditor, SystemShell
from firstrun.adapters.system.registry_editor import reg_tool_data, reg_tool_key
from firstrun.core.models.catalog import RegistryValue, Tweak
from firstrun.core.models.result import Outcome
from firstrun.core.services.backup import RegistryBackup

logger = logging.getLogger(__name__)


def combine_phases(*phases: Outcome) -> Outcome:
    """Fold phase statuses into the tweak's outcome."""
    if Outcome.FAILED in phases:
        return Outcome.FAILED
    if Outcome.SUCCESS in phases:
        return Outcome.SUCCESS
    return Outcome.SKIPPED


def reg_add_args(value: RegistryValue) -> list[str]:
    """Arguments for ``reg add`` writing one value."""
    return [
        "add",
        reg_tool_key(value.path),
        "/v",
        value.name,
        "/t",
        value.type,
        "/d",
        reg_tool_data(value.value, value.type),
        "/f",
    ]


class TweakAction:
    """The per-entry action for tweak batches."""

    def __init__(
        self,
        editor: RegistryEditor,
        shell: SystemShell,
        backup: RegistryBackup | None = None,
    ):
        self._editor = editor
        self._shell = shell
        self._backup = backup

    def __call__(self, tweak: Tweak) -> Outcome:
        if tweak.info:
            logger.info("%s is informational only", tweak.name)
            return Outcome.SKIPPED
        if not tweak.has_registry_phase and not tweak.has_command_phase:
            logger.warning("%s has nothing to apply", tweak.name)
            return Outcome.SKIPPED

        registry = self._apply_registry(tweak) if tweak.has_registry_phase else Outcome.SKIPPED
        commands = self._run_commands(tweak) if tweak.has_command_phase else Outcome.SKIPPED
        return combine_phases(registry, commands)

    def _apply_registry(self, tweak: Tweak) -> Outcome:
        status = Outcome.SUCCESS
        for value in tweak.registry or []:
            if self._backup is not None:
                self._backup.backup_key(value.path)
            if not self._write(value):
                logger.error("%s: could not set %s\\%s", tweak.name, value.path, value.name)
                status = Outcome.FAILED
        return status

    def _write(self, value: RegistryValue) -> bool:
        if self._editor.write_value(value.path, value.name, value.value, value.type):
            return True

        logger.debug("Direct write of %s failed, trying reg add", value.name)
        try:
            args = reg_add_args(value)
        except ValueError as e:
            logger.error("Cannot express %s for reg add: %s", value.name, e)
            return False
        return self._editor.run_tool(args) == 0

    def _run_commands(self, tweak: Tweak) -> Outcome:
        status = Outcome.SUCCESS
        for command in tweak.power_config or []:
            code = self._shell.run(command)
            if code != 0:
                logger.error("%s: '%s' exited with %d", tweak.name, command, code)
                status = Outcome.FAILED
        return status
