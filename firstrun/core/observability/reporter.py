"""
Reporter — the progress and summary side channel.

The batch executor and the actions never print. They call a Reporter
handed to them at construction time. The CLI passes a console
reporter, tests pass a recording one, and anything else gets the
logging reporter.

Reporter hooks must not influence control flow. The executor guards
every call, so a broken reporter degrades to a log line.
"""

from __future__ import annotations

import logging

from firstrun.core.models.result import OperationResult

logger = logging.getLogger(__name__)


class Reporter:
    """No-op base reporter. Override the hooks you care about."""

    def on_progress(self, current: int, total: int, label: str) -> None:
        """Called before each entry's action runs (``current`` is 1-based)."""

    def on_notice(self, title: str, message: str) -> None:
        """Free-form information the operator should see (manual steps)."""

    def on_batch_complete(self, label: str, result: OperationResult) -> None:
        """Called once per batch with its final result."""


class LogReporter(Reporter):
    """Reporter that routes everything to the logging system."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def on_progress(self, current: int, total: int, label: str) -> None:
        self._log.info("[%d/%d] %s", current, total, label)

    def on_notice(self, title: str, message: str) -> None:
        self._log.warning("%s: %s", title, message)

    def on_batch_complete(self, label: str, result: OperationResult) -> None:
        self._log.info(
            "%s: %d succeeded, %d failed, %d skipped",
            label,
            len(result.success),
            len(result.failed),
            len(result.skipped),
        )
        for name in result.failed:
            self._log.warning("%s failed: %s", label, name)


def notify(reporter: Reporter | None, hook: str, *args: object) -> None:
    """Call a reporter hook, never letting it break the caller."""
    if reporter is None:
        return
    try:
        getattr(reporter, hook)(*args)
    except Exception as e:
        logger.warning("Reporter %s failed: %s", hook, e)
