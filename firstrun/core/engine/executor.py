"""
Batch executor — the central processing loop.

Takes an ordered list of catalog entries and one action, runs the
action for each entry, and files every entry name into exactly one
bucket of an OperationResult.

Flow per entry:
    progress → protection guard → action → classify

Errors never cross an entry boundary: an exception raised while
processing one entry is logged and counted as Failed, and the batch
moves on to the next entry.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Callable, Protocol, Sequence

from firstrun.core.models.result import OperationResult, Outcome
from firstrun.core.observability.reporter import Reporter, notify

logger = logging.getLogger(__name__)


class _Named(Protocol):
    @property
    def name(self) -> str: ...


Action = Callable[[_Named], Outcome]
ProtectionCheck = Callable[[_Named], bool]

_STATUS_MARKERS = {
    Outcome.SUCCESS: "✓",
    Outcome.FAILED: "✗",
    Outcome.SKIPPED: "⊘",
}


def run_batch(
    entries: Sequence[_Named],
    action: Action,
    *,
    protection_check: ProtectionCheck | None = None,
    reporter: Reporter | None = None,
    label: str = "batch",
) -> OperationResult:
    """Process entries in order and classify each one.

    Args:
        entries: Entries to process, already filtered and ordered.
        action: Called once per unprotected entry; returns its Outcome.
        protection_check: Optional guard; a match records Skipped and
            the action is never invoked for that entry.
        reporter: Progress and summary sink.
        label: Batch name used in logs and the summary.

    Returns:
        OperationResult with one name per processed entry.
    """
    result = OperationResult()
    total = len(entries)

    if total == 0:
        logger.info("%s: nothing to process", label)
        notify(reporter, "on_batch_complete", label, result)
        return result

    logger.info("%s: processing %d entries", label, total)

    for index, entry in enumerate(entries, start=1):
        name = entry.name
        notify(reporter, "on_progress", index, total, name)

        try:
            if protection_check is not None and protection_check(entry):
                logger.info("⊘ %s is protected, skipping", name)
                outcome = Outcome.SKIPPED
            else:
                outcome = Outcome(action(entry))
        except Exception:
            logger.exception("Unexpected error while processing %s", name)
            outcome = Outcome.FAILED

        result.record(name, outcome)
        logger.info("%s %s → %s", _STATUS_MARKERS[outcome], name, outcome.value)

    notify(reporter, "on_batch_complete", label, result)
    return result


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
