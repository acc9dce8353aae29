"""
Run history — append-only record of every batch that ran.

One NDJSON line per batch: when it ran, which subsystem, in which
mode, and which entries landed in which bucket. ``firstrun history``
reads it back. Lines are never rewritten; a corrupt line is skipped
on read.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from firstrun.core.models.result import OperationResult

logger = logging.getLogger(__name__)

HISTORY_FILE = "history.ndjson"


class HistoryEntry(BaseModel):
    """A single batch in the run history."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    kind: str = ""                 # software, tweaks, bloatware
    mode: str = ""                 # recommended, explicit
    mock: bool = False

    status: str = ""               # ok, partial, failed
    succeeded: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    error: str | None = None

    @classmethod
    def from_result(cls, result: OperationResult, **fields) -> HistoryEntry:
        return cls(
            status=result.status,
            succeeded=list(result.success),
            failed=list(result.failed),
            skipped=list(result.skipped),
            **fields,
        )

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)


class HistoryWriter:
    """Appends to and reads back ``<log_dir>/history.ndjson``."""

    def __init__(self, log_dir: Path):
        self._path = log_dir / HISTORY_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: HistoryEntry) -> None:
        """Append one entry. Write failures are logged, never raised."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("History entry written: %s/%s", entry.kind, entry.operation_id)
        except OSError as e:
            logger.error("Failed to write history entry: %s", e)

    def read_all(self) -> list[HistoryEntry]:
        """All entries, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(HistoryEntry.model_validate(json.loads(line)))
                    except (json.JSONDecodeError, ValidationError) as e:
                        logger.warning("Skipping corrupt history entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read history: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[HistoryEntry]:
        if n <= 0:
            return []
        return self.read_all()[-n:]

    def entry_count(self) -> int:
        if not self._path.is_file():
            return 0
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return sum(1 for line in f if line.strip())
        except OSError:
            return 0
